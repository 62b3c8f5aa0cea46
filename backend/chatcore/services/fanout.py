"""
Status fan-out engine.

send() writes a Message and one ReadStatus per recipient in a single session
transaction: either all of them are committed or none. mark_read() flips one
status row with a single conditional UPDATE so concurrent marks for the same
(message, recipient) converge on the first read_at.

Services:
    send: create a message and fan out unread statuses
    mark_read: idempotently mark one recipient's copy as read
    get_unread_count: unread statuses of a recipient over live messages
    get_read_receipts: every recipient status of a message, for its sender
"""
from __future__ import annotations

import logging
from typing import List, Set

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from chatcore.core.destination import Destination, DirectDestination, GroupDestination
from chatcore.core.errors import (
    ChatError,
    FanoutFailed,
    InvalidDestination,
    MessageNotFound,
    NotAMember,
    NotMessageSender,
    SelfMessageDisallowed,
    StatusNotFound,
)
from chatcore.core.timeutil import utcnow
from chatcore.crud import memberships
from chatcore.crud.messages import get_message, insert_message
from chatcore.crud.users import get_user
from chatcore.db.session import store_guard
from chatcore.models.message import Message
from chatcore.models.read_status import ReadStatus

logger = logging.getLogger(__name__)


def resolve_recipients(db: Session, sender_id: str, destination: Destination) -> Set[str]:
    """
    Recipient ids for a new message from sender_id.

    Group: current members minus the sender; the sender must be a member.
    Direct: the single peer, who must exist and differ from the sender.
    """
    if isinstance(destination, GroupDestination):
        members = memberships.members_of(db, destination.group_id)
        if sender_id not in members:
            raise NotAMember()
        return members - {sender_id}

    if isinstance(destination, DirectDestination):
        if destination.peer_id == sender_id:
            raise SelfMessageDisallowed()
        if get_user(db, destination.peer_id) is None:
            raise InvalidDestination("Unknown receiver")
        return {destination.peer_id}

    raise InvalidDestination(f"Unsupported destination: {destination!r}")


def send(db: Session, sender_id: str, destination: Destination, content: str) -> int:
    """Create a message and its unread statuses atomically. Returns the new message id."""
    if not isinstance(destination, (GroupDestination, DirectDestination)):
        raise InvalidDestination()

    try:
        recipients = resolve_recipients(db, sender_id, destination)

        msg = insert_message(db, sender_id, destination, content, sent_at=utcnow())
        message_id = msg.id

        db.add_all(
            ReadStatus(message_id=message_id, recipient_id=rid, is_read=False)
            for rid in sorted(recipients)
        )
        db.commit()

    except ChatError:
        db.rollback()
        raise
    except Exception as exc:
        db.rollback()
        logger.warning(
            "Fan-out rolled back for sender %s (%s): %s",
            sender_id, type(destination).__name__, exc.__class__.__name__,
        )
        raise FanoutFailed("Failed to send message; nothing was saved") from exc

    logger.info("Message %s sent by %s to %d recipient(s)", message_id, sender_id, len(recipients))
    return message_id


def _visible_status(db: Session, message_id: int, recipient_id: str) -> ReadStatus | None:
    stmt = (
        select(ReadStatus)
        .join(Message, Message.id == ReadStatus.message_id)
        .where(
            ReadStatus.message_id == message_id,
            ReadStatus.recipient_id == recipient_id,
            Message.deleted_at.is_(None),
        )
    )
    return db.execute(stmt).scalar_one_or_none()


def mark_read(db: Session, actor_id: str, message_id: int, recipient_id: str) -> ReadStatus:
    """
    Mark recipient_id's copy of a message read on behalf of actor_id.

    Only the recipient may mark their own copy; any other actor gets
    StatusNotFound, the same answer as for a row that does not exist.
    """
    if actor_id != recipient_id:
        logger.debug("Actor %s tried to mark status of %s on message %s", actor_id, recipient_id, message_id)
        raise StatusNotFound()

    live_messages = select(Message.id).where(Message.deleted_at.is_(None))

    with store_guard(db, "mark read"):
        result = db.execute(
            update(ReadStatus)
            .where(
                ReadStatus.message_id == message_id,
                ReadStatus.recipient_id == recipient_id,
                ReadStatus.is_read == False,  # noqa: E712
                ReadStatus.message_id.in_(live_messages),
            )
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        db.commit()

        status = _visible_status(db, message_id, recipient_id)

    if status is None:
        raise StatusNotFound()

    if result.rowcount:
        logger.info("Message %s read by %s", message_id, recipient_id)
    else:
        logger.debug("Message %s already read by %s", message_id, recipient_id)
    return status


def get_unread_count(db: Session, recipient_id: str) -> int:
    stmt = (
        select(func.count())
        .select_from(ReadStatus)
        .join(Message, Message.id == ReadStatus.message_id)
        .where(
            ReadStatus.recipient_id == recipient_id,
            ReadStatus.is_read == False,  # noqa: E712
            Message.deleted_at.is_(None),
        )
    )
    with store_guard(db, "unread count"):
        return db.execute(stmt).scalar_one()


def get_read_receipts(db: Session, sender_id: str, message_id: int) -> List[ReadStatus]:
    with store_guard(db, "read receipts"):
        msg = get_message(db, message_id)
        if msg is None:
            raise MessageNotFound()
        if msg.sender_id != sender_id:
            raise NotMessageSender()

        stmt = (
            select(ReadStatus)
            .where(ReadStatus.message_id == message_id)
            .order_by(ReadStatus.recipient_id)
        )
        return list(db.execute(stmt).scalars().all())
