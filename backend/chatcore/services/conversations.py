"""Conversation reader: a thread's live messages in order, with the viewer's read state."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session, joinedload

from chatcore.core.destination import Destination, DirectDestination, GroupDestination
from chatcore.core.errors import InvalidDestination, NotAMember
from chatcore.crud import memberships
from chatcore.crud.messages import direct_thread_query, group_thread_query
from chatcore.db.session import store_guard
from chatcore.models.message import Message
from chatcore.models.read_status import ReadStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationEntry:
    message: Message
    status: Optional[ReadStatus]  # None for the viewer's own messages


def list_messages(db: Session, viewer_id: str, conversation: Destination) -> List[ConversationEntry]:
    """
    Messages of a group thread or of the direct thread between viewer and peer.

    Ordered by sent_at, then id. Group threads require current membership;
    deleted messages are left out.
    """
    with store_guard(db, "list messages"):
        if isinstance(conversation, GroupDestination):
            if not memberships.is_member(db, conversation.group_id, viewer_id):
                raise NotAMember()
            stmt = group_thread_query(conversation.group_id)
        elif isinstance(conversation, DirectDestination):
            stmt = direct_thread_query(viewer_id, conversation.peer_id)
        else:
            raise InvalidDestination(f"Unsupported conversation: {conversation!r}")

        stmt = (
            stmt.add_columns(ReadStatus)
            .outerjoin(
                ReadStatus,
                and_(
                    ReadStatus.message_id == Message.id,
                    ReadStatus.recipient_id == viewer_id,
                ),
            )
            .options(joinedload(Message.sender))
        )
        rows = db.execute(stmt).all()

    logger.debug("Listed %d message(s) of %s for %s", len(rows), conversation, viewer_id)

    return [ConversationEntry(message=msg, status=status) for msg, status in rows]
