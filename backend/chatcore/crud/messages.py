# backend/chatcore/crud/messages.py
"""Message store: persistence and thread queries for Message rows."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.orm import Session

from chatcore.core.destination import Destination, destination_fields
from chatcore.models.message import Message


def insert_message(
    db: Session,
    sender_id: str,
    destination: Destination,
    content: str,
    sent_at: datetime,
) -> Message:
    """Add a Message to the session and flush it so the id is assigned. Does not commit."""
    group_id, receiver_id = destination_fields(destination)

    msg = Message(
        sender_id=sender_id,
        group_id=group_id,
        receiver_id=receiver_id,
        content=content,
        sent_at=sent_at,
    )
    db.add(msg)
    db.flush()
    return msg


def get_message(db: Session, message_id: int) -> Message | None:
    """Live message by id; soft-deleted messages are treated as missing."""
    msg = db.get(Message, message_id)
    if msg is None or msg.is_deleted:
        return None
    return msg


def _chronological(stmt: Select) -> Select:
    return stmt.where(Message.deleted_at.is_(None)).order_by(Message.sent_at.asc(), Message.id.asc())


def group_thread_query(group_id: str) -> Select:
    return _chronological(select(Message).where(Message.group_id == group_id))


def direct_thread_query(user_id: str, peer_id: str) -> Select:
    # both directions of the conversation
    return _chronological(
        select(Message).where(
            or_(
                and_(Message.sender_id == user_id, Message.receiver_id == peer_id),
                and_(Message.sender_id == peer_id, Message.receiver_id == user_id),
            )
        )
    )
