"""Message lifecycle: Active -> Deleted (soft, sender only, terminal)."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from chatcore.core.errors import MessageNotFound, NotMessageSender
from chatcore.core.timeutil import utcnow
from chatcore.crud.messages import get_message
from chatcore.db.session import store_guard
from chatcore.models.message import Message

logger = logging.getLogger(__name__)


def delete_message(db: Session, actor_id: str, message_id: int) -> Message:
    """
    Soft-delete a message. Content and status rows stay in storage but the
    message is hidden from readers and its statuses can no longer be marked.
    """
    with store_guard(db, "delete message"):
        msg = get_message(db, message_id)
        if msg is None:
            raise MessageNotFound()
        if msg.sender_id != actor_id:
            raise NotMessageSender("Only the sender can delete this message")

        msg.deleted_at = utcnow()
        db.commit()
        db.refresh(msg)

    logger.info("Message %s deleted by %s", message_id, actor_id)
    return msg
