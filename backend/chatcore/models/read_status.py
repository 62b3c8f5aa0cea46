# backend/chatcore/models/read_status.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from chatcore.db.base import Base


class ReadStatus(Base):
    """Per-recipient read state of one message. Created only by fan-out."""
    __tablename__ = "message_statuses"
    __table_args__ = (
        CheckConstraint(
            "(is_read AND read_at IS NOT NULL) OR (NOT is_read AND read_at IS NULL)",
            name="ck_message_statuses_read_at",
        ),
        Index("ix_message_statuses_recipient_unread", "recipient_id", "is_read"),
    )

    message_id: Mapped[int] = mapped_column(ForeignKey("messages.id"), primary_key=True)
    recipient_id: Mapped[str] = mapped_column(ForeignKey("users.id"), primary_key=True)

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
