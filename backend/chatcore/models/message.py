# backend/chatcore/models/message.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatcore.core.destination import Destination, DirectDestination, GroupDestination
from chatcore.core.timeutil import utcnow
from chatcore.db.base import Base


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        # exactly one addressing column is set
        CheckConstraint(
            "(group_id IS NULL) <> (receiver_id IS NULL)",
            name="ck_messages_one_destination",
        ),
        Index("ix_messages_group_thread", "group_id", "sent_at", "id"),
        Index("ix_messages_direct_thread", "sender_id", "receiver_id", "sent_at"),
    )

    # autoincrement: id order is creation order, used as the tie-break after sent_at
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    sender_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)

    group_id: Mapped[str | None] = mapped_column(ForeignKey("chat_groups.id"), nullable=True)
    receiver_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    sender = relationship("User", foreign_keys=[sender_id])

    @property
    def destination(self) -> Destination:
        if self.group_id is not None:
            return GroupDestination(group_id=self.group_id)
        return DirectDestination(peer_id=self.receiver_id)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
