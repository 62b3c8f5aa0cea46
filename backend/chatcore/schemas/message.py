from __future__ import annotations

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from chatcore.core.config import settings
from chatcore.security.sanitizer import InputSanitizer
from chatcore.services.conversations import ConversationEntry


class MessageSendRequest(BaseModel):
    """
    Send request. Exactly one of group_id / receiver_id must be set; that
    rule is enforced when the destination is built, not here, so the caller
    gets InvalidDestination rather than a generic validation error.
    """
    model_config = ConfigDict(extra='forbid')

    group_id: Optional[str] = Field(default=None, max_length=36)
    receiver_id: Optional[str] = Field(default=None, max_length=36)
    content: str = Field(..., min_length=1, description='Message text')

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: str) -> str:
        return InputSanitizer.sanitize_content(v, max_length=settings.max_content_length)


class MessageSendResponse(BaseModel):
    model_config = ConfigDict(extra='forbid')

    message_id: int


class SenderOut(BaseModel):
    """Public view of a sender. Credentials and contact details are never included."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    is_online: bool
    last_seen: Optional[datetime] = None


class ReadStatusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message_id: int
    recipient_id: str
    is_read: bool
    read_at: Optional[datetime] = None


class MessageOut(BaseModel):
    """Message in a conversation, overlaid with the viewer's own read state."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender: SenderOut
    group_id: Optional[str] = None
    receiver_id: Optional[str] = None
    content: str
    sent_at: datetime
    # None when the viewer has no status row (their own messages)
    is_read: Optional[bool] = None
    read_at: Optional[datetime] = None

    @classmethod
    def from_entry(cls, entry: ConversationEntry) -> 'MessageOut':
        msg, status = entry.message, entry.status
        return cls(
            id=msg.id,
            sender=SenderOut.model_validate(msg.sender),
            group_id=msg.group_id,
            receiver_id=msg.receiver_id,
            content=msg.content,
            sent_at=msg.sent_at,
            is_read=status.is_read if status is not None else None,
            read_at=status.read_at if status is not None else None,
        )


class UnreadCountOut(BaseModel):
    model_config = ConfigDict(extra='forbid')

    unread: int


class MessageUpdateResponse(BaseModel):
    """Response for delete operations."""
    model_config = ConfigDict(extra='forbid')
    status: str
