"""
Error taxonomy of the messaging core.

Every failure a caller can see is one of these kinds plus a human-readable
cause. Storage-specific exceptions are chained (``raise ... from exc``) but
never exposed in ``detail``.
"""
from __future__ import annotations


class ChatError(Exception):
    """Base class for all errors surfaced by the core."""

    status_code: int = 400
    default_detail: str = "Request failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidDestination(ChatError):
    status_code = 400
    default_detail = "Exactly one of group_id or receiver_id is required"


class SelfMessageDisallowed(ChatError):
    status_code = 400
    default_detail = "Cannot send a direct message to yourself"


class FanoutFailed(ChatError):
    """The send unit of work failed and was rolled back. Safe to retry."""

    status_code = 500
    default_detail = "Failed to send message"


class StatusNotFound(ChatError):
    status_code = 404
    default_detail = "Status not found"


class NotAMember(ChatError):
    status_code = 403
    default_detail = "Not a member of this group"


class AlreadyMember(ChatError):
    status_code = 409
    default_detail = "Already a member of this group"


class MessageNotFound(ChatError):
    status_code = 404
    default_detail = "Message not found"


class NotMessageSender(ChatError):
    status_code = 403
    default_detail = "Only the sender can do this"


class StoreUnavailable(ChatError):
    status_code = 503
    default_detail = "Message store unavailable"


class GroupNotFound(ChatError):
    status_code = 404
    default_detail = "Group not found"


class NotGroupCreator(ChatError):
    status_code = 403
    default_detail = "Only the group creator can do this"
