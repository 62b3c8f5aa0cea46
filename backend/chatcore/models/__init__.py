# backend/chatcore/models/__init__.py
from .user import User
from .group import ChatGroup, GroupMember
from .message import Message
from .read_status import ReadStatus

__all__ = ["User", "ChatGroup", "GroupMember", "Message", "ReadStatus"]
