from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from chatcore.core.destination import destination_from_fields
from chatcore.core.security import get_current_actor
from chatcore.db.session import get_db
from chatcore.schemas.message import (
    MessageOut,
    MessageSendRequest,
    MessageSendResponse,
    MessageUpdateResponse,
    ReadStatusOut,
    UnreadCountOut,
)
from chatcore.services import conversations, fanout, lifecycle


router = APIRouter(prefix='/messages', tags=['messages'])


@router.post('', response_model=MessageSendResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    req: MessageSendRequest,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
) -> MessageSendResponse:
    destination = destination_from_fields(req.group_id, req.receiver_id)
    message_id = fanout.send(db, actor_id, destination, req.content)
    return MessageSendResponse(message_id=message_id)


@router.get('', response_model=List[MessageOut])
def list_messages(
    group_id: Optional[str] = None,
    receiver_id: Optional[str] = None,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """Group thread (group_id) or direct thread with a peer (receiver_id), oldest first."""
    conversation = destination_from_fields(group_id, receiver_id)
    entries = conversations.list_messages(db, actor_id, conversation)
    return [MessageOut.from_entry(e) for e in entries]


@router.get('/unread/count', response_model=UnreadCountOut)
def unread_count(
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    return UnreadCountOut(unread=fanout.get_unread_count(db, actor_id))


@router.post('/{message_id}/read', response_model=ReadStatusOut)
def mark_as_read(
    message_id: int,
    recipient_id: Optional[str] = None,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """
    Mark a copy of a message as read (the caller's own by default).
    Repeating the call is a no-op; naming someone else's copy is a 404.
    """
    return fanout.mark_read(db, actor_id, message_id, recipient_id or actor_id)


@router.get('/{message_id}/receipts', response_model=List[ReadStatusOut])
def read_receipts(
    message_id: int,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """Per-recipient read state of a message (sender only)."""
    return fanout.get_read_receipts(db, actor_id, message_id)


@router.delete('/{message_id}', response_model=MessageUpdateResponse)
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    lifecycle.delete_message(db, actor_id, message_id)
    return MessageUpdateResponse(status='deleted')
