from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from chatcore.core.security import get_current_actor
from chatcore.crud import memberships
from chatcore.db.session import get_db
from chatcore.schemas.group import GroupCreateRequest, GroupDeleteResponse, GroupOut, MembershipOut

router = APIRouter(prefix='/groups', tags=['groups'])


@router.post('', response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreateRequest,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    return memberships.create_group(db, payload.name, actor_id)


@router.get('', response_model=List[GroupOut])
def list_my_groups(
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    return memberships.list_groups_for(db, actor_id)


@router.post('/{group_id}/join', response_model=MembershipOut)
def join_group(
    group_id: str,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    return memberships.join_group(db, group_id, actor_id)


@router.post('/{group_id}/leave', response_model=MembershipOut)
def leave_group(
    group_id: str,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    return memberships.leave_group(db, group_id, actor_id)


@router.delete('/{group_id}', response_model=GroupDeleteResponse)
def delete_group(
    group_id: str,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_current_actor),
):
    """Delete a group (creator only). Its memberships end and its messages are hidden."""
    memberships.delete_group(db, actor_id, group_id)
    return GroupDeleteResponse(status='deleted')
