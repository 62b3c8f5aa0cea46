# backend/chatcore/crud/memberships.py
"""
Membership store.

The messaging core only reads from here (members_of at send time, is_member at
read time). The create/join/leave/delete helpers are the thin management
surface the HTTP layer exposes.
"""
from __future__ import annotations

import logging
from typing import List, Set

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from chatcore.core.errors import AlreadyMember, GroupNotFound, NotAMember, NotGroupCreator
from chatcore.core.timeutil import utcnow
from chatcore.db.session import store_guard
from chatcore.models.group import ChatGroup, GroupMember
from chatcore.models.message import Message

logger = logging.getLogger(__name__)


def members_of(db: Session, group_id: str) -> Set[str]:
    stmt = select(GroupMember.user_id).where(
        GroupMember.group_id == group_id,
        GroupMember.left_at.is_(None),
    )
    return set(db.execute(stmt).scalars().all())


def is_member(db: Session, group_id: str, user_id: str) -> bool:
    stmt = select(GroupMember.user_id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
        GroupMember.left_at.is_(None),
    )
    return db.execute(stmt).first() is not None


def get_group(db: Session, group_id: str) -> ChatGroup | None:
    group = db.get(ChatGroup, group_id)
    if group is None or group.is_deleted:
        return None
    return group


def create_group(db: Session, name: str, creator_id: str) -> ChatGroup:
    """Create a group; the creator becomes its first member."""
    with store_guard(db, "create group"):
        group = ChatGroup(name=name, created_by=creator_id)
        db.add(group)
        db.flush()

        db.add(GroupMember(group_id=group.id, user_id=creator_id, joined_at=utcnow()))
        db.commit()
        db.refresh(group)

    logger.info("Group %s created by %s", group.id, creator_id)
    return group


def join_group(db: Session, group_id: str, user_id: str) -> GroupMember:
    with store_guard(db, "join group"):
        if get_group(db, group_id) is None:
            raise GroupNotFound()

        membership = db.get(GroupMember, (group_id, user_id))

        if membership is not None and membership.is_active:
            raise AlreadyMember()

        if membership is None:
            membership = GroupMember(group_id=group_id, user_id=user_id, joined_at=utcnow())
            db.add(membership)
        else:
            # re-join: new eligibility window starts now
            membership.joined_at = utcnow()
            membership.left_at = None

        db.commit()
        db.refresh(membership)

    logger.info("User %s joined group %s", user_id, group_id)
    return membership


def leave_group(db: Session, group_id: str, user_id: str) -> GroupMember:
    with store_guard(db, "leave group"):
        if get_group(db, group_id) is None:
            raise GroupNotFound()

        membership = db.get(GroupMember, (group_id, user_id))
        if membership is None or not membership.is_active:
            raise NotAMember()

        membership.left_at = utcnow()
        db.commit()
        db.refresh(membership)

    logger.info("User %s left group %s", user_id, group_id)
    return membership


def delete_group(db: Session, actor_id: str, group_id: str) -> ChatGroup:
    """
    Soft-delete a group (creator only).

    In one transaction: the group is stamped deleted, every active membership
    is ended and every live message of the group is soft-deleted. Rows stay in
    storage; status rows of those messages become hidden like any other
    deleted message's.
    """
    with store_guard(db, "delete group"):
        group = get_group(db, group_id)
        if group is None:
            raise GroupNotFound()
        if group.created_by != actor_id:
            raise NotGroupCreator("Only the creator can delete this group")

        now = utcnow()
        group.deleted_at = now
        db.execute(
            update(GroupMember)
            .where(GroupMember.group_id == group_id, GroupMember.left_at.is_(None))
            .values(left_at=now)
            .execution_options(synchronize_session=False)
        )
        db.execute(
            update(Message)
            .where(Message.group_id == group_id, Message.deleted_at.is_(None))
            .values(deleted_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(group)

    logger.info("Group %s deleted by %s", group_id, actor_id)
    return group


def list_groups_for(db: Session, user_id: str) -> List[ChatGroup]:
    stmt = (
        select(ChatGroup)
        .join(GroupMember, GroupMember.group_id == ChatGroup.id)
        .where(
            GroupMember.user_id == user_id,
            GroupMember.left_at.is_(None),
            ChatGroup.deleted_at.is_(None),
        )
        .order_by(ChatGroup.created_at, ChatGroup.id)
    )
    with store_guard(db, "list groups"):
        return list(db.execute(stmt).scalars().all())
