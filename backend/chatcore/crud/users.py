# backend/chatcore/crud/users.py
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from chatcore.core.timeutil import utcnow
from chatcore.db.session import store_guard
from chatcore.models.user import User

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_by_username(db: Session, username: str) -> User | None:
    stmt = select(User).where(User.username == username)
    return db.execute(stmt).scalar_one_or_none()


def create_user(db: Session, username: str, email: str, password_hash: str) -> User:
    """Register a user record. Hashing the password is the caller's job."""
    u = User(
        username=username,
        email=email,
        password_hash=password_hash,
    )

    with store_guard(db, "create user"):
        db.add(u)
        db.commit()
        db.refresh(u)
    return u


def _set_presence(db: Session, user: User, online: bool) -> User:
    with store_guard(db, "update presence"):
        user.is_online = online
        user.last_seen = utcnow()
        db.commit()
        db.refresh(user)
    return user


def mark_online(db: Session, user: User) -> User:
    _set_presence(db, user, True)
    logger.info("User %s online", user.id)
    return user


def mark_offline(db: Session, user: User) -> User:
    _set_presence(db, user, False)
    logger.info("User %s offline", user.id)
    return user
