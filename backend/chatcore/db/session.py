# backend/chatcore/db/session.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from chatcore.core.config import settings
from chatcore.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def build_engine(url: str, **kwargs) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    eng = create_engine(url, connect_args=connect_args, **kwargs)

    if url.startswith("sqlite"):
        # SQLite ignores FOREIGN KEY clauses unless enabled per connection
        @event.listens_for(eng, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return eng


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_guard(db: Session, action: str) -> Iterator[Session]:
    """
    Translate storage failures into StoreUnavailable.

    Usage:
        with store_guard(db, "mark read"):
            db.execute(...)
            db.commit()
    """
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store failure during %s: %s", action, exc.__class__.__name__)
        raise StoreUnavailable(f"Message store unavailable during {action}") from exc
