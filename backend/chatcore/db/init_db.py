# backend/chatcore/db/init_db.py
from sqlalchemy.engine import Engine

from chatcore.db.base import Base
from chatcore.db.session import engine as default_engine

# models must be imported so that Base.metadata knows every table
from chatcore import models  # noqa: F401


def init_db(bind: Engine | None = None) -> None:
    Base.metadata.create_all(bind=bind or default_engine)
