import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chatcore.core.security import create_access_token
from chatcore.crud import memberships
from chatcore.crud.users import create_user
from chatcore.db.base import Base
from chatcore.db.init_db import init_db
from chatcore.db.session import build_engine, get_db
from chatcore.main import app


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    eng = build_engine("sqlite://", poolclass=StaticPool)
    init_db(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def file_session_factory(tmp_path):
    """
    SQLite file with a real connection pool: each session gets its own
    connection, so uncommitted work in one is invisible to the others.
    """
    eng = build_engine(f"sqlite:///{tmp_path / 'chat.db'}")
    init_db(eng)
    yield sessionmaker(bind=eng, autocommit=False, autoflush=False)
    eng.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(username: str):
        return create_user(db, username, f"{username}@example.com", f"argon2-hash-of-{username}")
    return _make


@pytest.fixture
def users(make_user):
    """sam, alice, bob, carol (ids captured up front so they survive expiry)."""
    return {name: make_user(name).id for name in ("sam", "alice", "bob", "carol")}


@pytest.fixture
def group_id(db, users):
    """Group G = {sam, alice, bob}; carol is not a member."""
    group = memberships.create_group(db, "team", users["sam"])
    gid = group.id
    memberships.join_group(db, gid, users["alice"])
    memberships.join_group(db, gid, users["bob"])
    return gid


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers
