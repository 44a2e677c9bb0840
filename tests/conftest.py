import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gistdb import gists, likes, users
from gistdb.database import Base
from gistdb.models import Gist, SSHKey, User

_names = itertools.count(1)


@pytest.fixture
def session_local(monkeypatch):
    """Provide an isolated in-memory database for each test."""
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True
    )
    Base.metadata.create_all(bind=engine)
    for module in (users, likes, gists):
        monkeypatch.setattr(module, "SessionLocal", TestingSessionLocal)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def make_user(session_local):
    def _make_user(username=None, **fields):
        if username is None:
            username = f"user{next(_names)}"
        return users.create_user(User(username=username, password="hashed", **fields))

    return _make_user


@pytest.fixture
def make_gist(session_local):
    def _make_gist(owner, **fields):
        fields.setdefault("title", "snippet")
        return gists.create_gist(Gist(user_id=owner.id, **fields))

    return _make_gist


@pytest.fixture
def add_ssh_key(session_local):
    def _add_ssh_key(owner, title="laptop"):
        session = session_local()
        key = SSHKey(title=title, content="ssh-ed25519 AAAA", sha="abc123", user_id=owner.id)
        session.add(key)
        session.commit()
        session.close()
        return key

    return _add_ssh_key
