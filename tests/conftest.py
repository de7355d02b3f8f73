import os

# Settings are read at import time, so the environment goes first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FERNET_KEY"] = "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY="
os.environ["LINKEDIN_CLIENT_ID"] = "test-client"
os.environ["LINKEDIN_CLIENT_SECRET"] = "test-secret"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.auth import firebase
from app.db.base import Base, SessionLocal, build_engine, build_session_factory
from app.deps import get_db
from app.errors import AuthError
from app.services.draft_feed import DraftFeed
from app.services.publish import PublishGuard

ID_TOKENS = {"token-alice": "alice", "token-bob": "bob"}


def fake_verify_id_token(id_token):
    try:
        return ID_TOKENS[id_token]
    except KeyError:
        raise AuthError("Invalid bearer token")


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, monkeypatch):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.state.session_factory = session_factory
    app.state.draft_feed = DraftFeed()
    app.state.publish_guard = PublishGuard()
    monkeypatch.setattr(firebase, "verify_id_token", fake_verify_id_token)
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.article_store = None
    app.state.session_factory = SessionLocal


@pytest.fixture
def alice_headers():
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def bob_headers():
    return {"Authorization": "Bearer token-bob"}
