"""Pytest configuration and shared fixtures."""

import os

# Must be set before portal modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.pop("WEBHOOK_URL", None)

import pytest
from sqlalchemy.orm import sessionmaker

import portal.db.models  # noqa: F401  (registers tables)
from portal.core.actor import Actor
from portal.core.approval import ApprovalWorkflow
from portal.core.config import Settings
from portal.db.base import Base
from portal.db.session import build_engine

from tests.factories import create_user


class RecordingDispatcher:
    """Collects dispatched events instead of delivering them."""

    def __init__(self):
        self.events = []

    def dispatch(self, event):
        self.events.append(event)
        return []

    def transitions(self):
        return [(e.entity_kind, e.transition, e.from_state, e.to_state) for e in self.events]


@pytest.fixture()
def engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# ---------------------------------------------------------------------------
# Users and actors, one per role
# ---------------------------------------------------------------------------


@pytest.fixture()
def users(db_session):
    """One committed user per role, plus a second innovator."""
    created = {
        "superAdmin": create_user(db_session, role="superAdmin", name="Super Admin"),
        "admin": create_user(db_session, role="admin", name="John Admin"),
        "ipManager": create_user(db_session, role="ipManager", name="Mary IP Manager"),
        "investor": create_user(db_session, role="investor", name="Ian Investor"),
        "innovator": create_user(db_session, role="innovator", name="Alice Innovator"),
        "other_innovator": create_user(db_session, role="innovator", name="Bob Innovator"),
    }
    db_session.commit()
    return created


def _actor(user):
    return Actor(user_id=user.id, role=user.role, email=user.email)


@pytest.fixture()
def innovator(users):
    return _actor(users["innovator"])


@pytest.fixture()
def other_innovator(users):
    return _actor(users["other_innovator"])


@pytest.fixture()
def admin(users):
    return _actor(users["admin"])


@pytest.fixture()
def super_admin(users):
    return _actor(users["superAdmin"])


@pytest.fixture()
def ip_manager(users):
    return _actor(users["ipManager"])


@pytest.fixture()
def investor(users):
    return _actor(users["investor"])


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings():
    return Settings(database_url="sqlite://", notifications_enabled=True, webhook_url=None)


@pytest.fixture()
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture()
def workflow(db_session, dispatcher, settings):
    return ApprovalWorkflow(db_session, dispatcher=dispatcher, settings=settings)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture()
def client(session_factory):
    from fastapi.testclient import TestClient

    from portal.api.deps import get_session_factory
    from portal.api.main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(users):
    """Bearer headers keyed like the users fixture."""
    from portal.core.security import create_access_token

    return {
        key: {"Authorization": f"Bearer {create_access_token(user.id)}"}
        for key, user in users.items()
    }
