"""Shared pytest fixtures for the standards tracker test suite."""

import pytest

from standards_tracker.app import create_app
from standards_tracker.catalogue import Catalogue
from standards_tracker.storage import MemoryStore

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SECRET_KEY": "test-secret-key",
    "WTF_CSRF_ENABLED": False,
}


@pytest.fixture()
def app():
    """Create an application configured for testing with an in-memory SQLite DB."""
    application = create_app(dict(TEST_CONFIG))
    yield application


@pytest.fixture()
def make_app():
    """Build an extra test app with config overrides (e.g. CSRF enabled)."""

    def _make(**overrides):
        return create_app({**TEST_CONFIG, **overrides})

    return _make


@pytest.fixture()
def client(app):
    """A test client for the application."""
    return app.test_client()


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def catalogue(store):
    """An empty catalogue saving into an in-memory store."""
    return Catalogue.load(store)


@pytest.fixture()
def teaching(catalogue):
    """Groups Teaching (A) and Management (B) with a small tree in Teaching.

    A.1 Plan Lessons
        A.1.1 Set Objectives
        A.1.2 Prepare Resources
    A.2 Deliver Lessons

    plus one staff member, S1.
    """
    catalogue.add_group("Teaching")
    catalogue.add_group("Management")
    catalogue.add_standard("Plan Lessons", group_name="Teaching")
    catalogue.add_standard("Set Objectives", parent_code="A.1")
    catalogue.add_standard("Prepare Resources", parent_code="A.1")
    catalogue.add_standard("Deliver Lessons", group_name="Teaching")
    catalogue.add_staff("S1", "Alex Morgan")
    return catalogue


@pytest.fixture()
def api(client):
    """Client with the Teaching/Management catalogue created through the API."""
    for name in ("Teaching", "Management"):
        resp = client.post("/groups/", json={"name": name})
        assert resp.status_code == 201, f"api fixture failed: HTTP {resp.status_code}"
    for body in (
        {"name": "Plan Lessons", "group": "Teaching"},
        {"name": "Set Objectives", "parent_code": "A.1"},
        {"name": "Prepare Resources", "parent_code": "A.1"},
        {"name": "Deliver Lessons", "group": "Teaching"},
    ):
        resp = client.post("/standards/", json=body)
        assert resp.status_code == 201, f"api fixture failed: HTTP {resp.status_code}"
    resp = client.post("/staff/", json={"id": "S1", "name": "Alex Morgan"})
    assert resp.status_code == 201, f"api fixture failed: HTTP {resp.status_code}"
    return client
