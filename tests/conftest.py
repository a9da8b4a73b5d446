"""
Shared pytest fixtures for the Site Briefing Platform test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - ctx / other_ctx: RequestContext for the default and a second project
    - api_headers: headers that resolve ``ctx`` through the middleware
"""

import pytest

from app import create_app
from app.core.context import RequestContext
from app.models import db as _db

PROJECT_ID = 1
OTHER_PROJECT_ID = 2


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def ctx():
    return RequestContext(project_id=PROJECT_ID, actor_id=7, actor_name="Site Manager")


@pytest.fixture()
def other_ctx():
    return RequestContext(project_id=OTHER_PROJECT_ID, actor_id=8, actor_name="Other Manager")


@pytest.fixture()
def api_headers():
    return {"X-Project-Id": str(PROJECT_ID), "X-Actor-Id": "7", "X-Actor-Name": "Site Manager"}
