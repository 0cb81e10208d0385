"""Shared test fixtures for the case-tracking test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, CSRF off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- seed_data: an owner with five unplaced applications, plus a second
  user ("outsider") with one application of their own
- engine: parametrized over the board and service repositioning engines
"""

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from app.extensions import db as _db
from app.models.user import User
from app.services.application_service import create_application
from app.services.layouts import ENGINES


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after.

    The app context stays pushed for the whole test, so tests, the engine
    and test-client requests all share one session.
    """
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture(params=sorted(ENGINES))
def engine(request):
    """Run a test once against boards and once against services."""
    return ENGINES[request.param]


def make_user(db_session, email, role="client", password="password123", is_active=True):
    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        full_name=email.split("@")[0].title(),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.flush()
    return user


@pytest.fixture
def seed_data(db_session):
    """Seed an owner with applications and an unrelated second user.

    Returns a dict with the created objects and their plain ids.
    """
    owner = make_user(db_session, "nurse@example.com")
    outsider = make_user(db_session, "other@example.com")

    applications = [
        create_application(owner.id, title)
        for title in (
            "NCLEX-RN Registration",
            "License Endorsement",
            "CGFNS Credentials Evaluation",
            "VisaScreen Certificate",
            "IELTS Score Submission",
        )
    ]
    foreign_application = create_application(outsider.id, "Outsider Case")
    db_session.commit()

    return {
        "owner": owner,
        "owner_id": owner.id,
        "outsider": outsider,
        "outsider_id": outsider.id,
        "applications": applications,
        "application_ids": [a.id for a in applications],
        "foreign_application": foreign_application,
        "foreign_application_id": foreign_application.id,
    }


def api_headers(app, user_id):
    """Bearer-token headers acting as ``user_id``."""
    return {
        "Authorization": f"Bearer {app.config['LAYOUT_API_KEY']}",
        "X-Acting-User": user_id,
    }
