"""Tests for the /auth JSON endpoints.

Tests:
- Login with valid/invalid credentials, deactivated accounts
- Email normalization
- /auth/me and logout
- Login writes an audit event
"""

from app.models.audit import AuditEvent
from conftest import make_user


# ─── Helpers ──────────────────────────────────────────────────


def _login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})


class TestLogin:
    """POST /auth/login."""

    def test_valid_credentials(self, client, db_session):
        user = make_user(db_session, "nurse@example.com", password="s3cret-pass")
        db_session.commit()

        response = _login(client, "nurse@example.com", "s3cret-pass")

        assert response.status_code == 200
        data = response.get_json()
        assert data["id"] == user.id
        assert data["email"] == "nurse@example.com"
        assert data["role"] == "client"

    def test_email_is_case_insensitive(self, client, db_session):
        make_user(db_session, "nurse@example.com")
        db_session.commit()

        response = _login(client, "  Nurse@Example.COM ", "password123")
        assert response.status_code == 200

    def test_wrong_password(self, client, db_session):
        make_user(db_session, "nurse@example.com")
        db_session.commit()

        response = _login(client, "nurse@example.com", "nope")
        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid email or password."

    def test_unknown_email(self, client, db_session):
        response = _login(client, "ghost@example.com", "password123")
        assert response.status_code == 401

    def test_missing_fields(self, client, db_session):
        response = client.post("/auth/login", json={"email": "nurse@example.com"})
        assert response.status_code == 400

    def test_non_json_body(self, client, db_session):
        response = client.post("/auth/login", data="email=x")
        assert response.status_code == 400

    def test_deactivated_account(self, client, db_session):
        make_user(db_session, "former@example.com", is_active=False)
        db_session.commit()

        response = _login(client, "former@example.com", "password123")
        assert response.status_code == 403
        assert "deactivated" in response.get_json()["error"]

    def test_records_audit_event(self, client, db_session):
        user = make_user(db_session, "nurse@example.com")
        db_session.commit()

        _login(client, "nurse@example.com", "password123")

        event = AuditEvent.query.filter_by(action="user.logged_in").one()
        assert event.actor_user_id == user.id


class TestSession:
    """GET /auth/me and POST /auth/logout."""

    def test_me_requires_login(self, client, db_session):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.get_json()["error"] == "Authentication required"

    def test_me_after_login(self, client, db_session):
        make_user(db_session, "nurse@example.com")
        db_session.commit()
        _login(client, "nurse@example.com", "password123")

        response = client.get("/auth/me")
        assert response.status_code == 200
        assert response.get_json()["email"] == "nurse@example.com"

    def test_logout(self, client, db_session):
        make_user(db_session, "nurse@example.com")
        db_session.commit()
        _login(client, "nurse@example.com", "password123")

        response = client.post("/auth/logout")
        assert response.get_json() == {"success": True}
        assert client.get("/auth/me").status_code == 401
