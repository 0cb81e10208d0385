"""Auth blueprint — /auth/*

JSON login, logout and current-user lookup for the board/service client.

Route Map:
  POST /auth/login   — email + password, starts a session
  POST /auth/logout  — ends the session
  GET  /auth/me      — the logged-in user
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash

from app.extensions import db, limiter
from app.models.audit import AuditEvent
from app.models.user import User

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _user_dict(user):
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
    }


# ──────────────────────────────────────────────
# POST /auth/login
# ──────────────────────────────────────────────

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("15 per minute")
def login():
    """Standard email + password login."""
    data = request.get_json(silent=True) or {}
    email = str(data.get("email", "")).lower().strip()
    password = str(data.get("password", ""))
    remember = bool(data.get("remember"))

    if not email or not password:
        return jsonify({"error": "Email and password are required."}), 400

    user = User.query.filter_by(email=email).first()

    if user is None or not check_password_hash(user.password_hash, password):
        return jsonify({"error": "Invalid email or password."}), 401

    if not user.is_active:
        return jsonify({"error": "Your account has been deactivated."}), 403

    login_user(user, remember=remember)

    db.session.add(AuditEvent(actor_user_id=user.id, action="user.logged_in"))
    db.session.commit()

    return jsonify(_user_dict(user))


# ──────────────────────────────────────────────
# POST /auth/logout
# ──────────────────────────────────────────────

@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    return jsonify({"success": True})


# ──────────────────────────────────────────────
# GET /auth/me
# ──────────────────────────────────────────────

@auth_bp.route("/me")
@login_required
def me():
    return jsonify(_user_dict(current_user))
