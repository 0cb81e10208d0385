"""
Custom route decorators for access control.

- actor_required: resolves the acting user for board/service API routes and
  stores their id on g.actor_id. Accepts a Flask-Login session, or a Bearer
  token matching LAYOUT_API_KEY plus an X-Acting-User header (automation
  clients acting on a user's behalf).
"""

import hmac
from functools import wraps

from flask import current_app, g, jsonify, request
from flask_login import current_user

from app.extensions import db


def actor_required(f):
    """Require an authenticated, active acting user."""

    @wraps(f)
    def decorated(*args, **kwargs):
        # Check Bearer token first (for bot/external access)
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
            expected = current_app.config.get("LAYOUT_API_KEY") or ""
            if not expected or not hmac.compare_digest(token, expected):
                return jsonify({"error": "Invalid API key"}), 401

            # Imported lazily to avoid circular imports at app creation
            from app.models.user import User

            acting_id = request.headers.get("X-Acting-User", "")
            user = db.session.get(User, acting_id) if acting_id else None
            if user is None or not user.is_active:
                return jsonify({"error": "Unknown acting user"}), 401
            g.actor_id = user.id
            return f(*args, **kwargs)

        # Fall back to session auth
        if not current_user.is_authenticated or not current_user.is_active:
            return jsonify({"error": "Authentication required"}), 401
        g.actor_id = current_user.id
        return f(*args, **kwargs)

    return decorated
