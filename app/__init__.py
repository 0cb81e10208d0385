import os
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash

from app.config import config_by_name
from app.extensions import db, migrate, login_manager, csrf, limiter


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from app import models  # noqa: F401

    # --- Register blueprints ---
    from app.blueprints.auth import auth_bp
    from app.blueprints.layouts import boards_bp, services_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(boards_bp)
    app.register_blueprint(services_bp)

    # JSON APIs: session cookies are SameSite=Lax and bearer clients
    # carry no cookies, so CSRF tokens are not used here
    csrf.exempt(auth_bp)
    csrf.exempt(boards_bp)
    csrf.exempt(services_bp)

    # --- Root route ---
    @app.route("/")
    def index():
        """Health/landing endpoint."""
        return jsonify({"status": "ok"})

    # --- Error handlers ---
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "Internal server error"}), 500

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Control referrer information
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Permissions Policy (restrict browser features)
        response.headers["Permissions-Policy"] = (
            "camera=(), microphone=(), geolocation=()"
        )
        # Content Security Policy: API responses only, nothing to load
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none';"
        )
        # Strict Transport Security (only in production)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("seed-demo")
    @click.option("--email", default="demo@casetrack.local", help="Demo user email")
    @click.option("--password", default="demo12345", help="Demo user password")
    def seed_demo(email, password):
        """Create a demo user with sample applications on a board and a service.

        Usage:
            flask seed-demo
            flask seed-demo --email nurse@example.com --password s3cret
        """
        from app.models.user import User
        from app.services.application_service import create_application
        from app.services.layouts import board_engine, service_engine

        # --- 1. Demo user ---
        user = User.query.filter_by(email=email).first()
        if user:
            click.echo(f"Demo user already exists: {email}")
        else:
            user = User(
                email=email,
                password_hash=generate_password_hash(password),
                full_name="Demo Nurse",
                role="client",
            )
            db.session.add(user)
            db.session.flush()
            click.echo(f"Created demo user: {email}")

        # --- 2. Sample applications ---
        titles = [
            "NCLEX-RN Registration",
            "Board of Nursing License Endorsement",
            "CGFNS Credentials Evaluation",
            "VisaScreen Certificate",
            "IELTS Score Submission",
        ]
        applications = [create_application(user.id, title) for title in titles]
        db.session.commit()

        # --- 3. Board + service with default lanes ---
        board = board_engine.create_container(user.id, "Visa Cases")
        service = service_engine.create_container(user.id, "License Processing")

        board_lanes = board_engine.lanes_of(board.id)
        service_lanes = service_engine.lanes_of(service.id)
        for index, application in enumerate(applications):
            board_engine.add_item(
                user.id, application.id, board_lanes[index % len(board_lanes)].id
            )
            service_engine.add_item(user.id, application.id, service_lanes[0].id)

        click.echo("")
        click.echo("=" * 60)
        click.echo("Seed data created successfully!")
        click.echo("=" * 60)
        click.echo(f"  User:         {email} / {password}")
        click.echo(f"  Applications: {len(applications)}")
        click.echo(f"  Board:        {board.name} (id: {board.id})")
        click.echo(f"  Service:      {service.name} (id: {service.id})")
        click.echo("=" * 60)

    @app.cli.command("renumber-lanes")
    @click.option(
        "--family",
        type=click.Choice(["boards", "services", "all"]),
        default="all",
        help="Which layout family to repair.",
    )
    def renumber_lanes(family):
        """Rewrite every lane's application positions to 0..n-1.

        Repairs gaps and ties left by older data or manual edits.

        Usage:
            flask renumber-lanes
            flask renumber-lanes --family services
        """
        from app.services.layouts import ENGINES

        names = list(ENGINES) if family == "all" else [family]
        for name in names:
            changed = ENGINES[name].renumber_all()
            click.echo(f"{name}: {changed} positions updated")
