import os


def _int_env(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


class Config:
    """Base configuration. Shared across all environments."""

    # --- Required ---
    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Handle DATABASE_URL: some PaaS providers (Railway, Heroku) use
    # "postgres://" which SQLAlchemy 1.4+ doesn't accept.
    _db_url = os.environ.get("DATABASE_URL", "")
    if _db_url.startswith("postgres://"):
        _db_url = _db_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _db_url or None

    # --- Boards / services ---
    DEFAULT_CONTAINER_COLOR = os.environ.get("DEFAULT_CONTAINER_COLOR", "#3b82f6")
    DEFAULT_LANE_COLOR = os.environ.get("DEFAULT_LANE_COLOR", "#6b7280")
    # Seeded on every new board/service, in order (positions 0, 1, 2, ...)
    DEFAULT_LANE_NAMES = [
        name.strip()
        for name in os.environ.get(
            "DEFAULT_LANE_NAMES", "To Do,In Progress,Done"
        ).split(",")
        if name.strip()
    ]
    # How many unplaced applications the layout view offers for adding
    AVAILABLE_ITEMS_LIMIT = _int_env("AVAILABLE_ITEMS_LIMIT", 50)

    # Bearer token for automation clients (sent with X-Acting-User).
    # Unset = token auth disabled.
    LAYOUT_API_KEY = os.environ.get("LAYOUT_API_KEY")

    # --- SQLAlchemy ---
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # --- Session / cookies ---
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = "Lax"

    # --- WTF / CSRF ---
    WTF_CSRF_ENABLED = True

    @staticmethod
    def validate():
        """Fail fast if required env vars are missing."""
        required = [
            "SECRET_KEY",
            "DATABASE_URL",
        ]
        missing = [v for v in required if not os.environ.get(v)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


class DevConfig(Config):
    """Local development."""

    DEBUG = True
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI or "sqlite:///casetrack-dev.db"


class TestConfig(Config):
    """Testing — in-memory SQLite, CSRF disabled."""

    TESTING = True
    DEBUG = True
    SECRET_KEY = "test-secret-key-not-for-production"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    DEFAULT_LANE_NAMES = ["To Do", "In Progress", "Done"]
    AVAILABLE_ITEMS_LIMIT = 50
    LAYOUT_API_KEY = "layout-test-key"
    WTF_CSRF_ENABLED = False  # disable CSRF for test forms
    RATELIMIT_ENABLED = False  # disable rate limiting in tests
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    SERVER_NAME = "localhost"

    @staticmethod
    def validate():
        """Skip validation in test mode — everything is hardcoded."""
        pass


class ProdConfig(Config):
    """Production."""

    DEBUG = False
    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True


config_by_name = {
    "development": DevConfig,
    "production": ProdConfig,
    "testing": TestConfig,
}
