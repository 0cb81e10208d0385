# Models package — import all models here so Alembic can discover them.

from app.models.user import User  # noqa: F401
from app.models.board import Board, BoardList  # noqa: F401
from app.models.service import Service, ServiceStage  # noqa: F401
from app.models.application import Application, ApplicationTimeline  # noqa: F401
from app.models.audit import AuditEvent  # noqa: F401
