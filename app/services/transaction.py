"""Explicit unit of work for service-layer operations.

Usage:
    with atomic("move application"):
        ...mutate rows via db.session...

Commits when the block finishes, rolls back on any exception. Database
failures surface as PersistenceError with a generic message; AppError
subclasses raised inside the block propagate unchanged after the rollback.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from app.errors import AppError, PersistenceError
from app.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def atomic(action):
    session = db.session
    try:
        yield session
        session.commit()
    except AppError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise PersistenceError(f"Failed to {action}.") from e
    except Exception:
        session.rollback()
        raise
