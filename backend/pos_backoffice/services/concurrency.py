# Overview: Transaction boundary and row-locking helpers shared by services.

from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db

logger = logging.getLogger(__name__)


class StorageFailureError(Exception):
    """Raised when the persistence layer fails to flush or commit a unit of work."""


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    Rows already in the session are reloaded once the lock is held.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update().populate_existing()


@contextmanager
def unit_of_work():
    """
    All-or-nothing transaction around a block of service calls.

    Commits when the block exits normally. Any exception rolls back every
    change made through the session inside the block. Domain exceptions
    propagate unchanged; SQLAlchemy errors (including a failed commit) are
    re-raised as StorageFailureError.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Unit of work rolled back after storage failure")
        raise StorageFailureError(f"Database error: {exc.__class__.__name__}") from exc
    except Exception:
        session.rollback()
        raise
