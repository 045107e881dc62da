# Overview: Retry and error translation around database work.

from __future__ import annotations

import time

from sqlalchemy.exc import DBAPIError, OperationalError

from ..errors import RepositoryUnavailableError
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for read-modify-write operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, session=None):
    """
    Execute a DB operation with retry on transient failures.

    session is the one the operation works in; it is rolled back before each
    retry. Defaults to the Flask-SQLAlchemy scoped session.

    Retries on OperationalError (lost connection, locked database, deadlock).
    When the last attempt fails the error is re-raised as
    RepositoryUnavailableError so callers only ever see typed errors.
    """
    session = session if session is not None else db.session
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError as exc:
            session.rollback()
            if attempt >= attempts - 1:
                raise RepositoryUnavailableError(f"Database unavailable: {exc.orig}") from exc
            time.sleep(backoff_base * (2 ** attempt))
        except DBAPIError as exc:
            if exc.connection_invalidated:
                session.rollback()
                raise RepositoryUnavailableError("Database connection lost") from exc
            raise
