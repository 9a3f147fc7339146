# Overview: Service-layer operations for concurrency; transaction start, row locks and bounded retry.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from .errors import TransientConflict


def begin_write() -> None:
    """
    Open the current transaction as a writer.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, so the write lock is taken up
    front with BEGIN IMMEDIATE. Other DBs rely on lock_for_update instead.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts), then raises TransientConflict once the
    attempts are used up. Any other exception rolls the session back before
    it propagates, so an abandoned operation never leaves partial writes.
    """
    if attempts is None:
        attempts = current_app.config.get("LEDGER_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("LEDGER_RETRY_BACKOFF_SECONDS", 0.1)

    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            current_app.logger.warning(
                "Ledger write conflict (attempt %s/%s): %s", attempt + 1, attempts, exc
            )
            if attempt < attempts - 1:
                time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise

    raise TransientConflict(
        "Concurrent update in progress, retry the operation",
        details={"attempts": attempts},
    ) from last_exc
