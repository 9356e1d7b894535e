"""Read-validate-write transactions with retry on optimistic conflicts.

``Slot`` and ``Student`` carry a ``version`` column (SQLAlchemy
``version_id_col``); a flush based on a stale read raises ``StaleDataError``
instead of overwriting the concurrent write. The whole unit of work is then
rolled back and run again from the top, so it re-reads and re-validates.
"""
import logging

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from models import db
from scheduling.errors import TransactionConflictError

logger = logging.getLogger(__name__)

# OperationalError covers serialization failures (PostgreSQL) and
# "database is locked" (SQLite); IntegrityError a concurrent insert of the
# same slot key.
CONFLICT_ERRORS = (StaleDataError, OperationalError, IntegrityError)


def _attempt(work):
    try:
        result = work()
        db.session.commit()
        return result
    except Exception:
        db.session.rollback()
        raise


def run_transaction(work, retries=None):
    """Run ``work()`` and commit; retry the whole unit on write conflicts.

    Errors other than conflicts roll back and propagate unchanged.
    """
    if retries is None:
        retries = current_app.config.get("TRANSACTION_MAX_RETRIES", 5)

    retrying = Retrying(
        stop=stop_after_attempt(retries),
        wait=wait_random_exponential(multiplier=0.01, max=0.25),
        retry=retry_if_exception_type(CONFLICT_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    try:
        return retrying(_attempt, work)
    except RetryError as exc:
        raise TransactionConflictError() from exc.last_attempt.exception()


def locked_get(model, ident):
    """Fresh row read for update inside a transaction (None if missing).

    FOR UPDATE is honoured by PostgreSQL and ignored by SQLite, where the
    version check alone guards the write.
    """
    stmt = (
        select(model)
        .where(model.id == ident)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.session.execute(stmt).scalar_one_or_none()
