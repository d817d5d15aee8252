# Overview: Service-layer operations for concurrency; bounded retry of data-store operations.

from __future__ import annotations

import time

from sqlalchemy.exc import DBAPIError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

# Errors worth another attempt: lost/locked connections, pool exhaustion
# and optimistic-locking conflicts on writes
TRANSIENT_ERRORS = (OperationalError, PoolTimeoutError, StaleDataError)


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, TRANSIENT_ERRORS):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def run_with_retry(
    func,
    *,
    attempts: int = 2,
    backoff_base: float = 0.05,
    on_retry=None,
    should_stop=None,
):
    """
    Execute a DB read with retry on transient data-store failures.

    Non-transient errors propagate on the first attempt. The last transient
    error propagates once `attempts` are used up. `should_stop` is checked
    before every retry so a caller deadline stops further attempts;
    `on_retry(attempt, exc)` is called before sleeping.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(attempts):
        try:
            return func()
        except Exception as exc:
            if not is_transient(exc):
                raise
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            if should_stop is not None and should_stop():
                raise
            if on_retry is not None:
                on_retry(attempt + 1, exc)
            time.sleep(backoff_base * (2 ** attempt))
