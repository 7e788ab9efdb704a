# Overview: Retry helper for idempotent single-row operations.

from __future__ import annotations

import time

from sqlalchemy.orm.exc import StaleDataError

from ..errors import TransientError


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute an idempotent DB operation with retry on transient failures.

    Retries on TransientError (locks, deadlocks, unavailable store) and
    StaleDataError. Only for operations that are safe to repeat as a whole:
    never wrap order creation in this.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (TransientError, StaleDataError):
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
