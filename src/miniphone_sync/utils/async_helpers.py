"""Error taxonomy and retry helpers for I/O-bound operations.

This module provides:
- The exception hierarchy used across the sync core
- Retry decorators with exponential backoff for transient storage errors

None of these exceptions escape ``send``, ``enqueue`` or ``drain``; they are
raised by the storage and probe layers and converted into outcomes above.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Custom Exceptions
# =============================================================================


class SyncError(Exception):
    """Base exception for all sync core errors."""


class MalformedIntent(SyncError):
    """Outgoing message intent is missing content or a chat id."""


class DeliveryFailure(SyncError):
    """Immediate delivery was not possible (offline or network error)."""


class PersistenceFailure(SyncError):
    """A durable write or read failed."""


class ConfigurationFailure(SyncError):
    """Stored settings were missing or malformed."""


# =============================================================================
# Retry Decorator
# =============================================================================


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging."""
    if retry_state.outcome is None:
        return

    exception = retry_state.outcome.exception()
    if exception:
        log.warning(
            "retrying_operation",
            attempt=retry_state.attempt_number,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            wait_time=retry_state.next_action.sleep if retry_state.next_action else 0,
        )


def create_retry(
    max_attempts: int = 3,
    min_wait: float = 0.05,
    max_wait: float = 1.0,
    retry_on: tuple[type[Exception], ...] = (sqlite3.OperationalError,),
) -> Callable[[F], F]:
    """Create a customized retry decorator.

    Args:
        max_attempts: Maximum number of attempts.
        min_wait: Minimum wait time between retries (seconds).
        max_wait: Maximum wait time between retries (seconds).
        retry_on: Tuple of exception types to retry on.

    Returns:
        A retry decorator configured with the given parameters.
    """
    return retry(  # type: ignore[return-value]
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    )


# Default retry for SQLite writes: "database is locked" and friends
store_retry = create_retry()
