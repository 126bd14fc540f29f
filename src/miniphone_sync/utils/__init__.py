"""Utility functions and helpers.

This module provides various utilities for the sync client:
- async_helpers: Error taxonomy, retry decorators
- logging: Structured logging configuration
"""

from miniphone_sync.utils.async_helpers import (
    ConfigurationFailure,
    DeliveryFailure,
    MalformedIntent,
    PersistenceFailure,
    SyncError,
    create_retry,
    store_retry,
)
from miniphone_sync.utils.logging import LogFormat, configure_logging, log_context

__all__ = [
    # Errors
    "ConfigurationFailure",
    "DeliveryFailure",
    "MalformedIntent",
    "PersistenceFailure",
    "SyncError",
    # Retry
    "create_retry",
    "store_retry",
    # Logging
    "LogFormat",
    "configure_logging",
    "log_context",
]
