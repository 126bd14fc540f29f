"""Local persistence: durable message store and key-value settings."""

from .durable import SQLiteStore
from .settings import (
    ACTIVITY_KEY,
    OFFLINE_MESSAGES_KEY,
    READ_RECEIPTS_KEY,
    SettingsStore,
)

__all__ = [
    "ACTIVITY_KEY",
    "OFFLINE_MESSAGES_KEY",
    "READ_RECEIPTS_KEY",
    "SQLiteStore",
    "SettingsStore",
]
