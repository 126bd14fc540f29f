"""Data models and transfer objects."""

from .chat import Chat, ChatSettings, Member
from .message import (
    DrainReport,
    Message,
    MessageIdFactory,
    MessageRole,
    MessageStatus,
    MessageType,
    OfflineEntry,
    SendOutcome,
    SendResult,
    now_ms,
)

__all__ = [
    # Chat models
    "Chat",
    "ChatSettings",
    "Member",
    # Message models
    "Message",
    "MessageIdFactory",
    "MessageRole",
    "MessageStatus",
    "MessageType",
    "OfflineEntry",
    # Outcomes
    "DrainReport",
    "SendOutcome",
    "SendResult",
    "now_ms",
]
