"""Data models for chat messages and delivery outcomes."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MessageRole(Enum):
    """Author side of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageType(Enum):
    """How the message content should be interpreted."""

    TEXT = "text"
    IMAGE = "image"  # content is an image reference (URL or data URI)


class MessageStatus(Enum):
    """Delivery status of a message."""

    SENT = "sent"
    OFFLINE = "offline"
    FAILED = "failed"


@dataclass
class Message:
    """A single chat message.

    Only ``status`` is mutated after the message is appended to a chat;
    everything else is fixed for the message's lifetime.
    """

    id: int
    chat_id: str
    role: MessageRole
    content: str
    timestamp: int  # epoch milliseconds
    type: MessageType = MessageType.TEXT
    status: MessageStatus = MessageStatus.SENT
    sender_name: str | None = None
    is_hidden: bool = False

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible record."""
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp,
            "type": self.type.value,
            "status": self.status.value,
            "sender_name": self.sender_name,
            "is_hidden": self.is_hidden,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Message:
        """Build a message from a record produced by :meth:`to_record`.

        Raises:
            KeyError: If a required field is missing
            ValueError: If an enum field holds an unknown value
        """
        return cls(
            id=int(record["id"]),
            chat_id=str(record["chat_id"]),
            role=MessageRole(record["role"]),
            content=str(record["content"]),
            timestamp=int(record["timestamp"]),
            type=MessageType(record.get("type", MessageType.TEXT.value)),
            status=MessageStatus(record.get("status", MessageStatus.SENT.value)),
            sender_name=record.get("sender_name"),
            is_hidden=bool(record.get("is_hidden", False)),
        )


@dataclass(frozen=True)
class OfflineEntry:
    """A message waiting in the offline queue for resync."""

    message: Message
    is_offline: bool = True

    def to_record(self) -> dict[str, Any]:
        """Serialize for the persisted queue snapshot."""
        record = self.message.to_record()
        record["is_offline"] = self.is_offline
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> OfflineEntry:
        """Rebuild a queue entry from its persisted snapshot."""
        return cls(message=Message.from_record(record))


class SendOutcome(Enum):
    """What happened to an outgoing message."""

    DELIVERED = "delivered"
    QUEUED = "queued"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SendResult:
    """Result of a send call. ``message`` is None when the intent was rejected."""

    outcome: SendOutcome
    message: Message | None = None

    @property
    def delivered(self) -> bool:
        return self.outcome is SendOutcome.DELIVERED


@dataclass(frozen=True)
class DrainReport:
    """Summary of one offline queue drain pass."""

    synced: int
    remaining: int


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class MessageIdFactory:
    """Issues timestamp-derived message ids that strictly increase.

    An id is the creation time in milliseconds, bumped past the previous id
    when two messages are created within the same millisecond.
    """

    _last_id: int = field(default=0)

    def next_id(self, timestamp: int) -> int:
        self._last_id = max(timestamp, self._last_id + 1)
        return self._last_id

    def observe(self, message_id: int) -> None:
        """Account for an id issued elsewhere (e.g. rehydrated from disk)."""
        self._last_id = max(self._last_id, message_id)
