"""Data models for chats and their members."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .message import Message


@dataclass(frozen=True)
class Member:
    """A group chat member, keyed by their original name."""

    original_name: str
    group_nickname: str | None = None

    @property
    def display_name(self) -> str:
        """Name used for rendering and mention matching."""
        return self.group_nickname or self.original_name


@dataclass
class ChatSettings:
    """Per-chat presentation settings."""

    my_nickname: str | None = None


@dataclass
class Chat:
    """A conversation thread and its ordered message history.

    ``history`` is ordered by arrival, which is the authoritative order.
    """

    id: str
    name: str
    is_group: bool = False
    history: list[Message] = field(default_factory=list)
    members: tuple[Member, ...] = ()
    settings: ChatSettings = field(default_factory=ChatSettings)

    @property
    def last_message_time(self) -> int | None:
        return self.history[-1].timestamp if self.history else None

    def find_message(self, message_id: int) -> Message | None:
        for message in self.history:
            if message.id == message_id:
                return message
        return None

    def to_record(self) -> dict[str, Any]:
        """Metadata record mirrored into the durable store (no history)."""
        return {
            "id": self.id,
            "name": self.name,
            "type": "group" if self.is_group else "single",
            "last_message_time": self.last_message_time,
            "members": [
                {"original_name": m.original_name, "group_nickname": m.group_nickname}
                for m in self.members
            ],
            "my_nickname": self.settings.my_nickname,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Chat:
        is_group = record.get("type") == "group"
        members = tuple(
            Member(original_name=m["original_name"], group_nickname=m.get("group_nickname"))
            for m in record.get("members") or []
        )
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            is_group=is_group,
            members=members if is_group else (),
            settings=ChatSettings(my_nickname=record.get("my_nickname")),
        )
