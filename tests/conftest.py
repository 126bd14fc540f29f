"""Shared test fixtures for MiniPhone Sync."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from miniphone_sync.adapters.connectivity import StaticConnectivityProbe
from miniphone_sync.config.schema import ClientConfig, StorageConfig
from miniphone_sync.core.activity import ActivityClock
from miniphone_sync.core.offline_queue import OfflineQueue
from miniphone_sync.core.pipeline import SendPipeline
from miniphone_sync.core.registry import ChatRegistry
from miniphone_sync.models.chat import Chat
from miniphone_sync.models.message import Message
from miniphone_sync.storage.settings import SettingsStore
from miniphone_sync.utils.async_helpers import PersistenceFailure

# 2026-01-01T12:00:00Z
START_MS = 1_767_268_800_000


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = START_MS) -> None:
        self.value = start

    def __call__(self) -> int:
        return self.value

    def advance(self, seconds: float) -> int:
        self.value += int(seconds * 1000)
        return self.value


class RecordingRenderer:
    def __init__(self) -> None:
        self.rendered: list[tuple[Message, Chat]] = []

    def render(self, message: Message, chat: Chat) -> None:
        self.rendered.append((message, chat))


class RecordingNotifier:
    def __init__(self, answer: bool = True) -> None:
        self.notices: list[tuple[str, str, str]] = []
        self.prompts: list[tuple[str, str]] = []
        self.answer = answer

    def notify(self, title: str, message: str, level: str = "info") -> None:
        self.notices.append((title, message, level))

    async def confirm(self, title: str, message: str, confirm_text: str = "OK") -> bool:
        self.prompts.append((title, message))
        return self.answer


class MemoryStore:
    """In-memory DurableStore with switchable failures."""

    def __init__(self) -> None:
        self.messages: dict[int, Message] = {}
        self.chats: dict[str, Chat] = {}
        self.put_calls: list[int] = []
        self.fail = False
        self.fail_ids: set[int] = set()
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def put(self, message: Message) -> None:
        self.put_calls.append(message.id)
        if self.fail or message.id in self.fail_ids:
            raise PersistenceFailure("disk full")
        self.messages[message.id] = message

    async def put_chat(self, chat: Chat) -> None:
        if self.fail:
            raise PersistenceFailure("disk full")
        self.chats[chat.id] = chat

    async def load_all(self) -> tuple[list[Chat], list[Message]]:
        return list(self.chats.values()), list(self.messages.values())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def probe() -> StaticConnectivityProbe:
    return StaticConnectivityProbe(online=True)


@pytest.fixture
def settings(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def registry(renderer: RecordingRenderer) -> ChatRegistry:
    registry = ChatRegistry(renderer)
    registry.ensure_chat("chat_1", "Demo group", is_group=True)
    registry.ensure_chat("chat_2", "AI assistant")
    return registry


@pytest.fixture
def queue(
    settings: SettingsStore,
    store: MemoryStore,
    registry: ChatRegistry,
    notifier: RecordingNotifier,
) -> OfflineQueue:
    return OfflineQueue(settings, store, registry, notifier)


@pytest.fixture
def activity_clock(clock: FakeClock) -> ActivityClock:
    return ActivityClock(now=clock)


@pytest.fixture
def pipeline(
    registry: ChatRegistry,
    store: MemoryStore,
    queue: OfflineQueue,
    probe: StaticConnectivityProbe,
    notifier: RecordingNotifier,
    activity_clock: ActivityClock,
    clock: FakeClock,
) -> SendPipeline:
    return SendPipeline(registry, store, queue, probe, notifier, activity_clock, now=clock)


@pytest.fixture
def client_config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(storage=StorageConfig(data_dir=tmp_path))


def message_record(**overrides: Any) -> dict[str, Any]:
    """A valid persisted message record."""
    record: dict[str, Any] = {
        "id": START_MS,
        "chat_id": "chat_2",
        "role": "user",
        "content": "hi",
        "timestamp": START_MS,
        "type": "text",
        "status": "offline",
    }
    record.update(overrides)
    return record
