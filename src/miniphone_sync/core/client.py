"""ChatClient orchestrator that wires the sync core together.

This module implements the ChatClient class, the single entry point the UI
layer talks to. It:
- Owns the registry, offline queue, send pipeline and activity monitor
- Opens and rehydrates the durable store on startup
- Offers a resync of messages left in the offline queue
- Persists activity settings and re-arms the monitor when they change
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from miniphone_sync.config.schema import ActivitySettings, ClientConfig
from miniphone_sync.core.activity import ActivityClock, ActivityMonitor
from miniphone_sync.core.export import export_chat_history, write_export
from miniphone_sync.core.notices import (
    SETTINGS_SAVED_TEXT,
    SETTINGS_SAVED_TITLE,
    SYNC_PROMPT_CONFIRM,
    SYNC_PROMPT_TEXT,
    SYNC_PROMPT_TITLE,
    safe_notify,
)
from miniphone_sync.core.offline_queue import OfflineQueue
from miniphone_sync.core.pipeline import SendPipeline
from miniphone_sync.core.receipts import ReadReceipts
from miniphone_sync.core.registry import ChatRegistry, seed_demo_chats
from miniphone_sync.models.message import (
    DrainReport,
    Message,
    MessageIdFactory,
    MessageRole,
    MessageType,
    SendResult,
    now_ms,
)
from miniphone_sync.storage.settings import ACTIVITY_KEY, SettingsStore
from miniphone_sync.utils.async_helpers import (
    ConfigurationFailure,
    PersistenceFailure,
)

if TYPE_CHECKING:
    from miniphone_sync.interfaces.connectivity import ConnectivityProbe
    from miniphone_sync.interfaces.notifier import Notifier
    from miniphone_sync.interfaces.renderer import Renderer
    from miniphone_sync.interfaces.store import DurableStore
    from miniphone_sync.models.chat import Chat

log = structlog.get_logger()


def parse_activity_settings(raw: object) -> ActivitySettings:
    """Validate activity settings read from the configuration store.

    Raises:
        ConfigurationFailure: If the stored value is malformed
    """
    try:
        return ActivitySettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationFailure(f"Stored activity settings invalid: {e}") from e


class ChatClient:
    """Main orchestrator for the message delivery and sync core.

    Example:
        client = create_client(config, renderer=renderer, notifier=notifier)
        await client.start()
        await client.send("hello", "chat_2")
        await client.on_connectivity_restored()
        await client.stop()
    """

    def __init__(
        self,
        config: ClientConfig,
        store: DurableStore,
        settings: SettingsStore,
        probe: ConnectivityProbe,
        renderer: Renderer | None = None,
        notifier: Notifier | None = None,
        now: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize the ChatClient.

        Args:
            config: Client configuration
            store: Durable message/chat store
            settings: Key-value configuration store
            probe: Connectivity probe used by the send pipeline
            renderer: Rendering collaborator (optional)
            notifier: Notification collaborator (optional)
            now: Clock returning epoch milliseconds
        """
        self._config = config
        self._store = store
        self._settings = settings
        self._notifier = notifier
        self._now = now

        self._ids = MessageIdFactory()
        self._registry = ChatRegistry(renderer)
        self._receipts = ReadReceipts(settings)
        self._clock = ActivityClock(now=now)
        self._queue = OfflineQueue(settings, store, self._registry, notifier)
        self._pipeline = SendPipeline(
            self._registry,
            store,
            self._queue,
            probe,
            notifier,
            self._clock,
            id_factory=self._ids,
            now=now,
        )
        self._monitor = ActivityMonitor(
            self._clock,
            action=self._on_idle,
            poll_period=config.activity.poll_period,
            now=now,
        )
        self._activity = ActivitySettings()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def registry(self) -> ChatRegistry:
        return self._registry

    @property
    def queue(self) -> OfflineQueue:
        return self._queue

    @property
    def monitor(self) -> ActivityMonitor:
        return self._monitor

    @property
    def clock(self) -> ActivityClock:
        return self._clock

    @property
    def receipts(self) -> ReadReceipts:
        return self._receipts

    @property
    def activity_settings(self) -> ActivitySettings:
        return self._activity

    @property
    def stats(self) -> dict[str, int]:
        """Return send statistics plus the pending queue size."""
        return {**self._pipeline.stats, "pending": len(self._queue)}

    async def start(self, offer_resync: bool = True, seed_demo: bool = False) -> None:
        """Bring the client up.

        This method:
        1. Opens the durable store (failure degrades to offline-only sends)
        2. Rehydrates chats and messages if configured
        3. Seeds the demo chats if requested
        4. Loads read receipts, the offline queue and activity settings
        5. Arms the activity monitor
        6. Offers to drain a non-empty offline queue

        Args:
            offer_resync: Ask the user to resync leftover offline messages
            seed_demo: Ensure the demo chats exist before any resync
        """
        if self._running:
            log.warning("client_already_running")
            return

        log.info("client_starting")

        try:
            await self._store.open()
        except PersistenceFailure as e:
            log.error("durable_store_unavailable", error=str(e))
        else:
            if self._config.storage.rehydrate:
                await self._rehydrate()

        if seed_demo:
            await self.seed_demo_chats()

        self._receipts.load()
        pending = self._queue.load()

        self._activity = self._load_activity_settings()
        self._clock.touch(self._activity.last_active_time)
        self._monitor.configure(self._activity.enabled, self._activity.interval)

        self._running = True
        log.info("client_started", chats=len(self._registry), pending=pending)

        if pending and offer_resync:
            await self._offer_resync(pending)

    async def stop(self) -> None:
        """Disarm the monitor and close the durable store."""
        if not self._running:
            log.warning("client_not_running")
            return

        await self._monitor.stop()
        try:
            await self._store.close()
        except Exception as e:
            log.warning("durable_store_close_error", error=str(e))

        self._running = False
        log.info("client_stopped", **self.stats)

    async def send(
        self,
        content: str,
        chat_id: str,
        message_type: MessageType = MessageType.TEXT,
    ) -> SendResult:
        """Send a message; see :class:`SendPipeline`. Never raises."""
        return await self._pipeline.send(content, chat_id, message_type)

    async def receive(
        self,
        chat_id: str,
        content: str,
        message_type: MessageType = MessageType.TEXT,
        sender_name: str | None = None,
    ) -> Message | None:
        """Record an inbound assistant message.

        Uses the same append path as outgoing messages. The durable write is
        best-effort.

        Returns:
            The appended message, or None if the chat is unknown or the
            content is empty
        """
        if not content or chat_id not in self._registry:
            log.debug("inbound_message_ignored", chat_id=chat_id)
            return None

        timestamp = self._now()
        message = Message(
            id=self._ids.next_id(timestamp),
            chat_id=chat_id,
            role=MessageRole.ASSISTANT,
            content=content,
            timestamp=timestamp,
            type=message_type,
            sender_name=sender_name,
        )
        self._registry.append_message(chat_id, message)

        try:
            await self._store.put(message)
        except PersistenceFailure as e:
            log.error("durable_write_failed", chat_id=chat_id, message_id=message.id, error=str(e))
        return message

    async def drain(self) -> DrainReport:
        """Resync the offline queue now."""
        return await self._queue.drain()

    async def on_connectivity_restored(self) -> DrainReport:
        """Reconnection signal from the host: drain the offline queue."""
        log.info("connectivity_restored", pending=len(self._queue))
        return await self._queue.drain()

    async def seed_demo_chats(self) -> list[Chat]:
        """Make sure the demo chats exist and mirror them to the store."""
        chats = seed_demo_chats(self._registry)
        for chat in chats:
            try:
                await self._store.put_chat(chat)
            except PersistenceFailure as e:
                log.error("chat_persist_failed", chat_id=chat.id, error=str(e))
        return chats

    def enter_chat(self, chat_id: str) -> Chat | None:
        """Display a chat and render its history."""
        return self._registry.enter_chat(chat_id)

    def leave_chat(self) -> None:
        self._registry.leave_chat()

    def record_activity(self) -> None:
        """Genuine user interaction: postpone the next idle notice."""
        self._clock.touch()

    def mark_chat_read(self, chat_id: str) -> list[Message]:
        chat = self._registry.get(chat_id)
        if chat is None:
            return []
        return self._receipts.mark_chat_read(chat)

    def export_chat(self, chat_id: str, path: Path) -> Path:
        """Export a chat's visible history as JSON.

        Raises:
            KeyError: If the chat is unknown
            OSError: If the file cannot be written
        """
        chat = self._registry.get(chat_id)
        if chat is None:
            raise KeyError(chat_id)
        written = write_export(path, export_chat_history(chat, self._receipts))
        log.info("chat_exported", chat_id=chat_id, path=str(written))
        return written

    def save_activity_settings(self, enabled: bool, interval: int | str | None) -> ActivitySettings:
        """Persist new activity settings and re-arm the monitor.

        An unusable interval falls back to the default.
        """
        now = self._now()
        try:
            activity = ActivitySettings(
                enabled=enabled,
                interval=interval,  # type: ignore[arg-type]
                last_active_time=now,
            )
        except ValidationError as e:
            log.warning("activity_settings_invalid", error=str(e))
            activity = ActivitySettings(enabled=enabled, last_active_time=now)

        try:
            self._settings.set(ACTIVITY_KEY, activity.model_dump())
        except PersistenceFailure as e:
            log.error("activity_settings_persist_failed", error=str(e))

        self._activity = activity
        self._clock.touch(now)
        self._monitor.configure(activity.enabled, activity.interval)
        safe_notify(self._notifier, SETTINGS_SAVED_TITLE, SETTINGS_SAVED_TEXT)
        return activity

    def _load_activity_settings(self) -> ActivitySettings:
        raw = self._settings.get(ACTIVITY_KEY)
        if raw is None:
            return ActivitySettings()

        try:
            return parse_activity_settings(raw)
        except ConfigurationFailure as e:
            log.warning("activity_settings_reset_to_defaults", error=str(e))
            return ActivitySettings()

    async def _rehydrate(self) -> None:
        try:
            chats, messages = await self._store.load_all()
        except PersistenceFailure as e:
            log.error("rehydrate_failed", error=str(e))
            return

        for chat in chats:
            self._registry.add_chat(chat)
        restored = 0
        for message in messages:
            self._ids.observe(message.id)
            if self._registry.restore_message(message):
                restored += 1
        log.info("rehydrated", chats=len(chats), messages=restored)

    async def _offer_resync(self, pending: int) -> None:
        if self._notifier is None:
            return
        try:
            confirmed = await self._notifier.confirm(
                SYNC_PROMPT_TITLE,
                SYNC_PROMPT_TEXT.format(count=pending),
                confirm_text=SYNC_PROMPT_CONFIRM,
            )
        except Exception as e:
            log.warning("resync_prompt_failed", error=str(e))
            return
        if confirmed:
            await self._queue.drain()

    def _on_idle(self) -> None:
        safe_notify(
            self._notifier,
            self._config.activity.notice_title,
            self._config.activity.notice_text,
        )


def create_client(
    config: ClientConfig,
    renderer: Renderer | None = None,
    notifier: Notifier | None = None,
    probe: ConnectivityProbe | None = None,
) -> ChatClient:
    """Factory function to create a ChatClient with all dependencies.

    Args:
        config: Client configuration
        renderer: Rendering collaborator (optional)
        notifier: Notification collaborator (optional)
        probe: Connectivity probe; built from config when omitted

    Returns:
        Configured ChatClient instance
    """
    from miniphone_sync.storage.durable import SQLiteStore

    store = SQLiteStore(config.storage.database_path)
    settings = SettingsStore(config.storage.settings_path)
    return ChatClient(
        config,
        store,
        settings,
        probe or _create_probe(config),
        renderer=renderer,
        notifier=notifier,
    )


def _create_probe(config: ClientConfig) -> ConnectivityProbe:
    """Create a connectivity probe based on configuration.

    Raises:
        ValueError: If the mode is not supported
    """
    from miniphone_sync.adapters.connectivity import (
        HttpConnectivityProbe,
        StaticConnectivityProbe,
    )

    mode = config.connectivity.mode

    if mode == "http":
        return HttpConnectivityProbe(config.connectivity.check_url, config.connectivity.timeout)
    if mode == "online":
        return StaticConnectivityProbe(online=True)
    if mode == "offline":
        return StaticConnectivityProbe(online=False)

    raise ValueError(f"Unsupported connectivity mode: {mode}")
