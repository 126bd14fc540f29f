"""Offline queue: messages waiting for a resync.

Every mutation of the in-memory queue is followed by a full snapshot write
to the settings store before control returns to the event loop, so a
concurrently scheduled drain never observes a half-updated queue.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from miniphone_sync.core.notices import SYNC_DONE_TEXT, SYNC_DONE_TITLE, safe_notify
from miniphone_sync.models.message import DrainReport, OfflineEntry
from miniphone_sync.storage.settings import OFFLINE_MESSAGES_KEY
from miniphone_sync.utils.async_helpers import PersistenceFailure
from miniphone_sync.utils.logging import log_context

if TYPE_CHECKING:
    from miniphone_sync.core.registry import ChatRegistry
    from miniphone_sync.interfaces.notifier import Notifier
    from miniphone_sync.interfaces.store import DurableStore
    from miniphone_sync.storage.settings import SettingsStore

log = structlog.get_logger()


class OfflineQueue:
    """Ordered queue of messages that failed immediate delivery.

    Draining is never scheduled by the queue itself; it is triggered by a
    reconnection signal or by the user confirming a resync.
    """

    def __init__(
        self,
        settings: SettingsStore,
        store: DurableStore,
        registry: ChatRegistry,
        notifier: Notifier | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._registry = registry
        self._notifier = notifier
        self._entries: list[OfflineEntry] = []
        self._drain_lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[OfflineEntry, ...]:
        return tuple(self._entries)

    def load(self) -> int:
        """Replace the in-memory queue with the persisted snapshot.

        Records that cannot be parsed are dropped with a warning.

        Returns:
            Number of entries loaded
        """
        raw = self._settings.get(OFFLINE_MESSAGES_KEY, [])
        if not isinstance(raw, list):
            log.warning("offline_queue_snapshot_malformed", type=type(raw).__name__)
            raw = []

        entries = []
        for record in raw:
            try:
                entries.append(OfflineEntry.from_record(record))
            except (KeyError, ValueError, TypeError) as e:
                log.warning("offline_entry_dropped", error=str(e))

        self._entries = entries
        log.info("offline_queue_loaded", pending=len(entries))
        return len(entries)

    def enqueue(self, entry: OfflineEntry) -> None:
        """Append an entry and persist the whole queue."""
        self._entries.append(entry)
        self._persist()
        log.info(
            "message_queued",
            chat_id=entry.message.chat_id,
            message_id=entry.message.id,
            pending=len(self._entries),
        )

    async def drain(self) -> DrainReport:
        """Attempt a durable write for every queued entry.

        Entries that are written are removed; failures stay queued for the
        next drain. Concurrent calls run one after another.
        """
        async with self._drain_lock:
            pending = list(self._entries)
            if not pending:
                return DrainReport(synced=0, remaining=0)

            log.info("offline_drain_started", pending=len(pending))
            synced: list[OfflineEntry] = []

            for entry in pending:
                with log_context(chat_id=entry.message.chat_id, message_id=entry.message.id):
                    try:
                        await self._store.put(entry.message)
                    except Exception as e:
                        log.warning("offline_entry_sync_failed", error=str(e))
                        continue

                    synced.append(entry)
                    self._show_synced(entry)

            synced_ids = {id(entry) for entry in synced}
            self._entries = [entry for entry in self._entries if id(entry) not in synced_ids]
            self._persist()

            report = DrainReport(synced=len(synced), remaining=len(self._entries))
            log.info("offline_drain_finished", synced=report.synced, remaining=report.remaining)

            if report.synced and not report.remaining:
                safe_notify(self._notifier, SYNC_DONE_TITLE, SYNC_DONE_TEXT)
            return report

    def _show_synced(self, entry: OfflineEntry) -> None:
        message = entry.message
        chat = self._registry.get(message.chat_id)
        if chat is None:
            log.warning("synced_message_for_unknown_chat")
            return

        if chat.find_message(message.id) is None:
            # Queue restored from a previous session
            self._registry.append_message(chat.id, message)
        elif self._registry.is_displayed(chat.id):
            self._registry.render(message, chat)

    def _persist(self) -> None:
        snapshot = [entry.to_record() for entry in self._entries]
        try:
            self._settings.set(OFFLINE_MESSAGES_KEY, snapshot)
        except PersistenceFailure as e:
            log.error("offline_queue_persist_failed", pending=len(snapshot), error=str(e))
