"""Offline-first send pipeline.

Flow for ``send(content, chat_id)``:
1. Reject malformed intents (empty content or chat id) as a silent no-op
2. Build the message with status ``sent``
3. Probe connectivity; offline skips straight to the fallback
4. Online: write the message to the durable store
5. Success: append to the registry, touch the activity clock -> DELIVERED
6. Failure/offline: append with status ``offline``, enqueue, show a
   notice -> QUEUED

``send`` never raises; the caller always gets a renderable result.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from miniphone_sync.core.notices import SEND_FAILED_TEXT, SEND_FAILED_TITLE, safe_notify
from miniphone_sync.models.message import (
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
from miniphone_sync.utils.async_helpers import DeliveryFailure, MalformedIntent
from miniphone_sync.utils.logging import log_context

if TYPE_CHECKING:
    from miniphone_sync.core.activity import ActivityClock
    from miniphone_sync.core.offline_queue import OfflineQueue
    from miniphone_sync.core.registry import ChatRegistry
    from miniphone_sync.interfaces.connectivity import ConnectivityProbe
    from miniphone_sync.interfaces.notifier import Notifier
    from miniphone_sync.interfaces.store import DurableStore

log = structlog.get_logger()


class SendPipeline:
    """Accepts outgoing message intents and guarantees a delivery attempt.

    Calls are serialised through a FIFO lock, so registry order equals call
    order even when an online send suspends on I/O while a later call would
    take the offline path.

    Example:
        pipeline = SendPipeline(registry, store, queue, probe, notifier, clock)
        result = await pipeline.send("hello", "chat_2")
        if result.outcome is SendOutcome.QUEUED:
            ...
    """

    def __init__(
        self,
        registry: ChatRegistry,
        store: DurableStore,
        queue: OfflineQueue,
        probe: ConnectivityProbe,
        notifier: Notifier | None,
        clock: ActivityClock,
        id_factory: MessageIdFactory | None = None,
        now: Callable[[], int] = now_ms,
    ) -> None:
        self._registry = registry
        self._store = store
        self._queue = queue
        self._probe = probe
        self._notifier = notifier
        self._clock = clock
        self._ids = id_factory or MessageIdFactory()
        self._now = now
        self._lock = asyncio.Lock()

        self._stats = {
            SendOutcome.DELIVERED: 0,
            SendOutcome.QUEUED: 0,
            SendOutcome.REJECTED: 0,
        }

    @property
    def stats(self) -> dict[str, int]:
        """Return send statistics keyed by outcome name."""
        return {outcome.value: count for outcome, count in self._stats.items()}

    async def send(
        self,
        content: str,
        chat_id: str,
        message_type: MessageType = MessageType.TEXT,
    ) -> SendResult:
        """Send a message, falling back to the offline queue.

        Args:
            content: Message text or image reference
            chat_id: Target chat
            message_type: How ``content`` is interpreted

        Returns:
            SendResult describing the outcome; never raises
        """
        try:
            _validate_intent(content, chat_id)
        except MalformedIntent as e:
            log.debug("malformed_intent_ignored", reason=str(e))
            self._stats[SendOutcome.REJECTED] += 1
            return SendResult(SendOutcome.REJECTED)

        async with self._lock:
            timestamp = self._now()
            message = Message(
                id=self._ids.next_id(timestamp),
                chat_id=chat_id,
                role=MessageRole.USER,
                content=content,
                timestamp=timestamp,
                type=message_type,
                status=MessageStatus.SENT,
            )

            with log_context(chat_id=chat_id, message_id=message.id):
                try:
                    await self._deliver(message)
                except Exception as e:
                    return self._fall_back(message, e)

                self._registry.append_message(chat_id, message)
                self._clock.touch()
                self._stats[SendOutcome.DELIVERED] += 1
                log.info("message_sent")
                return SendResult(SendOutcome.DELIVERED, message)

    async def _deliver(self, message: Message) -> None:
        """Online path: probe, then write through to the durable store.

        Raises:
            DeliveryFailure: If offline or the probe itself fails
            PersistenceFailure: If the durable write fails
        """
        try:
            online = await self._probe.is_online()
        except Exception as e:
            raise DeliveryFailure(f"Connectivity probe failed: {e}") from e

        if not online:
            raise DeliveryFailure("Offline")

        await self._store.put(message)

    def _fall_back(self, message: Message, error: Exception) -> SendResult:
        log.warning(
            "send_failed_switching_to_offline",
            error_type=type(error).__name__,
            error=str(error),
        )

        message.status = MessageStatus.OFFLINE
        self._registry.append_message(message.chat_id, message)
        self._queue.enqueue(OfflineEntry(message))
        safe_notify(self._notifier, SEND_FAILED_TITLE, SEND_FAILED_TEXT, "warning")

        self._stats[SendOutcome.QUEUED] += 1
        return SendResult(SendOutcome.QUEUED, message)


def _validate_intent(content: str, chat_id: str) -> None:
    """Raise MalformedIntent for an empty message or a missing chat id."""
    if not chat_id:
        raise MalformedIntent("missing chat id")
    if not content:
        raise MalformedIntent("empty content")
