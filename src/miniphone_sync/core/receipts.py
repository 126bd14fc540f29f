"""Read receipts: which assistant messages the user has seen."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from miniphone_sync.models.message import MessageRole
from miniphone_sync.storage.settings import READ_RECEIPTS_KEY
from miniphone_sync.utils.async_helpers import PersistenceFailure

if TYPE_CHECKING:
    from miniphone_sync.models.chat import Chat
    from miniphone_sync.models.message import Message
    from miniphone_sync.storage.settings import SettingsStore

log = structlog.get_logger()


class ReadReceipts:
    """Append-only mapping of chat id -> message timestamp -> read.

    Kept beside, not inside, the messages: receipts are a UI overlay rather
    than delivery metadata. Once set, a key never reverts.
    """

    def __init__(self, settings: SettingsStore) -> None:
        self._settings = settings
        self._receipts: dict[str, dict[int, bool]] = {}

    def load(self) -> None:
        raw = self._settings.get(READ_RECEIPTS_KEY, {})
        receipts: dict[str, dict[int, bool]] = {}
        if isinstance(raw, dict):
            for chat_id, marks in raw.items():
                if not isinstance(marks, dict):
                    continue
                for timestamp, read in marks.items():
                    try:
                        if read:
                            receipts.setdefault(str(chat_id), {})[int(timestamp)] = True
                    except (TypeError, ValueError):
                        log.debug("read_receipt_key_skipped", chat_id=chat_id, key=timestamp)
        else:
            log.warning("read_receipts_malformed", type=type(raw).__name__)
        self._receipts = receipts

    def is_read(self, chat_id: str, timestamp: int) -> bool:
        return self._receipts.get(chat_id, {}).get(timestamp, False)

    def mark_read(self, chat_id: str, timestamp: int) -> bool:
        """Mark one message read. Returns False if it already was."""
        if self.is_read(chat_id, timestamp):
            return False
        self._receipts.setdefault(chat_id, {})[timestamp] = True
        self._persist()
        return True

    def mark_chat_read(self, chat: Chat) -> list[Message]:
        """Mark every unread assistant message in the chat as read.

        Returns:
            The messages that were newly marked, in history order
        """
        unread = [
            message
            for message in chat.history
            if message.role is MessageRole.ASSISTANT and not self.is_read(chat.id, message.timestamp)
        ]
        if not unread:
            return []

        marks = self._receipts.setdefault(chat.id, {})
        for message in unread:
            marks[message.timestamp] = True
        self._persist()
        log.debug("chat_marked_read", chat_id=chat.id, count=len(unread))
        return unread

    def as_dict(self) -> dict[str, dict[int, bool]]:
        return {chat_id: dict(marks) for chat_id, marks in self._receipts.items()}

    def _persist(self) -> None:
        snapshot = {
            chat_id: {str(ts): True for ts in marks} for chat_id, marks in self._receipts.items()
        }
        try:
            self._settings.set(READ_RECEIPTS_KEY, snapshot)
        except PersistenceFailure as e:
            log.error("read_receipts_persist_failed", error=str(e))
