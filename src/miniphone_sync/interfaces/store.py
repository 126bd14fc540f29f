"""Abstract interface for durable chat/message persistence."""

from typing import Protocol

from ..models.chat import Chat
from ..models.message import Message


class DurableStore(Protocol):
    """Persisted mirror of chats and messages.

    Each write is independent: a store is crash-consistent per record and
    makes no promise about atomicity across records. Writes are idempotent
    upserts, so replaying the same record is safe.
    """

    async def open(self) -> None:
        """Prepare the store for use (create schema, open connections)."""
        ...

    async def close(self) -> None:
        """Release any resources held by the store."""
        ...

    async def put(self, message: Message) -> None:
        """
        Upsert a message keyed by its id (last write wins).

        Raises:
            PersistenceFailure: If the write fails
        """
        ...

    async def put_chat(self, chat: Chat) -> None:
        """
        Upsert chat metadata keyed by chat id.

        Raises:
            PersistenceFailure: If the write fails
        """
        ...

    async def load_all(self) -> tuple[list[Chat], list[Message]]:
        """
        Return every persisted chat and message for rehydration.

        Messages are returned in their original insertion order.

        Raises:
            PersistenceFailure: If the read fails
        """
        ...
