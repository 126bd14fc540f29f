"""In-memory chat state registry.

The registry is the single source of truth for chat state read by every UI
surface. The durable store only mirrors it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

import structlog

from miniphone_sync.models.chat import Chat, ChatSettings, Member
from miniphone_sync.models.message import Message, MessageStatus

if TYPE_CHECKING:
    from miniphone_sync.interfaces.renderer import Renderer

log = structlog.get_logger()


class ChatRegistry:
    """Maps chat ids to chat records and tracks the displayed chat.

    Every append goes through :meth:`append_message`, which preserves
    arrival order and hands the message to the renderer exactly once.

    Example:
        registry = ChatRegistry(renderer)
        registry.ensure_chat("chat_1", "Group", is_group=True)
        registry.append_message("chat_1", message)
    """

    def __init__(self, renderer: Renderer | None = None) -> None:
        self._renderer = renderer
        self._chats: dict[str, Chat] = {}
        self._active_chat_id: str | None = None

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._chats

    def __iter__(self) -> Iterator[Chat]:
        return iter(self._chats.values())

    def __len__(self) -> int:
        return len(self._chats)

    @property
    def active_chat_id(self) -> str | None:
        return self._active_chat_id

    def get(self, chat_id: str) -> Chat | None:
        return self._chats.get(chat_id)

    def ensure_chat(
        self,
        chat_id: str,
        name: str,
        *,
        is_group: bool = False,
        members: Iterable[Member] = (),
        settings: ChatSettings | None = None,
    ) -> Chat:
        """Create a chat record if absent and return the current record.

        An existing record is returned untouched, history included.
        """
        existing = self._chats.get(chat_id)
        if existing is not None:
            return existing

        chat = Chat(
            id=chat_id,
            name=name,
            is_group=is_group,
            members=tuple(members) if is_group else (),
            settings=settings or ChatSettings(),
        )
        self._chats[chat_id] = chat
        log.debug("chat_created", chat_id=chat_id, is_group=is_group)
        return chat

    def add_chat(self, chat: Chat) -> bool:
        """Register a fully built chat (rehydration). Returns False if already present."""
        if chat.id in self._chats:
            return False
        self._chats[chat.id] = chat
        return True

    def append_message(self, chat_id: str, message: Message) -> bool:
        """Append a message to a chat's history and render it.

        Unknown chat ids are a logged no-op.

        Returns:
            True if the message was appended
        """
        chat = self._chats.get(chat_id)
        if chat is None:
            log.warning("append_to_unknown_chat", chat_id=chat_id, message_id=message.id)
            return False

        chat.history.append(message)
        self.render(message, chat)
        return True

    def restore_message(self, message: Message) -> bool:
        """Append a rehydrated message without rendering it."""
        chat = self._chats.get(message.chat_id)
        if chat is None or chat.find_message(message.id) is not None:
            return False
        chat.history.append(message)
        return True

    def update_status(self, chat_id: str, message_id: int, status: MessageStatus) -> bool:
        """Change a message's delivery status in place."""
        chat = self._chats.get(chat_id)
        message = chat.find_message(message_id) if chat else None
        if message is None:
            return False
        message.status = status
        return True

    def is_displayed(self, chat_id: str) -> bool:
        return self._active_chat_id is not None and self._active_chat_id == chat_id

    def enter_chat(self, chat_id: str) -> Chat | None:
        """Make a chat the displayed one and render its history."""
        chat = self._chats.get(chat_id)
        if chat is None:
            log.warning("enter_unknown_chat", chat_id=chat_id)
            return None

        self._active_chat_id = chat_id
        for message in chat.history:
            self.render(message, chat)
        return chat

    def leave_chat(self) -> None:
        self._active_chat_id = None

    def render(self, message: Message, chat: Chat) -> None:
        """Hand a message to the renderer; render errors are logged only."""
        if self._renderer is None:
            return
        try:
            self._renderer.render(message, chat)
        except Exception as e:
            log.warning("render_failed", chat_id=chat.id, message_id=message.id, error=str(e))


# Chats shown on first launch so the list is never empty
DEMO_CHATS: tuple[dict[str, object], ...] = (
    {
        "id": "chat_1",
        "name": "Demo group",
        "is_group": True,
        "members": (
            Member(original_name="user1", group_nickname="User A"),
            Member(original_name="user2", group_nickname="User B"),
        ),
    },
    {
        "id": "chat_2",
        "name": "AI assistant",
        "is_group": False,
        "members": (),
    },
)


def seed_demo_chats(registry: ChatRegistry) -> list[Chat]:
    """Ensure the demo chats exist without touching existing history."""
    seeded = []
    for seed in DEMO_CHATS:
        chat = registry.ensure_chat(
            str(seed["id"]),
            str(seed["name"]),
            is_group=bool(seed["is_group"]),
            members=seed["members"],  # type: ignore[arg-type]
        )
        seeded.append(chat)
    return seeded
