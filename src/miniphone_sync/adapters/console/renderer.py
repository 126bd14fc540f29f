"""Plain-text message renderer for terminals."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from ...core.export import DEFAULT_MY_NICKNAME, format_timestamp
from ...models.message import MessageRole, MessageStatus, MessageType

if TYPE_CHECKING:
    from ...models.chat import Chat
    from ...models.message import Message


class ConsoleRenderer:
    """Writes one line per rendered message, e.g. ``[12:00] Me: hi (offline)``."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    def render(self, message: Message, chat: Chat) -> None:
        self._stream.write(self.format(message, chat) + "\n")
        self._stream.flush()

    @staticmethod
    def format(message: Message, chat: Chat) -> str:
        if message.role is MessageRole.USER:
            sender = chat.settings.my_nickname or DEFAULT_MY_NICKNAME
        else:
            sender = message.sender_name or chat.name

        body = f"[image] {message.content}" if message.type is MessageType.IMAGE else message.content
        line = f"[{format_timestamp(message.timestamp)}] {sender}: {body}"
        if message.status is not MessageStatus.SENT:
            line += f" ({message.status.value})"
        return line
