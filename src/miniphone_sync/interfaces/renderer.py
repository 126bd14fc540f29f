"""Abstract interface for message rendering."""

from typing import Protocol

from ..models.chat import Chat
from ..models.message import Message


class Renderer(Protocol):
    """Visual insertion of messages into the chat view."""

    def render(self, message: Message, chat: Chat) -> None:
        """
        Insert a message into the displayed conversation.

        Called synchronously, right after the message is appended.

        Args:
            message: Message to display
            chat: Chat the message belongs to
        """
        ...
