"""Abstract interface for user-visible notices."""

from typing import Literal, Protocol

NoticeLevel = Literal["info", "warning", "error"]


class Notifier(Protocol):
    """Displays transient notices and simple confirmations."""

    def notify(self, title: str, message: str, level: NoticeLevel = "info") -> None:
        """
        Show a short transient notice.

        Args:
            title: Notice heading
            message: Notice body
            level: Severity used for styling
        """
        ...

    async def confirm(self, title: str, message: str, confirm_text: str = "OK") -> bool:
        """
        Ask the user a yes/no question.

        Returns:
            True if the user confirmed
        """
        ...
