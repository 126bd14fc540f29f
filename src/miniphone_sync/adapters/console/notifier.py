"""Terminal notices and yes/no prompts."""

from __future__ import annotations

import asyncio
import sys
from typing import TextIO

from ...interfaces.notifier import NoticeLevel


class ConsoleNotifier:
    """Prints notices to stderr and reads confirmations from stdin.

    With ``assume_yes`` every confirmation is accepted without prompting.
    """

    def __init__(self, stream: TextIO | None = None, assume_yes: bool = False) -> None:
        self._stream = stream or sys.stderr
        self._assume_yes = assume_yes

    def notify(self, title: str, message: str, level: NoticeLevel = "info") -> None:
        self._stream.write(f"[{level.upper()}] {title}: {message}\n")
        self._stream.flush()

    async def confirm(self, title: str, message: str, confirm_text: str = "OK") -> bool:
        if self._assume_yes:
            return True
        prompt = f"{title}: {message} [{confirm_text}? y/N] "
        try:
            answer = await asyncio.to_thread(input, prompt)
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")
