"""User-facing notice texts and a failure-tolerant notify helper."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from miniphone_sync.interfaces.notifier import NoticeLevel, Notifier

log = structlog.get_logger()

SEND_FAILED_TITLE = "Send failed"
SEND_FAILED_TEXT = "Message cached, it will be sent when the network recovers"
SYNC_PROMPT_TITLE = "Offline messages found"
SYNC_PROMPT_TEXT = "{count} offline messages waiting to sync, sync now?"
SYNC_PROMPT_CONFIRM = "Sync now"
SYNC_DONE_TITLE = "Sync complete"
SYNC_DONE_TEXT = "All offline messages have been synced"
SETTINGS_SAVED_TITLE = "Saved"
SETTINGS_SAVED_TEXT = "System configuration updated"


def safe_notify(
    notifier: Notifier | None,
    title: str,
    message: str,
    level: NoticeLevel = "info",
) -> None:
    """Show a notice; display failures are logged and never raised."""
    if notifier is None:
        return
    try:
        notifier.notify(title, message, level)
    except Exception as e:
        log.warning("notice_display_failed", title=title, error=str(e))
