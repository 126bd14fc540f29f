"""Chat history export to JSON."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from miniphone_sync.models.message import MessageRole

if TYPE_CHECKING:
    from miniphone_sync.core.receipts import ReadReceipts
    from miniphone_sync.models.chat import Chat

DEFAULT_MY_NICKNAME = "Me"


def format_timestamp(timestamp: int) -> str:
    """Render an epoch-millisecond timestamp as local ``HH:MM``."""
    return datetime.fromtimestamp(timestamp / 1000).strftime("%H:%M")


def export_chat_history(
    chat: Chat,
    receipts: ReadReceipts,
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the export document for a chat. Hidden messages are skipped."""
    messages = [message for message in chat.history if not message.is_hidden]
    my_nickname = chat.settings.my_nickname or DEFAULT_MY_NICKNAME

    return {
        "chatName": chat.name,
        "exportTime": (exported_at or datetime.now(UTC)).isoformat(),
        "messageCount": len(messages),
        "messages": [
            {
                "timestamp": message.timestamp,
                "time": format_timestamp(message.timestamp),
                "sender": (
                    my_nickname
                    if message.role is MessageRole.USER
                    else message.sender_name or chat.name
                ),
                "type": message.type.value,
                "content": message.content,
                "status": "read" if receipts.is_read(chat.id, message.timestamp) else "unread",
            }
            for message in messages
        ],
    }


def write_export(path: Path, document: dict[str, Any]) -> Path:
    """Write an export document as indented JSON, adding ``.json`` if missing."""
    if path.suffix != ".json":
        path = path.with_name(path.name + ".json")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
