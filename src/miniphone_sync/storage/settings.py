"""Key-value configuration store persisted as a single JSON file."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import structlog

from miniphone_sync.utils.async_helpers import PersistenceFailure

log = structlog.get_logger()

ACTIVITY_KEY = "bg-activity"
OFFLINE_MESSAGES_KEY = "offline-messages"
READ_RECEIPTS_KEY = "read-receipts"


def _atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    content = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)

    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


class SettingsStore:
    """Small synchronous key-value store for client-side state.

    Holds the activity settings, the offline queue snapshot and the read
    receipt table. Every :meth:`set` rewrites the whole file atomically
    before returning, so a reader never sees a half-written value.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._data: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value.

        Raises:
            PersistenceFailure: If the file cannot be written
        """
        data = dict(self._load())
        data[key] = value
        try:
            _atomic_write_json(self._path, data)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceFailure(f"Could not write {self._path}: {e}") from e
        self._data = data

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = {}
        except (OSError, json.JSONDecodeError, ValueError) as e:
            log.warning("settings_file_unreadable", path=str(self._path), error=str(e))
            raw = {}

        if not isinstance(raw, dict):
            log.warning("settings_file_malformed", path=str(self._path))
            raw = {}

        self._data = raw
        return raw
