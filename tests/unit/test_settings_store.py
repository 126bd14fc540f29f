"""Tests for the JSON settings store."""

from pathlib import Path

import pytest

from miniphone_sync.storage.settings import SettingsStore
from miniphone_sync.utils.async_helpers import PersistenceFailure


class TestSettingsStore:
    """Test get/set semantics and file handling."""

    def test_missing_file_gives_default(self, tmp_path: Path) -> None:
        store = SettingsStore(tmp_path / "settings.json")
        assert store.get("bg-activity") is None
        assert store.get("bg-activity", {"enabled": False}) == {"enabled": False}

    def test_set_then_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "settings.json"
        SettingsStore(path).set("bg-activity", {"enabled": True, "interval": 60})

        assert SettingsStore(path).get("bg-activity") == {"enabled": True, "interval": 60}
        assert not path.with_suffix(".json.tmp").exists()

    def test_set_keeps_other_keys(self, tmp_path: Path) -> None:
        store = SettingsStore(tmp_path / "settings.json")
        store.set("a", 1)
        store.set("b", 2)
        assert SettingsStore(store.path).get("a") == 1

    def test_malformed_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        assert SettingsStore(path).get("bg-activity", "default") == "default"

    def test_non_object_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert SettingsStore(path).get("x") is None

    def test_write_failure_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = SettingsStore(blocker / "settings.json")

        with pytest.raises(PersistenceFailure):
            store.set("a", 1)

    def test_unserializable_value_raises(self, tmp_path: Path) -> None:
        store = SettingsStore(tmp_path / "settings.json")
        with pytest.raises(PersistenceFailure):
            store.set("a", object())
        assert store.get("a") is None
