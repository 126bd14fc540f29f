"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from miniphone_sync.config.loader import load_config, substitute_env_vars
from miniphone_sync.config.schema import (
    DEFAULT_ACTIVITY_INTERVAL,
    ActivitySettings,
    ClientConfig,
    ConnectivityConfig,
    StorageConfig,
)


class TestSubstituteEnvVars:
    """Test environment variable substitution."""

    def test_substitute_single_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEST_VAR", "test_value")
        assert substitute_env_vars("Value is ${TEST_VAR}") == "Value is test_value"

    def test_substitute_multiple_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VAR1", "value1")
        monkeypatch.setenv("VAR2", "value2")
        assert substitute_env_vars("${VAR1} and ${VAR2}") == "value1 and value2"

    def test_missing_env_var_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSING", raising=False)
        with pytest.raises(ValueError, match="Environment variable MISSING not found"):
            substitute_env_vars("Value is ${MISSING}")

    def test_no_substitution_needed(self) -> None:
        assert substitute_env_vars("plain text") == "plain text"

    def test_fallback_used_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MINIPHONE_HOME", raising=False)
        assert substitute_env_vars("${MINIPHONE_HOME:-~/.miniphone}") == "~/.miniphone"

    def test_set_value_beats_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MINIPHONE_HOME", "/data")
        assert substitute_env_vars("${MINIPHONE_HOME:-~/.miniphone}") == "/data"

    def test_empty_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("UNSET_VAR", raising=False)
        assert substitute_env_vars("[${UNSET_VAR:-}]") == "[]"


class TestLoadConfig:
    """Test loading YAML files."""

    def test_none_gives_defaults(self) -> None:
        config = load_config(None)
        assert config.connectivity.mode == "http"
        assert config.activity.poll_period == 10.0
        assert config.storage.rehydrate is True

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_load_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MINIPHONE_TEST_DIR", str(tmp_path))
        path = tmp_path / "config.yaml"
        path.write_text(
            "storage:\n"
            "  data_dir: ${MINIPHONE_TEST_DIR}\n"
            "connectivity:\n"
            "  mode: offline\n"
            "activity:\n"
            "  poll_period: 2.5\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  format: json\n"
        )

        config = load_config(path)

        assert config.storage.data_dir == tmp_path
        assert config.storage.database_path == tmp_path / "miniphone.db"
        assert config.connectivity.mode == "offline"
        assert config.activity.poll_period == 2.5
        assert config.logging.format == "json"

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path).connectivity.mode == "http"

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_invalid_mode(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("connectivity:\n  mode: sometimes\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_example_config_loads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("VAR", raising=False)
        monkeypatch.delenv("MINIPHONE_HOME", raising=False)
        example = Path(__file__).parents[2] / "config" / "config.example.yaml"
        config = load_config(example)
        assert config.storage.database_path == Path("~/.miniphone/miniphone.db").expanduser()

    def test_references_in_comments_are_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("UNSET", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "# ${UNSET} is documented here but never expanded\n"
            "connectivity:\n"
            "  mode: offline  # or ${UNSET:-http}\n"
        )

        assert load_config(path).connectivity.mode == "offline"

    def test_reference_in_value_still_required(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("UNSET", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("storage:\n  data_dir: ${UNSET}\n")

        with pytest.raises(ValueError, match="UNSET"):
            load_config(path)

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables win over the file, other file keys survive."""
        monkeypatch.setenv("MINIPHONE_CONNECTIVITY__MODE", "offline")
        path = tmp_path / "config.yaml"
        path.write_text("connectivity:\n  mode: http\n  timeout: 7\n")

        config = load_config(path)

        assert config.connectivity.mode == "offline"
        assert config.connectivity.timeout == 7.0

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MINIPHONE_CONNECTIVITY__MODE", "online")
        assert ClientConfig().connectivity.mode == "online"


class TestSchema:
    """Test individual config models."""

    def test_storage_paths_expand_user(self) -> None:
        storage = StorageConfig()
        assert "~" not in str(storage.database_path)
        assert storage.settings_path.name == "settings.json"

    def test_check_url_must_be_http(self) -> None:
        with pytest.raises(ValidationError, match="http"):
            ConnectivityConfig(check_url="ftp://example.com")

    def test_timeout_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ConnectivityConfig(timeout=0)


class TestActivitySettings:
    """Test the persisted activity settings."""

    def test_defaults(self) -> None:
        activity = ActivitySettings()
        assert activity.enabled is False
        assert activity.interval == DEFAULT_ACTIVITY_INTERVAL
        assert activity.last_active_time > 0

    @pytest.mark.parametrize("interval", [None, "", 0, "0", -5])
    def test_unusable_interval_falls_back(self, interval: object) -> None:
        activity = ActivitySettings.model_validate({"enabled": True, "interval": interval})
        assert activity.interval == DEFAULT_ACTIVITY_INTERVAL

    def test_string_interval_coerced(self) -> None:
        assert ActivitySettings.model_validate({"interval": "60"}).interval == 60

    def test_garbage_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ActivitySettings.model_validate({"interval": "soon"})

    def test_round_trip_through_dump(self) -> None:
        activity = ActivitySettings(enabled=True, interval=120, last_active_time=5)
        assert ActivitySettings.model_validate(activity.model_dump()) == activity
