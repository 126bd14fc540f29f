"""Tests for the command-line entry point."""

from pathlib import Path

import pytest

from miniphone_sync.__main__ import main, parse_args


@pytest.fixture
def offline_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("MINIPHONE_STORAGE__DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MINIPHONE_CONNECTIVITY__MODE", "offline")
    return tmp_path


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.command is None
        assert args.config is None
        assert args.format == "console"
        assert not args.yes

    def test_send(self) -> None:
        args = parse_args(["-y", "send", "chat_2", "hello there"])
        assert args.command == "send"
        assert args.chat_id == "chat_2"
        assert args.text == "hello there"
        assert args.yes

    def test_activity_toggle(self) -> None:
        assert parse_args(["activity", "--enable", "--interval", "60"]).enabled is True
        assert parse_args(["activity", "--disable"]).enabled is False
        assert parse_args(["activity"]).enabled is None

    def test_export_output(self) -> None:
        args = parse_args(["export", "chat_1", "-o", "out.json"])
        assert args.output == Path("out.json")


class TestMain:
    """Test running commands end to end."""

    def test_dry_run(self) -> None:
        assert main(["--dry-run"]) == 0

    def test_dry_run_with_example_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("VAR", raising=False)
        monkeypatch.delenv("MINIPHONE_HOME", raising=False)
        example = Path(__file__).parents[2] / "config" / "config.example.yaml"
        assert main(["-c", str(example), "--dry-run"]) == 0

    def test_missing_config(self, tmp_path: Path) -> None:
        assert main(["-c", str(tmp_path / "missing.yaml"), "status"]) == 1

    def test_send_offline_then_status(
        self, offline_env: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["send", "chat_2", "hi"]) == 0
        assert "queued" in capsys.readouterr().out

        assert main(["status"]) == 0
        assert "pending=1" in capsys.readouterr().out

    def test_drain_offline_store_write(
        self,
        offline_env: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Drain writes to the local store regardless of the probe."""
        main(["send", "chat_2", "hi"])
        capsys.readouterr()

        assert main(["drain"]) == 0
        assert "synced=1 remaining=0" in capsys.readouterr().out

    def test_export(self, offline_env: Path) -> None:
        target = offline_env / "history"
        assert main(["export", "chat_1", "-o", str(target)]) == 0
        assert (offline_env / "history.json").exists()

    def test_export_unknown_chat(self, offline_env: Path) -> None:
        assert main(["export", "nope"]) == 1

    def test_activity(self, offline_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["activity", "--disable", "--interval", "45"]) == 0
        assert "activity.enabled=False activity.interval=45" in capsys.readouterr().out
