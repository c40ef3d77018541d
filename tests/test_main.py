"""Tests for the command-line entry point."""

from datetime import datetime, timezone

import pytest

from core.models import TestMode, TestResult, TestSettings
from core.sqlite_adapter import SQLiteResultStore
from main import build_parser, main
from utils.config import SettingsStore


@pytest.fixture(autouse=True)
def state_home(monkeypatch, tmp_path):
    """Keep the log file out of the real home directory."""
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))


class TestParser:
    """Tests for argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_recent_defaults(self):
        args = build_parser().parse_args(["recent", "--user", "alice"])
        assert args.limit == 10
        assert args.db is None

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["settings", "--mode", "marathon"])


class TestSettingsCommand:
    """Tests for the settings subcommand."""

    def test_show_defaults(self, temp_db_path, capsys):
        assert main(["--db", str(temp_db_path), "settings"]) == 0
        assert "mode=time duration=30 difficulty=easy" in capsys.readouterr().out

    def test_update(self, temp_db_path, capsys):
        code = main(["--db", str(temp_db_path), "settings", "--mode", "words",
                     "--duration", "25", "--difficulty", "hard"])

        assert code == 0
        assert "mode=words duration=25 difficulty=hard" in capsys.readouterr().out
        loaded = SettingsStore(temp_db_path).load()
        assert loaded.mode == TestMode.WORDS
        assert loaded.duration == 25

    def test_non_standard_duration_noted(self, temp_db_path, capsys):
        assert main(["--db", str(temp_db_path), "settings", "--duration", "45"]) == 0
        assert "not one of the standard options" in capsys.readouterr().out

    def test_invalid_duration(self, temp_db_path):
        assert main(["--db", str(temp_db_path), "settings", "--duration", "0"]) == 2
        assert SettingsStore(temp_db_path).load() == TestSettings()


class TestResultsCommands:
    """Tests for the stats and recent subcommands."""

    def test_stats_for_new_user(self, temp_db_path, capsys):
        assert main(["--db", str(temp_db_path), "stats", "--user", "alice"]) == 0
        out = capsys.readouterr().out
        assert "Statistics for alice" in out
        assert "Tests:            0" in out

    def test_recent_empty(self, temp_db_path, capsys):
        assert main(["--db", str(temp_db_path), "recent", "--user", "alice"]) == 0
        assert "No results yet" in capsys.readouterr().out

    def test_recent_lists_results(self, temp_db_path, capsys):
        store = SQLiteResultStore(temp_db_path)
        store.initialize()
        store.save_result("alice", TestResult(
            id="r1",
            timestamp=datetime(2026, 5, 1, 9, 30, tzinfo=timezone.utc),
            settings=TestSettings(mode=TestMode.WORDS, duration=10),
            wpm=42,
            accuracy=97,
            correct=49,
            incorrect=1,
            total_time=15.0,
            char_count=50,
        ))

        assert main(["--db", str(temp_db_path), "recent", "--user", "alice"]) == 0
        out = capsys.readouterr().out
        assert "2026-05-01 09:30" in out
        assert "42 wpm" in out
        assert "40 raw" in out

    def test_unavailable_database(self, tmp_path):
        db_path = tmp_path / "missing" / "results.db"
        assert main(["--db", str(db_path), "stats", "--user", "alice"]) == 1
