#!/usr/bin/env python3
"""typesprint - typing test results and settings from the command line.

Usage:
    python main.py stats --user <id>
    python main.py recent --user <id> --limit 5
    python main.py settings --mode words --duration 25
"""

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pydantic import ValidationError

from core.database_adapter import PersistenceError
from core.models import DURATION_OPTIONS, Difficulty, TestMode, TestSettings
from core.sqlite_adapter import SQLiteResultStore
from utils.config import SettingsStore, default_data_dir

log = logging.getLogger("typesprint")


def setup_logging(verbose: bool = False) -> None:
    """Log to a rotating file in the XDG state directory and to stderr."""
    xdg_state_home = os.environ.get("XDG_STATE_HOME", str(Path.home() / ".local" / "state"))
    log_dir = Path(xdg_state_home) / "typesprint"
    log_dir.mkdir(parents=True, exist_ok=True)

    # 5MB max, keep 5 backups
    file_handler = RotatingFileHandler(
        log_dir / "typesprint.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
    )

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[file_handler, logging.StreamHandler()],
    )


def show_stats(store: SQLiteResultStore, user_id: str) -> None:
    """Print aggregate statistics for a user."""
    stats = store.get_aggregate_stats(user_id)
    print("=" * 40)
    print(f"Statistics for {user_id}")
    print("=" * 40)
    print(f"Tests:            {stats.total_tests}")
    print(f"Best WPM:         {stats.best_wpm}")
    print(f"Average WPM:      {stats.average_wpm}")
    print(f"Average accuracy: {stats.average_accuracy}%")
    print(f"Time typed:       {stats.total_time:.0f}s")
    if stats.last_test_date:
        print(f"Last test:        {stats.last_test_date:%Y-%m-%d %H:%M}")


def show_recent(store: SQLiteResultStore, user_id: str, limit: int) -> None:
    """Print the most recent results for a user."""
    results = store.get_recent_results(user_id, limit)
    if not results:
        print("No results yet")
        return

    for result in results:
        settings = result.settings
        print(
            f"{result.timestamp:%Y-%m-%d %H:%M}  "
            f"{settings.mode.value} {settings.duration:<4} "
            f"{result.wpm:>4} wpm  {result.raw_wpm:>4} raw  {result.accuracy:>3}%  "
            f"{result.correct}/{result.incorrect}/{result.missed}/{result.char_count}"
        )


def update_settings(settings_store: SettingsStore, args: argparse.Namespace) -> None:
    """Show settings, applying any overrides given on the command line."""
    current = settings_store.load()
    changes = {}
    if args.mode:
        changes["mode"] = args.mode
    if args.duration is not None:
        changes["duration"] = args.duration
    if args.difficulty:
        changes["difficulty"] = args.difficulty

    if changes:
        current = TestSettings.model_validate({**current.model_dump(), **changes})
        settings_store.save(current)
        if current.duration not in DURATION_OPTIONS[current.mode]:
            print(f"Note: {current.duration} is not one of the standard options "
                  f"{DURATION_OPTIONS[current.mode]}")

    print(f"mode={current.mode.value} duration={current.duration} "
          f"difficulty={current.difficulty.value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="typesprint results and settings")
    parser.add_argument("--db", type=Path, default=None,
                        help="Database path (default: XDG data directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Aggregate statistics")
    stats_parser.add_argument("--user", required=True, help="User id")

    recent_parser = subparsers.add_parser("recent", help="Most recent results")
    recent_parser.add_argument("--user", required=True, help="User id")
    recent_parser.add_argument("--limit", type=int, default=10, help="Number of results")

    settings_parser = subparsers.add_parser("settings", help="Show or change test settings")
    settings_parser.add_argument("--mode", choices=[m.value for m in TestMode])
    settings_parser.add_argument("--duration", type=int)
    settings_parser.add_argument("--difficulty", choices=[d.value for d in Difficulty])

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    db_path = args.db
    if db_path is None:
        data_dir = default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        db_path = data_dir / "typesprint.db"

    if args.command == "settings":
        try:
            update_settings(SettingsStore(db_path), args)
        except ValidationError as e:
            log.error(f"Invalid settings: {e}")
            return 2
        return 0

    store = SQLiteResultStore(db_path)
    try:
        store.initialize()
        if args.command == "stats":
            show_stats(store, args.user)
        else:
            show_recent(store, args.user, args.limit)
    except PersistenceError as e:
        log.error(f"Could not read results ({e.kind.value}): {e}")
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
