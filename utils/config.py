"""Configuration management for typesprint."""

import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from core.models import TestSettings

log = logging.getLogger("typesprint.config")

# Key the test settings record is stored under
SETTINGS_KEY = "typeflow-settings"


def default_data_dir() -> Path:
    """Directory for the database, following the XDG data directory."""
    xdg_data_home = os.environ.get("XDG_DATA_HOME", str(Path.home() / ".local" / "share"))
    return Path(xdg_data_home) / "typesprint"


class SettingsStore:
    """Key-value settings persistence in SQLite with Pydantic validation."""

    def __init__(self, db_path: Path):
        """Initialize settings store with database connection.

        Args:
            db_path: Path to SQLite database
        """
        self.db_path = Path(db_path)
        self._init_settings_table()

    def _get_connection(self) -> sqlite3.Connection:
        """Create database connection."""
        return sqlite3.connect(self.db_path)

    def _init_settings_table(self) -> None:
        """Create settings table if not exists."""
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a raw setting value.

        Args:
            key: Setting key
            default: Value returned when the key is absent

        Returns:
            Stored string value or default
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
            result = cursor.fetchone()
        finally:
            conn.close()
        return result[0] if result else default

    def set(self, key: str, value: str) -> None:
        """Store a raw setting value."""
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO settings (key, value)
                VALUES (?, ?)
            """,
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def load(self) -> TestSettings:
        """Load test settings, falling back to defaults.

        A missing or malformed record is never an error for the caller.

        Returns:
            Stored TestSettings, or defaults
        """
        raw = self.get(SETTINGS_KEY)
        if raw is None:
            return TestSettings()

        try:
            data: Any = json.loads(raw)
            return TestSettings.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            log.warning(f"Ignoring malformed settings record: {e}")
            return TestSettings()

    def save(self, settings: TestSettings) -> None:
        """Persist test settings as a single JSON record."""
        self.set(SETTINGS_KEY, settings.model_dump_json())
        log.debug(f"Saved settings: {settings.model_dump(mode='json')}")
