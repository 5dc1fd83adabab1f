"""
Logging-related settings for tileforge.

Read by ``setup_logging`` to decide which handlers to install: console,
rotating CSV file and the in-memory record buffer.
"""

import logging
from pathlib import Path

from .base import SettingsSection

logger = logging.getLogger(__name__)

LOG_FILE_PATH = "logs/tileforge.csv"
VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_BUFFER_RECORDS = 1000


class LoggingSettings(SettingsSection):
    """Handler switches, levels and destinations for logging."""

    # === CONSOLE HANDLER ===

    @property
    def console_logging(self) -> bool:
        """Whether a console handler is installed."""
        return self._get_bool("logging/console_enabled", True)

    @console_logging.setter
    def console_logging(self, value: bool) -> None:
        self._store("logging/console_enabled", value)

    @property
    def console_log_level(self) -> str:
        """Console threshold as a level name."""
        return self._get_str("logging/console_level", "INFO")

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        if value.upper() not in VALID_LEVELS:
            logger.warning(
                f"Invalid console log level: {value}, keeping current: {self.console_log_level}"
            )
            return
        self._store("logging/console_level", value.upper())

    @property
    def console_level_number(self) -> int:
        """Console threshold as a ``logging`` level number; INFO when unknown."""
        level = logging.getLevelName(self.console_log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @property
    def console_use_colors(self) -> bool:
        """Whether the console handler colors level names."""
        return self._get_bool("logging/console_use_colors", True)

    # === CSV FILE HANDLER ===

    @property
    def file_logging(self) -> bool:
        return self._get_bool("logging/file_enabled", False)

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        self._store("logging/file_enabled", value)

    @property
    def log_file_path(self) -> str:
        return self._get_str("logging/file_path", LOG_FILE_PATH)

    @log_file_path.setter
    def log_file_path(self, value: str) -> None:
        self._store("logging/file_path", value)

    @property
    def log_file_absolute_path(self) -> Path:
        return Path(self.log_file_path).resolve()

    # === RECORD BUFFER ===

    @property
    def buffer_max_records(self) -> int:
        """Records kept by the in-memory buffer handler."""
        value = self._get_int("logging/buffer_max_records", DEFAULT_BUFFER_RECORDS)
        return value if value > 0 else DEFAULT_BUFFER_RECORDS

    @buffer_max_records.setter
    def buffer_max_records(self, value: int) -> None:
        if value <= 0:
            logger.warning(
                f"Invalid buffer size: {value}, keeping current: {self.buffer_max_records}"
            )
            return
        self._store("logging/buffer_max_records", value)
