"""
Logging configuration for tileforge.
"""

import logging
import logging.handlers
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from ..settings import AppSettings


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for console output."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        formatted = super().format(record)

        # Color only the level name
        if record.levelname in formatted:
            formatted = formatted.replace(
                record.levelname, f"{color}{record.levelname}{reset}"
            )

        return formatted


class CSVFormatter(logging.Formatter):
    """CSV-safe formatter for file logging."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.datefmt)
        level = record.levelname.ljust(8)
        duration = f"{int(record.relativeCreated)} ms"
        module = record.name
        line_no = str(record.lineno)
        message = record.getMessage()

        # Standard CSV quote escaping
        message = message.replace('"', '""')

        return f'"{timestamp}";{level};"{duration}";"{module}";"{line_no}";"{message}"'


class BufferLogHandler(logging.Handler):
    """
    Log handler that keeps the most recent records in memory.

    Lets headless hosts (and tests) inspect the non-fatal conditions the
    render core reports, such as skipped tiles and animation fallbacks.
    """

    def __init__(self, max_records: int = 1000):
        super().__init__(level=logging.DEBUG)
        self.max_records = max_records
        self.buffer: deque[logging.LogRecord] = deque(maxlen=max_records)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.buffer.append(record)
        except Exception:
            self.handleError(record)

    def get_buffer(self, min_level: int = logging.DEBUG) -> List[logging.LogRecord]:
        """Return buffered records at or above ``min_level``."""
        return [r for r in self.buffer if r.levelno >= min_level]

    def clear_buffer(self) -> None:
        """Clear the log buffer."""
        self.buffer.clear()


def setup_logging(settings: "AppSettings") -> BufferLogHandler:
    """
    Setup logging with console, file and in-memory buffer handlers.

    Args:
        settings: AppSettings instance for all logging configuration

    Returns:
        The installed BufferLogHandler
    """
    console_enabled = settings.console_logging
    console_level = settings.console_log_level
    use_colors = settings.console_use_colors
    file_enabled = settings.file_logging
    log_file = settings.log_file_path
    buffer_size = settings.buffer_max_records

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    project_logger = logging.getLogger("tileforge")
    project_logger.setLevel(logging.DEBUG)

    root_logger.handlers.clear()

    if console_enabled:
        if use_colors:
            console_formatter = ColoredFormatter(
                fmt="%(asctime)s : %(levelname)-8s : %(message)s", datefmt="%H:%M:%S"
            )  # type: ignore[assignment]
        else:
            console_formatter = logging.Formatter(  # type: ignore[assignment]
                fmt="%(asctime)s : %(levelname)-8s : %(message)s", datefmt="%H:%M:%S"
            )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(settings.logging.console_level_number)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    log_path = None
    if file_enabled:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(CSVFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
            root_logger.addHandler(file_handler)
        except OSError as e:
            # Keep console logging if the file cannot be opened
            root_logger.warning(f"Could not setup file logging: {e}")
            log_path = None

    # Suppress DEBUG logs from noisy libraries
    logging.getLogger("PIL").setLevel(logging.INFO)
    logging.getLogger("PIL.PngImagePlugin").setLevel(logging.INFO)
    logging.getLogger("asyncio").setLevel(logging.INFO)

    buffer_handler = BufferLogHandler(max_records=buffer_size)
    root_logger.addHandler(buffer_handler)

    logger = logging.getLogger(__name__)
    logger.info("Logging initialized")
    if console_enabled:
        logger.debug(f"Console logging: {console_level} (colors: {use_colors})")
    if file_enabled and log_path:
        logger.debug(f"File logging: DEBUG at {log_path.absolute()}")
    logger.debug(f"Buffer logging: last {buffer_size} records")

    return buffer_handler
