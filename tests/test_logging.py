"""Tests for logging configuration."""

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tileforge.settings import AppSettings
from tileforge.utils.logging_config import (
    BufferLogHandler, ColoredFormatter, CSVFormatter, setup_logging
)


def make_record(message: str, level: int = logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord(
        name="tileforge.rendering.compositor",
        level=level,
        pathname=__file__,
        lineno=42,
        msg=message,
        args=None,
        exc_info=None,
    )


@pytest.fixture
def restore_root_handlers() -> Iterator[None]:
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestFormatters:
    """Test console and file formatters."""

    def test_colored_level_name(self) -> None:
        """Test only the level name is wrapped in color codes."""
        formatter = ColoredFormatter(fmt="%(levelname)s : %(message)s")
        output = formatter.format(make_record("tile skipped"))
        assert output == "\033[33mWARNING\033[0m : tile skipped"

    def test_csv_escapes_quotes(self) -> None:
        """Test CSV lines quote fields and escape embedded quotes."""
        formatter = CSVFormatter(datefmt="%Y-%m-%d")
        line = formatter.format(make_record('atlas "hero.png" missing'))
        fields = line.split(";")
        assert len(fields) == 6
        assert fields[1].strip() == "WARNING"
        assert fields[3] == '"tileforge.rendering.compositor"'
        assert fields[4] == '"42"'
        assert fields[5] == '"atlas ""hero.png"" missing"'


class TestBufferLogHandler:
    """Test the in-memory record buffer."""

    def test_keeps_most_recent(self) -> None:
        """Test the buffer drops the oldest records when full."""
        handler = BufferLogHandler(max_records=2)
        for i in range(3):
            handler.emit(make_record(f"record {i}"))
        assert [r.getMessage() for r in handler.get_buffer()] == ["record 1", "record 2"]

    def test_level_filter_and_clear(self) -> None:
        """Test filtering by level and clearing."""
        handler = BufferLogHandler()
        handler.emit(make_record("debug", logging.DEBUG))
        handler.emit(make_record("warn", logging.WARNING))
        assert [r.getMessage() for r in handler.get_buffer(logging.WARNING)] == ["warn"]
        handler.clear_buffer()
        assert handler.get_buffer() == []


@pytest.mark.usefixtures("restore_root_handlers")
class TestSetupLogging:
    """Test handler installation from settings."""

    def test_buffer_captures_project_warnings(self, settings: AppSettings) -> None:
        """Test project loggers reach the returned buffer."""
        settings.console_logging = False
        buffer = setup_logging(settings)

        logging.getLogger("tileforge.animation.character").warning("fell back to idle-down")

        messages = [r.getMessage() for r in buffer.get_buffer(logging.WARNING)]
        assert "fell back to idle-down" in messages

    def test_file_logging(self, tmp_path: Path, settings: AppSettings) -> None:
        """Test file logging writes CSV lines to the configured path."""
        log_file = tmp_path / "logs" / "tileforge.csv"
        settings.console_logging = False
        settings.file_logging = True
        settings.logging.log_file_path = str(log_file)

        setup_logging(settings)
        logging.getLogger("tileforge.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert '"hello file"' in content

    def test_console_handler_level(self, settings: AppSettings) -> None:
        """Test the console handler uses the configured level."""
        settings.console_log_level = "ERROR"
        setup_logging(settings)
        levels = [
            h.level for h in logging.getLogger().handlers
            if type(h) is logging.StreamHandler
        ]
        assert levels == [logging.ERROR]
