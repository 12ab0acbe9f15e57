"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest
from rich.logging import RichHandler

import ontogen.observability.logging as log_module
from ontogen.observability import (
    close_file_logging,
    configure_logging,
    get_log_dir,
    get_logger,
)
from ontogen.observability.logging import LOG_FILE_NAME, QUIET_LOGGERS, JSONLFormatter

if TYPE_CHECKING:
    from pathlib import Path


def _rich_levels() -> list[int]:
    return [h.level for h in logging.getLogger().handlers if isinstance(h, RichHandler)]


def _read_events(path: Path) -> list[dict[str, object]]:
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestVerbosity:
    """Console and root levels per -v count."""

    @pytest.mark.parametrize(
        ("verbosity", "console_level"),
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_console_level(self, verbosity: int, console_level: int) -> None:
        configure_logging(verbosity=verbosity)
        assert _rich_levels() == [console_level]

    def test_quiet_root_without_sinks(self) -> None:
        configure_logging(verbosity=0)
        assert logging.getLogger().level == logging.WARNING

    def test_file_logging_opens_root(self, tmp_path: Path) -> None:
        """The JSONL file wants DEBUG events even when the console is quiet."""
        configure_logging(verbosity=0, log_to_file=True, log_dir=tmp_path)
        assert logging.getLogger().level == logging.DEBUG
        assert _rich_levels() == [logging.WARNING]
        close_file_logging()

    def test_third_party_loggers_stay_quiet(self) -> None:
        configure_logging(verbosity=2)
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestGetLogger:
    """get_logger returns bound loggers and configures lazily."""

    def test_configures_on_first_use(self) -> None:
        log_module._configured = False
        logger = get_logger("lazy")
        assert log_module._configured is True
        assert callable(logger.info)


class TestFileLogging:
    """The optional JSONL sink."""

    def test_requires_log_dir(self) -> None:
        with pytest.raises(ValueError, match="log_dir is required"):
            configure_logging(log_to_file=True)

    def test_creates_nested_directory(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "nested" / "logs"
        configure_logging(log_to_file=True, log_dir=log_dir)

        assert log_dir.is_dir()
        assert get_log_dir() == log_dir
        close_file_logging()

    def test_disabled_leaves_no_trace(self, tmp_path: Path) -> None:
        configure_logging(log_dir=tmp_path / "logs")
        assert not (tmp_path / "logs").exists()
        assert get_log_dir() is None

    def test_reconfigure_closes_previous_file(self, tmp_path: Path) -> None:
        configure_logging(log_to_file=True, log_dir=tmp_path / "a")
        first = log_module._file_handler
        assert first is not None

        configure_logging(log_to_file=True, log_dir=tmp_path / "b")

        assert first.stream is None or first.stream.closed
        assert get_log_dir() == tmp_path / "b"
        close_file_logging()

    def test_close_is_idempotent(self, tmp_path: Path) -> None:
        configure_logging(log_to_file=True, log_dir=tmp_path)
        close_file_logging()
        close_file_logging()
        assert log_module._file_handler is None

    def test_events_keep_their_context(self, tmp_path: Path) -> None:
        """Key-value context lands as top-level JSON fields."""
        configure_logging(verbosity=0, log_to_file=True, log_dir=tmp_path)
        get_logger("test.context").debug("step_retried", kind="plays", attempts=3)
        close_file_logging()

        events = [
            e for e in _read_events(tmp_path / LOG_FILE_NAME) if e["message"] == "step_retried"
        ]
        assert len(events) == 1
        assert events[0]["kind"] == "plays"
        assert events[0]["attempts"] == 3
        assert events[0]["level"] == "DEBUG"


class TestJSONLFormatter:
    """Formatting of plain stdlib records."""

    def test_plain_message(self) -> None:
        record = logging.LogRecord("plain", logging.INFO, __file__, 1, "hello %s", ("you",), None)
        entry = json.loads(JSONLFormatter().format(record))
        assert entry["message"] == "hello you"
        assert entry["logger"] == "plain"
        assert "timestamp" in entry

    def test_event_dict_fields_are_lifted(self) -> None:
        event = {"event": "graph_generated", "level": "warning", "size": 4}
        record = logging.LogRecord("ev", logging.WARNING, __file__, 1, event, None, None)
        entry = json.loads(JSONLFormatter().format(record))
        assert entry["message"] == "graph_generated"
        assert entry["size"] == 4
        assert entry["level"] == "WARNING"
