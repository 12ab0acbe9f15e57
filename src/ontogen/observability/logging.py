"""Structured logging for ontogen.

Events go through structlog onto the standard logging tree, which has up to
two sinks:

- a rich console handler on stderr, whose level follows ``-v``
- an optional JSONL file in a log directory (``--log``) that records every
  event at DEBUG with its key-value context
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

_configured = False
_file_handler: logging.FileHandler | None = None
_log_dir: Path | None = None

LOG_FILE_NAME = "generation.jsonl"

# Third-party loggers that stay at WARNING whatever the verbosity
QUIET_LOGGERS = ("hypothesis",)

_CONSOLE_LEVELS = {0: logging.WARNING, 1: logging.INFO}


class JSONLFormatter(logging.Formatter):
    """Render a record as one JSON object per line.

    structlog hands its event dict over as ``record.msg``; its keys become
    top-level fields and the event name becomes ``message``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if isinstance(record.msg, dict):
            context = {
                key: value
                for key, value in record.msg.items()
                if key not in ("level", "timestamp")
            }
            entry["message"] = context.pop("event", "")
            entry.update(context)
        else:
            entry["message"] = record.getMessage()
        return json.dumps(entry, default=str)


def _console_handler(verbosity: int) -> RichHandler:
    return RichHandler(
        console=Console(stderr=True),
        level=_CONSOLE_LEVELS.get(verbosity, logging.DEBUG),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
    )


def _open_file_handler(log_dir: Path) -> logging.FileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE_NAME, mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(JSONLFormatter())
    return handler


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Configure structlog and the standard logging handlers.

    Calling it again replaces the previous configuration and closes any open
    log file.

    Args:
        verbosity: Console level. 0 is WARNING, 1 is INFO, 2 or more is DEBUG.
        log_to_file: Also append JSONL events to ``log_dir/generation.jsonl``.
        log_dir: Directory for the log file. Required with ``log_to_file``.

    Raises:
        ValueError: If ``log_to_file`` is set without a ``log_dir``.
    """
    global _configured, _file_handler, _log_dir

    if log_to_file and log_dir is None:
        raise ValueError("log_dir is required when log_to_file=True")

    close_file_logging()
    _log_dir = None

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_to_file and log_dir is not None:
        _file_handler = _open_file_handler(log_dir)
        _log_dir = log_dir
        handlers.append(_file_handler)

    # The root stays open when anything below WARNING has a sink
    root_level = logging.DEBUG if verbosity > 0 or log_to_file else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def get_log_dir() -> Path | None:
    """Return the directory file logging writes to, or None when disabled."""
    return _log_dir


def close_file_logging() -> None:
    """Flush and close the JSONL log file if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
