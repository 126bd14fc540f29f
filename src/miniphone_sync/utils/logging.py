"""Structured logging setup for the sync client.

Events are snake_case names with keyword context, e.g.
``log.info("message_queued", chat_id=..., pending=...)``. Per-message
context (chat id, message id) is carried in contextvars so nested calls in
the store and queue inherit it.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

SERVICE_NAME = "miniphone-sync"


class LogFormat(StrEnum):
    """Log output format options."""

    JSON = "json"
    CONSOLE = "console"


def add_service_info(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Stamp every entry with the service name and package version."""
    event_dict.setdefault("service", SERVICE_NAME)

    try:
        from miniphone_sync._version import __version__
    except (ImportError, RuntimeError):
        return event_dict

    event_dict.setdefault("version", __version__)
    return event_dict


def _renderer(log_format: LogFormat) -> Processor:
    if log_format is LogFormat.JSON:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _file_handler(path: Path) -> logging.Handler | None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("Could not open log file %s: %s", path, e)
        return None


def configure_logging(
    level: str = "INFO",
    log_format: LogFormat | str = LogFormat.CONSOLE,
    file_path: Path | str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Output goes to stderr, and additionally to ``file_path`` when given. A
    log file that cannot be opened is reported and skipped.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: ``json`` or ``console``
        file_path: Optional log file

    Example:
        configure_logging(level="DEBUG", log_format="json")
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service_info,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(LogFormat(str(log_format).lower())),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_path is not None:
        handler = _file_handler(Path(file_path).expanduser())
        if handler is not None:
            handlers.append(handler)

    logging.basicConfig(format="%(message)s", level=numeric_level, handlers=handlers, force=True)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind context for every event logged inside the block.

    Example:
        with log_context(chat_id="chat_2", message_id=17):
            await store.put(message)
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
