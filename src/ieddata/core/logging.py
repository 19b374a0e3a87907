"""Structured logging with operation correlation and multi-output support.

Supports:
- Separate console vs file log levels
- Operation correlation IDs (one per open/query sequence)
- Log file path tracking for error pointers
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from ieddata.config.models import LoggingConfig, LogOutputConfig

_operation_id: ContextVar[str | None] = ContextVar("operation_id", default=None)

_log_file_path: Path | None = None


def get_operation_id() -> str | None:
    return _operation_id.get()


def set_operation_id(operation_id: str | None = None) -> str:
    """Set or generate operation correlation ID."""
    oid = operation_id or uuid4().hex[:12]
    _operation_id.set(oid)
    return oid


def clear_operation_id() -> None:
    _operation_id.set(None)


def get_log_file_path() -> Path | None:
    """Get the current log file path, if any."""
    return _log_file_path


def _set_log_file_path(path: Path | None) -> None:
    global _log_file_path
    _log_file_path = path


def _add_operation_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if oid := get_operation_id():
        event_dict["operation_id"] = oid
    return event_dict


_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Configure structlog. Pass config for multi-output, or use simple params.

    Args:
        config: Logging configuration with outputs
        json_format: Use JSON format for simple setup
        level: Default log level
    """
    from ieddata.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    default_level = _LEVEL_MAP.get(config.level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_operation_id,  # type: ignore[list-item]
    ]

    _configure_stdlib_logging(config, shared_processors, default_level)


# Third-party loggers that log every Docker API round trip at DEBUG.
_NOISY_LOGGERS = ("docker", "urllib3.connectionpool")

_CONSOLE_DESTINATIONS = frozenset({"stderr", "stdout"})


def _open_destination(destination: str) -> logging.Handler:
    """Handler writing to stderr, stdout, or appending to a log file."""
    if destination in _CONSOLE_DESTINATIONS:
        return logging.StreamHandler(sys.stderr if destination == "stderr" else sys.stdout)
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a")


def _formatter_for(
    output: LogOutputConfig,
    pre_chain: list[structlog.types.Processor],
) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        tty = output.destination in _CONSOLE_DESTINATIONS and sys.stderr.isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=tty, pad_event_to=0, pad_level=False)
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _configure_stdlib_logging(
    config: LoggingConfig,
    shared_processors: list[structlog.types.Processor],
    default_level: int,
) -> None:
    """Route structlog through stdlib handlers, one per configured output."""
    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # uncached, so that the CLI can reconfigure levels per invocation
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(default_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    log_file: Path | None = None
    for output in config.outputs:
        if log_file is None and output.destination not in _CONSOLE_DESTINATIONS:
            log_file = Path(output.destination)
        handler = _open_destination(output.destination)
        handler.setLevel(_LEVEL_MAP.get((output.level or config.level).upper(), default_level))
        handler.setFormatter(_formatter_for(output, shared_processors))
        root.addHandler(handler)
    _set_log_file_path(log_file)
