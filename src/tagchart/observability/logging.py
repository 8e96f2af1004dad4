"""
tagchart - logging sinks and the structlog bridge.

File: src/tagchart/observability/logging.py

Engine modules log through ``structlog.get_logger(__name__)``. Events are
rendered into stdlib ``LogRecord`` objects (key/values land in ``extra``) so a
single set of handlers on the ``tagchart`` logger decides where they go:

- ``<log_dir>/tagchart.jsonl`` when ``log_to_file`` is set,
- stderr when ``log_to_stderr`` is set,
- nowhere (a ``NullHandler``) when neither is.

JSON lines carry ``timestamp``/``level``/``logger``/``message`` plus the event's
key/values under ``fields``.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

import structlog

LOG_FILENAME: Final[str] = "tagchart.jsonl"
PACKAGE_LOGGER: Final[str] = "tagchart"
TEXT_FORMAT: Final[str] = "%(levelname)s %(name)s: %(message)s"

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    vars(logging.makeLogRecord({}))
) | {"message", "asctime", "taskName"}

_lock = threading.Lock()
_active: LoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    base_log_dir: Path | str = Path("logs")
    logger_name: str = PACKAGE_LOGGER
    level: int | str = "WARNING"
    log_filename: str = LOG_FILENAME
    log_to_file: bool = False
    log_to_stderr: bool = True
    json_logs: bool = True


@dataclass(eq=False, slots=True)
class LoggingHandle:
    """Sinks attached by one ``setup_structured_logging`` call."""

    logger: logging.Logger
    log_path: Path | None
    handlers: tuple[logging.Handler, ...] = ()
    _closed: bool = field(default=False, repr=False)

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def flush(self) -> None:
        for handler in self.handlers:
            handler.flush()

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        for handler in self.handlers:
            handler.flush()
            self.logger.removeHandler(handler)
            handler.close()


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC)
        line: dict[str, object] = {
            "timestamp": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            line["fields"] = extra
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            line["stack"] = record.stack_info
        return json.dumps(line, sort_keys=True, separators=(",", ":"), default=_jsonable)


def _jsonable(value: object) -> object:
    if isinstance(value, datetime):
        aware = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        return aware.astimezone(UTC).isoformat().replace("+00:00", "Z")
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if isinstance(value, Path):
        return str(value)
    return repr(value)


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    log_dir: Path | str | None = None,
    level: int | str | None = None,
    logger_name: str = PACKAGE_LOGGER,
) -> LoggingHandle:
    """Configure logging from the ``[observability]`` config section.

    ``log_dir`` and ``level`` take precedence over the mapping; the CLI passes
    ``level="DEBUG"`` for ``--verbose``.
    """

    section = observability_config or {}
    chosen_level = level if level is not None else section.get("log_level", "WARNING")
    chosen_dir = log_dir if log_dir is not None else section.get("log_dir", "logs")
    return setup_structured_logging(
        LoggingConfig(
            base_log_dir=chosen_dir if isinstance(chosen_dir, (str, Path)) else "logs",
            logger_name=logger_name,
            level=chosen_level if isinstance(chosen_level, (int, str)) else "WARNING",
            log_to_file=bool(section.get("log_to_file", False)),
            log_to_stderr=bool(section.get("log_to_stderr", True)),
            json_logs=bool(section.get("json_logs", True)),
        )
    )


def setup_structured_logging(config: LoggingConfig) -> LoggingHandle:
    """Replace the handlers on ``config.logger_name`` and route structlog into it."""
    global _active
    shutdown_logging()

    level = _level_number(config.level)
    log_path: Path | None = None
    handlers: list[logging.Handler] = []
    if config.log_to_file:
        name = config.log_filename.strip()
        if not name or Path(name).name != name:
            raise ValueError(f"log_filename must be a bare file name, got {config.log_filename!r}")
        directory = Path(config.base_log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        log_path = directory / name
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    if config.log_to_stderr:
        handlers.append(logging.StreamHandler())

    formatter = JsonLineFormatter() if config.json_logs else logging.Formatter(TEXT_FORMAT)
    logger = logging.getLogger(config.logger_name)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(level)
    logger.propagate = False
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    if not handlers:
        logger.addHandler(logging.NullHandler())

    configure_structlog()
    handle = LoggingHandle(logger=logger, log_path=log_path, handlers=tuple(handlers))
    with _lock:
        _active = handle
    return handle


def configure_structlog() -> None:
    """Make ``structlog.get_logger`` produce stdlib records with ``extra`` fields."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Close ``handle``, or the active handle when none is given."""
    global _active
    with _lock:
        target = handle or _active
        if target is None:
            return
        if target is _active:
            _active = None
    target.shutdown()


def get_active_logging_handle() -> LoggingHandle | None:
    with _lock:
        return _active


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelNamesMapping().get(level.strip().upper())
    if number is None:
        raise ValueError(f"unsupported logging level {level!r}")
    return number


__all__ = [
    "LOG_FILENAME",
    "JsonLineFormatter",
    "LoggingConfig",
    "LoggingHandle",
    "configure_structlog",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
