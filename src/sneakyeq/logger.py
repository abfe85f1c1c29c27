from __future__ import annotations

import json
import logging
import sys
import traceback
from dataclasses import dataclass
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "sneakyeq"
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "sneakyeq.log"

_STANDARD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
        "message",
    }
)


@dataclass(frozen=True)
class LoggingConfig:
    """Handlers for the ``sneakyeq`` logger.

    ``events`` limits output to the listed structured events (``session_end``,
    ``reconcile``, ``memoize_hit``, ``memoize_miss``); empty means all of them.
    Records without an event always pass.
    """

    level: int = logging.INFO
    file: str | None = None
    enable_file_logging: bool = False
    log_dir: str = DEFAULT_LOG_DIR
    log_rotation: bool = False
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    events: tuple[str, ...] = ()


class EventFilter(logging.Filter):
    """Drops records whose ``event`` extra is not in ``events``."""

    def __init__(self, events: tuple[str, ...]) -> None:
        super().__init__()
        self.events = frozenset(events)

    def filter(self, record: logging.LogRecord) -> bool:
        event = getattr(record, "event", None)
        return event is None or event in self.events


class DetailedTextFormatter(logging.Formatter):
    """Formatter for human-readable logs including the ``extra`` fields.

    The ``event`` extra is shown as a tag in front of the message and integer
    counters (facades, records, fields) are collected on one line:

        2026-01-01 12:00:00.000 | DEBUG | session    | [session_end] Session ended: revoked 2 facade(s)
          facades=2 records=3
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        module = record.name.split(".")[-1] if "." in record.name else record.name
        event = getattr(record, "event", None)
        tag = f"[{event}] " if event else ""
        lines = [f"{timestamp} | {record.levelname:5s} | {module:10s} | {tag}{record.getMessage()}"]

        counters: list[str] = []
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key == "event" or key.startswith("_"):
                continue
            if isinstance(value, int) and not isinstance(value, bool):
                counters.append(f"{key}={value}")
            elif isinstance(value, (dict, list, tuple)):
                lines.append(f"  {key.title()}: {json.dumps(value, indent=2, default=repr)}")
            elif isinstance(value, str) and len(value) > 100:
                lines.append(f"  {key.title()}: {value[:100]}...")
            else:
                lines.append(f"  {key.title()}: {value}")
        if counters:
            lines.insert(1, "  " + " ".join(counters))

        if record.exc_info:
            lines.append("  Traceback:")
            lines.append("    " + "\n    ".join(traceback.format_exception(*record.exc_info)))

        lines.append("")
        return "\n".join(lines)


def get_logger(name: str | None = None) -> logging.Logger:
    logger = logging.getLogger(name or LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    return logger


def configure_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Attach handlers to the ``sneakyeq`` logger.

    Library modules only create loggers; applications call this (or their
    own logging setup) to see session and cache events.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(config.level)
    logger.propagate = False

    if config.enable_file_logging and not config.file:
        log_dir = Path(config.log_dir)
        log_file = log_dir / DEFAULT_LOG_FILE
        try:
            log_dir.mkdir(parents=True, exist_ok=True)

            if config.log_rotation:
                file_handler: logging.Handler = RotatingFileHandler(
                    log_file,
                    mode="a",
                    maxBytes=config.max_bytes,
                    backupCount=config.backup_count,
                )
            else:
                file_handler = logging.FileHandler(log_file, mode="a")

            file_handler.setLevel(config.level)
            file_handler.setFormatter(DetailedTextFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            sys.stderr.write(f"Warning: Could not create log file {log_file}: {e}\n")
            sys.stderr.write("Falling back to stderr logging only\n")

    if config.file:
        main_handler: logging.Handler = logging.FileHandler(config.file, mode="w")
    else:
        main_handler = logging.StreamHandler(sys.stderr)
    main_handler.setLevel(config.level)
    main_handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(main_handler)

    if config.events:
        event_filter = EventFilter(config.events)
        for handler in logger.handlers:
            handler.addFilter(event_filter)
    return logger
