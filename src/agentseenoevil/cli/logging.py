"""
Logging - Formatters, setup and a redacting filter for the CLI.

Provides:
- TextFormatter: Human-readable lines, optionally colored
- JSONFormatter: One JSON object per record for log aggregation
- RedactingFilter: Runs a Redactor over every record before it is emitted
- setup_logging: Configure the root logger on stderr
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from agentseenoevil.core.redactor import Redactor


__all__ = [
    "JSONFormatter",
    "RedactingFilter",
    "TextFormatter",
    "setup_logging",
]

# Attributes present on every LogRecord; anything else came in via `extra`
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _context_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        static_fields: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}

        if self.include_timestamp:
            timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry["timestamp"] = timestamp.strftime("%Y-%m-%dT%H:%M:%S.") + (
                f"{int(record.msecs):03d}Z"
            )
        if self.include_level:
            entry["level"] = record.levelname
        if self.include_logger:
            entry["logger"] = record.name

        entry["message"] = record.getMessage()
        entry.update(self.static_fields)

        context = _context_fields(record)
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Format log records as readable text lines."""

    COLORS = {
        "DEBUG": "\033[2m",
        "INFO": "\033[36m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_context: bool = False) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = use_colors
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"

        line = f"{self.formatTime(record, self.datefmt)} {level} [{record.name}] {record.getMessage()}"

        if self.include_context:
            context = _context_fields(record)
            if context:
                line += " " + " ".join(f"{k}={v!r}" for k, v in context.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class RedactingFilter(logging.Filter):
    """
    Logging filter that redacts secrets from records.

    The message and any string arguments are cleaned in place. The filter
    never drops a record.
    """

    def __init__(self, redactor: Redactor | None = None) -> None:
        super().__init__()
        self._redactor = redactor or Redactor()

    @property
    def redactor(self) -> Redactor:
        return self._redactor

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._redactor.clean(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(self._clean_arg(arg) for arg in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._clean_arg(value) for key, value in record.args.items()}

        return True

    def _clean_arg(self, arg: Any) -> Any:
        if isinstance(arg, str):
            return self._redactor.clean(arg)
        return arg


def setup_logging(
    level: int = logging.INFO,
    log_format: str = "text",
    stream: TextIO | None = None,
    redactor: Redactor | None = None,
) -> logging.Handler:
    """
    Configure the root logger with a single stderr handler.

    Args:
        level: Root log level.
        log_format: "text" or "json".
        stream: Output stream (default stderr, so stdout stays clean for
            redacted text).
        redactor: If given, attach a RedactingFilter using it.

    Returns:
        The installed handler.
    """
    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        use_colors = hasattr(stream, "isatty") and stream.isatty()
        handler.setFormatter(TextFormatter(use_colors=use_colors))

    if redactor is not None:
        handler.addFilter(RedactingFilter(redactor))

    root.addHandler(handler)
    root.setLevel(level)
    return handler
