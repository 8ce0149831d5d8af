# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Structured logging for ArborVote.

Every facade operation runs inside an ``operation_context``. The context
binds three values that formatters attach to each record emitted while the
operation runs:

- correlation_id: random id grouping all records of one call
- operation: name of the entrypoint (``invest``, ``challenge``, ...)
- debate_id: debate the operation targets, if any

Two formatters are provided: ``JSONFormatter`` for log shippers and
``StandardFormatter`` for terminals. ``configure_logging`` wires them to the
root logger from ``CoreSettings``.

Log output never feeds back into debate state.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import CoreSettings

_correlation_id: ContextVar[str | None] = ContextVar("arborvote_correlation_id", default=None)
_operation: ContextVar[str | None] = ContextVar("arborvote_operation", default=None)
_debate_id: ContextVar[int | None] = ContextVar("arborvote_debate_id", default=None)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    """Bind ``correlation_id`` outside any context manager (None clears it)."""
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_operation() -> tuple[str | None, int | None]:
    """Name and debate id of the operation currently running, if any."""
    return _operation.get(), _debate_id.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str, None, None]:
    """Bind a correlation id for the enclosed block.

    Without an explicit id the enclosing one is kept, so an operation
    invoked from inside another (a reentrant port call) shares its id.
    A fresh id is generated only at the outermost level.
    """
    cid = correlation_id or _correlation_id.get() or generate_correlation_id()
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


@contextmanager
def operation_context(operation: str, debate_id: int | None = None) -> Generator[str, None, None]:
    """Bind an operation name, its debate and a correlation id.

    Yields:
        The correlation id in effect
    """
    with correlation_context() as cid:
        op_token = _operation.set(operation)
        debate_token = _debate_id.set(debate_id)
        try:
            yield cid
        finally:
            _debate_id.reset(debate_token)
            _operation.reset(op_token)


def _context_fields() -> dict[str, Any]:
    fields: dict[str, Any] = {}
    correlation_id = _correlation_id.get()
    if correlation_id:
        fields["correlation_id"] = correlation_id
    operation = _operation.get()
    if operation:
        fields["operation"] = operation
    debate_id = _debate_id.get()
    if debate_id is not None:
        fields["debate_id"] = debate_id
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Carries the operation context when set, the source location for
    warnings and above, formatted tracebacks, and a record's ``extra_data``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context_fields(),
        }

        if record.levelno >= logging.WARNING:
            entry["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = getattr(record, "extra_data", None)
        if extra is not None:
            entry["extra"] = extra

        # Enums, sets and other values without a JSON form are stringified
        return json.dumps(entry, default=str)


class StandardFormatter(logging.Formatter):
    """Single-line terminal format.

    Prefixes each message with ``[cid8 operation#debate]`` while an
    operation runs and colours the level name when stderr is a TTY.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    DIM = "\033[90m"
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt="%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stderr.isatty()

    def _prefix(self) -> str:
        fields = _context_fields()
        if not fields:
            return ""
        parts = [fields.get("correlation_id", "")[:8]]
        if "operation" in fields:
            operation = fields["operation"]
            if "debate_id" in fields:
                operation += f"#{fields['debate_id']}"
            parts.append(operation)
        prefix = "[" + " ".join(p for p in parts if p) + "]"
        return f"{self.DIM}{prefix}{self.RESET} " if self.use_colors else f"{prefix} "

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy; other handlers share the record
        record = logging.makeLogRecord(record.__dict__)
        record.msg = self._prefix() + str(record.msg)
        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
    settings: CoreSettings | None = None,
) -> None:
    """Install ArborVote's handlers on the root logger, replacing existing ones.

    Arguments left as None fall back to ``settings`` (``get_config()`` by
    default), that is to ARBORVOTE_LOG_LEVEL, ARBORVOTE_LOG_FORMAT and
    ARBORVOTE_LOG_FILE. With no format configured, JSON is chosen when
    stderr is not a terminal. A log file always receives JSON.
    """
    if settings is None:
        from .config import get_config

        settings = get_config()

    if json_format is None:
        configured = settings.log_format.lower()
        json_format = configured == "json" if configured in ("json", "text") else not sys.stderr.isatty()

    root = logging.getLogger()
    root.setLevel(_resolve_level(level if level is not None else settings.log_level))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if json_format else StandardFormatter())
    root.addHandler(console)

    log_file = log_file if log_file is not None else settings.log_file
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class OperationLogger:
    """Records facade calls and the faults that abort them.

    Parameters whose name contains a sensitive marker are redacted and long
    strings are cut, so content references and proofs never reach the logs
    verbatim.
    """

    SENSITIVE_MARKERS = ("secret", "token", "proof", "credential")
    MAX_STRING = 500

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("arborvote.operations")

    def log_call(self, operation: str, arguments: dict[str, Any], level: int = logging.DEBUG) -> None:
        self.logger.log(
            level,
            f"Operation call: {operation}",
            extra={"extra_data": {"operation": operation, "arguments": self._sanitize(arguments)}},
        )

    def log_fault(self, operation: str, error: Exception, level: int = logging.INFO) -> None:
        """Record that ``operation`` aborted with ``error`` and was rolled back."""
        self.logger.log(
            level,
            f"Operation aborted: {operation} -> {error}",
            extra={
                "extra_data": {
                    "operation": operation,
                    "fault": type(error).__name__,
                    "message": str(error),
                }
            },
        )

    def _sanitize(self, value: Any, key: str = "") -> Any:
        if key and any(marker in key.lower() for marker in self.SENSITIVE_MARKERS):
            return "[REDACTED]"
        if isinstance(value, dict):
            return {k: self._sanitize(v, str(k)) for k, v in value.items()}
        if isinstance(value, list | tuple):
            return [self._sanitize(v) for v in value]
        if isinstance(value, str) and len(value) > self.MAX_STRING:
            return value[: self.MAX_STRING] + "..."
        return value


operation_logger = OperationLogger()
