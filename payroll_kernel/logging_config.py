"""
Structured logging for payroll runs (``payroll_kernel.logging_config``).

Responsibility
--------------
Emit one JSON object per log line so a payroll run can be reconstructed
from its logs: which run, which configuration set, which employee and
which period produced a figure.

Log lines
---------
Every message is an event name (``payroll_assembled``,
``contribution_computed``, ...).  A line carries:

* ``ts``, ``level``, ``logger`` and ``event``;
* the payroll context bound through ``LogContext`` (``run_id``,
  ``config_id``, ``employee_id``, ``period_id``), whichever are set;
* the ``extra`` fields of the call, money as strings, dates in ISO form;
* an ``error`` object when the record carries an exception.  For a
  ``PayrollEngineError`` it holds the ``code`` and every structured
  attribute of the exception.

Threads
-------
Context lives in ``contextvars``.  Worker threads of a
``ThreadPoolExecutor`` start with an empty context, so batch workers bind
their own fields; nothing bound in one worker is visible in another.
"""

from __future__ import annotations

__all__ = [
    "CONTEXT_FIELDS",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import asdict, is_dataclass
from datetime import UTC, date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO
from uuid import UUID

LOGGER_NAMESPACE = "payroll_kernel"

CONTEXT_FIELDS: tuple[str, ...] = ("run_id", "config_id", "employee_id", "period_id")

_context: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"payroll_log_{name}", default=None) for name in CONTEXT_FIELDS
}


def _check_fields(fields: dict[str, Any]) -> None:
    unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
    if unknown:
        raise TypeError(f"unknown log context field(s): {', '.join(unknown)}")


class LogContext:
    """Payroll fields attached to every log line of the current context."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set fields for the rest of the current context; None is ignored."""
        _check_fields(fields)
        for name, value in fields.items():
            if value is not None:
                _context[name].set(str(value))

    @staticmethod
    def get_all() -> dict[str, str]:
        """Bound fields in declaration order, unset ones omitted."""
        values = {name: _context[name].get() for name in CONTEXT_FIELDS}
        return {name: value for name, value in values.items() if value is not None}

    @staticmethod
    def clear() -> None:
        for var in _context.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """
        Bind fields for the duration of a ``with`` block.

        Previous values (including unset) are restored on exit, also when
        the block raises.
        """
        _check_fields(fields)
        tokens: list[tuple[ContextVar[str | None], Token]] = [
            (_context[name], _context[name].set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON rendering
# ---------------------------------------------------------------------------

_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    """``json.dumps`` fallback for payroll value types."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return str(value)


def _error_payload(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    code = getattr(exc, "code", None)
    if code is not None:
        error["code"] = code
    attributes = {
        key: value for key, value in vars(exc).items() if not key.startswith("_")
    }
    if attributes:
        error["fields"] = attributes
    return error


class StructuredFormatter(logging.Formatter):
    """Render a record as one JSON line (see module docstring for keys)."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        line.update(LogContext.get_all())
        line.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in line
        )

        if record.exc_info and record.exc_info[1] is not None:
            error = _error_payload(record.exc_info[1])
            error["traceback"] = self.formatException(record.exc_info)
            line["error"] = error

        return json.dumps(line, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger for a payroll component, e.g. ``get_logger("engines.tax")``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the payroll logger namespace.

    Only the first call has an effect until ``reset_logging`` runs, so
    library code may call it defensively without duplicating output.

    Args:
        level: Threshold as a number or a name such as ``"WARNING"``.
        stream: Destination when no handler is given (default stderr).
        handler: Handler to use instead of a stream handler; its
            formatter is replaced.
    """
    global _handler
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]

    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.setLevel(level)
        namespace.propagate = False
        namespace.addHandler(_handler)


def reset_logging() -> None:
    """Detach the payroll handler and restore defaults (tests use this)."""
    global _handler
    with _setup_lock:
        namespace = logging.getLogger(LOGGER_NAMESPACE)
        if _handler is not None:
            namespace.removeHandler(_handler)
            _handler = None
        namespace.setLevel(logging.WARNING)
        namespace.propagate = True
