"""
Structured JSON logging for the payroll kernel.

Every record emitted under the ``payroll_kernel`` logger is one JSON line
carrying the payslip context in force: the payroll run, the employee and
the pay period.  Engines bind that context once per calculation with
``LogContext.bind(...)`` and every log line below inherits it.

Usage:
    configure_logging(level=logging.INFO)
    logger = get_logger("engines.payslip")

    with LogContext.bind(run_id="2023-06", employee_id="emp-1", period=date(2023, 6, 1)):
        logger.info("payslip_calculation_started", extra={"scheme": "ordinary"})
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "payroll_kernel"

# ---------------------------------------------------------------------------
# Payslip context
# ---------------------------------------------------------------------------

# Order is the order the fields appear in each JSON line
CONTEXT_FIELDS: tuple[str, ...] = ("run_id", "employee_id", "period")

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"payroll_log_{name}", default=None) for name in CONTEXT_FIELDS
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _context_vars[name]
    except KeyError:
        raise TypeError(
            f"Unknown log context field {name!r}; expected one of {CONTEXT_FIELDS}"
        ) from None


def _as_text(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class LogContext:
    """
    Context-local payslip fields added to every log line.

    Backed by contextvars, so concurrent calculations in threads or tasks
    never see each other's employee or period.  Fields set to None are
    left untouched; dates are stored in ISO format.
    """

    @staticmethod
    def set(**fields: Any) -> None:
        """Set context fields for the rest of the current context."""
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                var.set(_as_text(value))

    @staticmethod
    def get_all() -> dict[str, str]:
        """Return the fields currently set, in CONTEXT_FIELDS order."""
        return {
            name: value
            for name in CONTEXT_FIELDS
            if (value := _context_vars[name].get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = []
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                tokens.append((var, var.set(_as_text(value))))
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    # Amounts stay strings so they never pass through float
    if isinstance(obj, (Decimal, UUID)):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(_as_text(v) for v in obj)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # PayrollKernelError subclasses carry field / period / reason attributes
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, payslip context, then ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the payroll_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_installed_handler: logging.Handler | None = None
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the ``payroll_kernel`` logger.

    Idempotent: once a handler is installed, later calls change nothing
    until reset_logging().  Records do not propagate to the root logger.
    """
    global _installed_handler
    with _lock:
        if _installed_handler is not None:
            return
        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        _installed_handler = handler

        payroll_logger = logging.getLogger(_LOGGER_PREFIX)
        payroll_logger.setLevel(level)
        payroll_logger.propagate = False
        payroll_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove the handler installed by configure_logging(). FOR TESTING ONLY."""
    global _installed_handler
    with _lock:
        payroll_logger = logging.getLogger(_LOGGER_PREFIX)
        if _installed_handler is not None:
            payroll_logger.removeHandler(_installed_handler)
            _installed_handler = None
        payroll_logger.setLevel(logging.WARNING)
