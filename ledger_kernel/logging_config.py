"""
Structured JSON logging for the ledger.

Every record is one JSON line carrying the active LogContext fields
(correlation, request and apartment ids) plus any ``extra`` the call site
passed.  Decimals and dates are written as strings so amounts keep their
exact digits.  When an exception is attached, its public attributes
(``source_kind``, ``record_id``, ``key`` ...) are exported as ``exc_*``.
"""

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator

_LOGGER_PREFIX = "ledger_kernel"

_CONTEXT: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"ledger_log_{name}", default=None)
    for name in ("correlation_id", "request_id", "apartment_id")
}


class LogContext:
    """Request-scoped log fields, carried by contextvars."""

    @staticmethod
    def set(**fields: Any) -> None:
        """Set the given fields; None leaves a field unchanged."""
        for name, value in fields.items():
            if value is not None:
                _CONTEXT[name].set(str(value))

    @staticmethod
    def get_all() -> dict[str, str]:
        return {
            name: value
            for name, var in _CONTEXT.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """Set fields for the duration of a block, restoring them afterwards."""
        tokens = [
            (_CONTEXT[name], _CONTEXT[name].set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _encode(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    # Decimal and anything else unknown
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            if hasattr(exc, "code"):
                payload["exc_code"] = exc.code
            for key, value in vars(exc).items():
                if not key.startswith("_") and key != "code":
                    payload[f"exc_{key}"] = value
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_encode)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ledger namespace, e.g. ``get_logger("engines.normalizer")``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *, level: int = logging.INFO, handler: logging.Handler | None = None
) -> None:
    """Attach a JSON handler to the ledger logger hierarchy; later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    handler = handler if handler is not None else logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo configure_logging (tests)."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
