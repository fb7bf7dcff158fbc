"""Tests for the structured logging system (ledger_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from ledger_kernel.domain.values import Currency
from ledger_kernel.exceptions import InvalidDateRangeError, MalformedRecordError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "ledger_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("summary_completed", extra={"row_count": 3, "is_partial": False})

        record = _parse_log(stream)
        assert record["row_count"] == 3
        assert record["is_partial"] is False

    def test_decimal_date_and_enum_encoded(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "money",
            extra={"amount": Decimal("12.50"), "on": date(2024, 1, 31), "currency": Currency.GBP},
        )

        record = _parse_log(stream)
        assert record["amount"] == "12.50"
        assert record["on"] == "2024-01-31"
        assert record["currency"] == "GBP"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", apartment_id="12")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["apartment_id"] == "12"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "apartment_id" not in record

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_fields_extracted(self):
        """Kernel exceptions carry a code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise MalformedRecordError("payment", 7, "missing amount")
        except MalformedRecordError:
            get_logger("test").warning("record_rejected", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "MALFORMED_RECORD"
        assert record["exc_type"] == "MalformedRecordError"
        assert record["exc_source_kind"] == "payment"
        assert record["exc_record_id"] == 7
        assert record["exc_reason"] == "missing amount"

    def test_date_range_error_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise InvalidDateRangeError(date(2024, 2, 1), date(2024, 1, 1))
        except InvalidDateRangeError:
            get_logger("test").error("bad_request", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_date_from"] == "2024-02-01"
        assert record["exc_date_to"] == "2024-01-01"

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO; the debug line is dropped.
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= record.keys()


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", apartment_id="5")
        assert LogContext.get_all() == {"correlation_id": "x", "apartment_id": "5"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(apartment_id="outer")
        with LogContext.bind(apartment_id="inner"):
            assert LogContext.get_all()["apartment_id"] == "inner"
        assert LogContext.get_all()["apartment_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        with LogContext.bind(request_id="temp"):
            assert LogContext.get_all()["request_id"] == "temp"
        assert "request_id" not in LogContext.get_all()

    def test_bind_stringifies_ids(self):
        with LogContext.bind(apartment_id=42):
            assert LogContext.get_all()["apartment_id"] == "42"

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(request_id="b")
        ctx = LogContext.get_all()
        assert ctx["correlation_id"] == "a"
        assert ctx["request_id"] == "b"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        assert len(logging.getLogger("ledger_kernel").handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("services.ledger_aggregator")
        assert logger.name == "ledger_kernel.services.ledger_aggregator"

    def test_logger_hierarchy(self):
        """Child loggers inherit the ledger_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "ledger_kernel.deep.nested.module"
