"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Reporting code must tell a bad source record apart from an unreachable
data source and from a caller mistake.  Each of these has a different
recovery policy, so each gets its own class, a machine-readable CODE, and
structured attributes that survive into the JSON logs.

Example:
    try:
        entry = normalizer.normalize(record)
    except MalformedRecordError as e:
        skipped.append((e.source_kind, e.record_id, e.reason))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- RecordError
    |   +-- MalformedRecordError
    |
    +-- CollaboratorError
    |   +-- CollaboratorUnavailableError
    |
    +-- RequestError
    |   +-- InvalidDateRangeError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- OccupancyError
    |   +-- ApartmentNotFoundError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                      | Recovery
--------------|---------------------------|-------------------------------------
Record        | MALFORMED_RECORD          | Skip the record, count it, continue
Collaborator  | COLLABORATOR_UNAVAILABLE  | Source kind reported as zero, partial
Request       | INVALID_DATE_RANGE        | Raised to the caller before any fetch
Currency      | INVALID_CURRENCY          | Unsupported currency code
              | CURRENCY_MISMATCH         | Arithmetic across currencies
Occupancy     | APARTMENT_NOT_FOUND       | Projection refresh of unknown apartment
Configuration | CONFIGURATION_ERROR       | Invalid configuration file
"""

from __future__ import annotations

from datetime import date
from typing import Any


class LedgerKernelError(Exception):
    """Base exception for all ledger kernel errors."""

    code: str = "LEDGER_KERNEL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Record Errors
# =============================================================================


class RecordError(LedgerKernelError):
    """Base class for source record errors."""

    code: str = "RECORD_ERROR"


class MalformedRecordError(RecordError):
    """A single source record failed validation and cannot be normalized."""

    code: str = "MALFORMED_RECORD"

    def __init__(self, source_kind: str, record_id: Any, reason: str):
        self.source_kind = source_kind
        self.record_id = record_id
        self.reason = reason
        super().__init__(
            f"Malformed {source_kind} record {record_id!r}: {reason}"
        )


# =============================================================================
# Collaborator Errors
# =============================================================================


class CollaboratorError(LedgerKernelError):
    """Base class for failures of external data collaborators."""

    code: str = "COLLABORATOR_ERROR"


class CollaboratorUnavailableError(CollaboratorError):
    """A fetch from a collaborator failed or did not finish in time."""

    code: str = "COLLABORATOR_UNAVAILABLE"

    def __init__(
        self,
        source_kind: str,
        reason: str,
        timed_out: bool = False,
    ):
        self.source_kind = source_kind
        self.reason = reason
        self.timed_out = timed_out
        super().__init__(f"Source {source_kind} unavailable: {reason}")


# =============================================================================
# Request Errors
# =============================================================================


class RequestError(LedgerKernelError):
    """Base class for caller programming errors."""

    code: str = "REQUEST_ERROR"


class InvalidDateRangeError(RequestError):
    """date_to is earlier than date_from."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, date_from: date, date_to: date):
        self.date_from = date_from.isoformat()
        self.date_to = date_to.isoformat()
        super().__init__(
            f"date_to {self.date_to} is before date_from {self.date_from}"
        )


# =============================================================================
# Currency Errors
# =============================================================================


class CurrencyError(LedgerKernelError):
    """Base class for currency errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not one of the supported ledger currencies."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: Any):
        self.currency = str(currency)
        super().__init__(f"Unsupported currency: {currency!r}")


class CurrencyMismatchError(CurrencyError):
    """Arithmetic or comparison attempted across two currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, left: str, right: str, operation: str):
        self.left = left
        self.right = right
        self.operation = operation
        super().__init__(
            f"Cannot {operation} amounts in different currencies: {left} and {right}"
        )


# =============================================================================
# Occupancy Errors
# =============================================================================


class OccupancyError(LedgerKernelError):
    """Base class for occupancy errors."""

    code: str = "OCCUPANCY_ERROR"


class ApartmentNotFoundError(OccupancyError):
    """The apartment does not exist in the system of record."""

    code: str = "APARTMENT_NOT_FOUND"

    def __init__(self, apartment_id: int):
        self.apartment_id = apartment_id
        super().__init__(f"Apartment {apartment_id} not found")


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(LedgerKernelError):
    """A configuration file holds an invalid value."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for {key!r}: {reason}")
