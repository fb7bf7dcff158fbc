"""
Module: ledger_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    ledger_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel (domain, exceptions, logging) and sibling
    engine modules.  MUST NOT import ledger_services.

Invariants enforced:
    - Purity: engines never call ``datetime.now()`` or ``date.today()``.
      Dates are explicit parameters; services supply them from a Clock.
    - Decimal-only arithmetic for every amount; floats are rejected.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from ledger_engines import (
        TransactionNormalizer, accumulate, merge_totals, split, periodize,
        resolve_occupancy, utility_cost, resolve_service_cost, build_statement,
    )
"""

from ledger_engines.accumulator import accumulate, merge_totals
from ledger_engines.metering import (
    DEFAULT_MAX_METER_VALUE,
    UtilityCost,
    meter_usage,
    utility_cost,
)
from ledger_engines.normalizer import (
    NormalizationResult,
    TransactionNormalizer,
    source_kind_of,
)
from ledger_engines.occupancy import resolve_occupancy, resolve_occupancy_status
from ledger_engines.period_splitter import PeriodSplit, periodize, split
from ledger_engines.pricing import PriceSource, ServicePrice, resolve_service_cost
from ledger_engines.statement import (
    OutstandingRow,
    OutstandingScope,
    Statement,
    StatementRow,
    build_statement,
)
from ledger_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "DEFAULT_MAX_METER_VALUE",
    "NormalizationResult",
    "OutstandingRow",
    "OutstandingScope",
    "PeriodSplit",
    "PriceSource",
    "ServicePrice",
    "Statement",
    "StatementRow",
    "TransactionNormalizer",
    "UtilityCost",
    "accumulate",
    "build_statement",
    "compute_input_fingerprint",
    "merge_totals",
    "meter_usage",
    "periodize",
    "resolve_occupancy",
    "resolve_occupancy_status",
    "resolve_service_cost",
    "source_kind_of",
    "split",
    "traced_engine",
    "utility_cost",
]
