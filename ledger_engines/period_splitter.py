"""
Module: ledger_engines.period_splitter
Responsibility:
    Partition ledger entries into those strictly before a boundary date
    (the opening balance) and those on or after it (the reporting window),
    and compute per-currency totals for both sides.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``before`` holds entries with occurred_at < boundary, ``within`` holds
      occurred_at >= boundary.  An entry dated exactly on the boundary is
      always "within".
    - No boundary means ``before`` is empty and everything is "within".
    - before + within reproduces the input exactly; input order is kept on
      each side.

Failure modes:
    - ValueError when ``inclusive_of_boundary=False`` is requested: the
      boundary day always belongs to the reporting window.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from ledger_kernel.domain.ledger import LedgerEntry, PeriodizedTotals
from ledger_kernel.domain.values import Currency
from ledger_engines.accumulator import accumulate
from ledger_engines.tracer import traced_engine


@dataclass(frozen=True)
class PeriodSplit:
    """Entries before the boundary and entries within the reporting window."""

    before: tuple[LedgerEntry, ...]
    within: tuple[LedgerEntry, ...]
    boundary_date: date | None = None


@traced_engine("period_splitter", "1.0", fingerprint_fields=("boundary_date",))
def split(
    entries: Iterable[LedgerEntry],
    boundary_date: date | None = None,
    inclusive_of_boundary: bool = True,
) -> PeriodSplit:
    """
    Split entries on ``boundary_date``.

    Raises:
        ValueError: If ``inclusive_of_boundary`` is False.
    """
    if not inclusive_of_boundary:
        raise ValueError(
            "The boundary day always belongs to the reporting window; "
            "inclusive_of_boundary=False is not supported"
        )
    if boundary_date is None:
        return PeriodSplit(before=(), within=tuple(entries))

    before: list[LedgerEntry] = []
    within: list[LedgerEntry] = []
    for entry in entries:
        if entry.occurred_at < boundary_date:
            before.append(entry)
        else:
            within.append(entry)
    return PeriodSplit(before=tuple(before), within=tuple(within), boundary_date=boundary_date)


def periodize(
    entries: Iterable[LedgerEntry],
    boundary_date: date | None = None,
    currencies: Iterable[Currency | str] | None = None,
) -> PeriodizedTotals:
    """Split on ``boundary_date`` and accumulate both sides."""
    currencies = tuple(currencies or ())
    parts = split(entries, boundary_date)
    return PeriodizedTotals(
        before=accumulate(parts.before, currencies),
        within=accumulate(parts.within, currencies),
    )
