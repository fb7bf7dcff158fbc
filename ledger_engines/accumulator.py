"""
Module: ledger_engines.accumulator
Responsibility:
    Fold LedgerEntry values into per-currency debit and credit sums, and
    merge partial totals computed independently (for example one shard per
    source kind, computed in parallel).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Currency isolation: the totals of one currency depend only on the
      entries of that currency.  Nothing is ever converted.
    - An absent currency never appears in the output unless it was
      requested through ``currencies`` (then it is zero-filled).
    - ``merge_totals`` is commutative and associative, so shards may be
      merged in any order.

Usage:
    from ledger_engines.accumulator import accumulate, merge_totals

    totals = accumulate(entries, currencies=[Currency.EGP, Currency.GBP])
    totals[Currency.EGP].debit_sum
"""

from __future__ import annotations

from collections.abc import Iterable

from ledger_kernel.domain.ledger import CurrencyTotals, DirectionTotals, LedgerEntry
from ledger_kernel.domain.values import Currency
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.accumulator")


def _sorted(totals: dict[Currency, DirectionTotals]) -> dict[Currency, DirectionTotals]:
    return {c: totals[c] for c in sorted(totals, key=lambda c: c.value)}


@traced_engine("accumulator", "1.0", fingerprint_fields=("currencies",))
def accumulate(
    entries: Iterable[LedgerEntry],
    currencies: Iterable[Currency | str] | None = None,
) -> CurrencyTotals:
    """
    Sum debits and credits per currency in a single pass.

    Args:
        entries: Ledger entries in any order.
        currencies: Currencies that must appear in the result even when no
            entry carries them.

    Returns:
        Mapping of currency to DirectionTotals, ordered by currency code.
    """
    totals: dict[Currency, DirectionTotals] = {}
    for currency in currencies or ():
        parsed = Currency.parse(currency)
        totals.setdefault(parsed, DirectionTotals.zero(parsed))

    count = 0
    for entry in entries:
        current = totals.get(entry.currency) or DirectionTotals.zero(entry.currency)
        totals[entry.currency] = current.add(entry)
        count += 1

    logger.debug(
        "entries_accumulated",
        extra={"entry_count": count, "currencies": [c.value for c in totals]},
    )
    return _sorted(totals)


def merge_totals(*shards: CurrencyTotals) -> CurrencyTotals:
    """Add several CurrencyTotals together, currency by currency."""
    merged: dict[Currency, DirectionTotals] = {}
    for shard in shards:
        for currency, totals in shard.items():
            if currency in merged:
                merged[currency] = merged[currency] + totals
            else:
                merged[currency] = totals
    return _sorted(merged)
