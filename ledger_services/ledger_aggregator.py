"""
ledger_services.ledger_aggregator -- Per-apartment multi-currency ledger summary.

Responsibility:
    Produce the financial summary of one apartment: fetch its payments,
    service charges and utility charges concurrently, apply the payer
    policy, normalize, split on the reporting window start, accumulate per
    currency, and return the window summary, the opening balance and the
    drill-down ledger rows.

Architecture position:
    Services -- stateless orchestration over engines + collaborators.
    Composes TransactionNormalizer, the period splitter and the
    accumulator with a SourceGateway.

Invariants enforced:
    - Currency isolation: EGP and GBP are summed independently and never
      converted.
    - net = requested - spent for every currency, in the window summary and
      in the opening balance.
    - The boundary day (date_from) belongs to the window, never to the
      opening balance.
    - A failing or hung source kind never fails the report: it contributes
      zero, is listed in ``failures`` and marks the result partial.
    - A malformed record never fails the report: it is skipped and listed
      in ``skipped_records``.

Failure modes:
    - InvalidDateRangeError when date_to < date_from, raised before any
      fetch is issued.

Usage:
    from ledger_services.ledger_aggregator import LedgerAggregator

    aggregator = LedgerAggregator(gateway, config)
    ledger = aggregator.summarize(12, date_from=date(2024, 1, 1), date_to=date(2024, 12, 31))
    ledger.summary.net_money[Currency.EGP]
    ledger.opening_balance, ledger.cumulative(), ledger.is_partial
"""

from __future__ import annotations

import contextvars
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import date
from typing import Any

from ledger_config import LedgerConfig
from ledger_engines.accumulator import accumulate, merge_totals
from ledger_engines.normalizer import TransactionNormalizer
from ledger_engines.period_splitter import split
from ledger_kernel.domain.ledger import (
    ApartmentLedger,
    FinancialSummary,
    LedgerEntry,
    LedgerRow,
    PeriodizedTotals,
    SkippedRecord,
    SourceFailure,
)
from ledger_kernel.domain.records import Payer, SourceKind, SourceRecord
from ledger_kernel.exceptions import CollaboratorUnavailableError, InvalidDateRangeError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_services.collaborators import FetchFilters, SourceGateway

logger = get_logger("services.ledger_aggregator")

_KIND_ORDER = {
    SourceKind.PAYMENT: 0,
    SourceKind.SERVICE_CHARGE: 1,
    SourceKind.UTILITY_CHARGE: 2,
}


def _id_key(value: Any) -> tuple[int, Any]:
    if isinstance(value, int) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))


def order_ledger(entries: Sequence[LedgerEntry]) -> list[LedgerEntry]:
    """
    Newest first.  Same day: payments, then service charges, then
    utilities; same kind: highest record id first.
    """
    ordered = sorted(entries, key=lambda e: _id_key(e.source_id), reverse=True)
    ordered.sort(key=lambda e: _KIND_ORDER[e.source_kind])
    ordered.sort(key=lambda e: e.occurred_at, reverse=True)
    return ordered


class LedgerAggregator:
    """
    Summarizes the ledger of one apartment.

    Contract:
        Receives a SourceGateway and a LedgerConfig via constructor
        injection.  Holds no per-request state; one instance may serve
        concurrent requests.
    Guarantees:
        - ``summarize`` returns an ApartmentLedger whose summary maps always
          contain every configured reporting currency.
        - Exactly three fetches are issued per call, concurrently, each
          bounded by ``fetch_timeout_seconds``.
    Non-goals:
        - Does not persist anything; totals are derived per call.
    """

    def __init__(
        self,
        gateway: SourceGateway,
        config: LedgerConfig | None = None,
        normalizer: TransactionNormalizer | None = None,
    ):
        self._gateway = gateway
        self._config = config or LedgerConfig()
        self._normalizer = normalizer or TransactionNormalizer()

    @property
    def config(self) -> LedgerConfig:
        return self._config

    def summarize(
        self,
        apartment_id: Any,
        date_from: date | None = None,
        date_to: date | None = None,
        include_renter_transactions: bool = False,
        booking_id: Any = None,
        payers: Iterable[Payer | str] | None = None,
    ) -> ApartmentLedger:
        """
        Summarize one apartment over [date_from, date_to].

        Args:
            apartment_id: Apartment to report on.
            date_from: First day of the reporting window.  Everything
                before it forms the opening balance.  None means the
                window starts at the beginning of history.
            date_to: Last day (inclusive).  None means up to now.
            include_renter_transactions: Include renter-paid records as
                well as owner-paid ones.
            booking_id: Restrict to records of one booking.
            payers: Payers to keep, overriding the default policy (owner,
                plus renter when include_renter_transactions, plus company
                when include_company_paid is configured).

        Raises:
            InvalidDateRangeError: If date_to is before date_from.
        """
        if date_from is not None and date_to is not None and date_to < date_from:
            raise InvalidDateRangeError(date_from, date_to)

        allowed = self._allowed_payers(include_renter_transactions, payers)
        # date_from is not pushed down: the opening balance needs history.
        filters = FetchFilters(
            date_to=date_to,
            include_renter_transactions=include_renter_transactions or Payer.RENTER in allowed,
            booking_id=booking_id,
        )

        with LogContext.bind(apartment_id=apartment_id):
            t0 = time.monotonic()
            logger.info(
                "summary_started",
                extra={
                    "date_from": date_from,
                    "date_to": date_to,
                    "include_renter_transactions": include_renter_transactions,
                    "booking_id": booking_id,
                },
            )

            fetched, failures = self._fetch_all(apartment_id, filters)

            skipped: list[SkippedRecord] = []
            entries_by_kind: dict[SourceKind, list[LedgerEntry]] = {}
            for kind, records in fetched.items():
                entries_by_kind[kind] = self._admit(
                    kind,
                    records,
                    apartment_id=apartment_id,
                    filters=filters,
                    allowed_payers=allowed,
                    skipped=skipped,
                )

            currencies = self._config.reporting_currencies
            before_shards = []
            within_shards = []
            within_entries: list[LedgerEntry] = []
            for kind in SourceKind:
                parts = split(entries_by_kind.get(kind, ()), date_from)
                before_shards.append(accumulate(parts.before))
                within_shards.append(accumulate(parts.within))
                within_entries.extend(parts.within)

            before_totals = merge_totals(accumulate((), currencies), *before_shards)
            within_totals = merge_totals(accumulate((), currencies), *within_shards)

            summary = FinancialSummary.from_totals(within_totals, currencies)
            opening = (
                FinancialSummary.from_totals(before_totals, currencies)
                if date_from is not None
                else None
            )
            rows = tuple(LedgerRow.from_entry(e) for e in order_ledger(within_entries))

            result = ApartmentLedger(
                apartment_id=apartment_id,
                summary=summary,
                opening_balance=opening,
                totals=PeriodizedTotals(before=before_totals, within=within_totals),
                ledger=rows,
                skipped_records=tuple(skipped),
                failures=tuple(failures),
                date_from=date_from,
                date_to=date_to,
            )

            logger.info(
                "summary_completed",
                extra={
                    "row_count": len(rows),
                    "skipped_count": result.skipped_count,
                    "failed_sources": [k.value for k in result.failed_sources],
                    "is_partial": result.is_partial,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return result

    def _allowed_payers(
        self,
        include_renter_transactions: bool,
        payers: Iterable[Payer | str] | None,
    ) -> frozenset[Payer]:
        if payers is not None:
            return frozenset(Payer.parse(p) for p in payers)
        allowed = {Payer.OWNER}
        if include_renter_transactions:
            allowed.add(Payer.RENTER)
        if self._config.include_company_paid:
            allowed.add(Payer.COMPANY)
        return frozenset(allowed)

    # -- fan-out ------------------------------------------------------------

    def _fetchers(self) -> dict[SourceKind, Callable[[Any, FetchFilters], Sequence[SourceRecord]]]:
        return {
            SourceKind.PAYMENT: self._gateway.fetch_payments,
            SourceKind.SERVICE_CHARGE: self._gateway.fetch_service_charges,
            SourceKind.UTILITY_CHARGE: self._gateway.fetch_utility_charges,
        }

    def _fetch_all(
        self, apartment_id: Any, filters: FetchFilters
    ) -> tuple[dict[SourceKind, Sequence[SourceRecord]], list[SourceFailure]]:
        """
        Issue the three fetches concurrently and wait at most
        ``fetch_timeout_seconds`` for all of them.

        The pool always has a worker per fetch, so a hung fetch never queues
        the others.  The executor is shut down without waiting: a hung fetch
        keeps its worker thread but no longer holds up the report.
        """
        timeout = self._config.fetch_timeout_seconds
        fetchers = self._fetchers()
        executor = ThreadPoolExecutor(
            max_workers=max(self._config.max_workers, len(fetchers)),
            thread_name_prefix="ledger-fetch",
        )
        futures: dict[SourceKind, Future] = {}
        try:
            for kind, fetch in fetchers.items():
                ctx = contextvars.copy_context()
                futures[kind] = executor.submit(ctx.run, fetch, apartment_id, filters)

            done, _ = wait(futures.values(), timeout=timeout)
            fetched: dict[SourceKind, Sequence[SourceRecord]] = {}
            failures: list[SourceFailure] = []
            for kind, future in futures.items():
                if future not in done:
                    future.cancel()
                    failures.append(
                        self._failure(kind, f"timed out after {timeout}s", timed_out=True)
                    )
                    continue
                try:
                    fetched[kind] = list(future.result())
                except Exception as exc:
                    failures.append(self._failure(kind, f"{type(exc).__name__}: {exc}", exc=exc))
            return fetched, failures
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _failure(
        kind: SourceKind,
        reason: str,
        timed_out: bool = False,
        exc: BaseException | None = None,
    ) -> SourceFailure:
        error = CollaboratorUnavailableError(kind.value, reason, timed_out=timed_out)
        logger.warning(
            "collaborator_unavailable",
            exc_info=(type(error), error, exc.__traceback__ if exc else None),
        )
        return SourceFailure(source_kind=kind, reason=reason, timed_out=timed_out)

    # -- policy -------------------------------------------------------------

    def _admit(
        self,
        kind: SourceKind,
        records: Sequence[SourceRecord],
        apartment_id: Any,
        filters: FetchFilters,
        allowed_payers: frozenset[Payer],
        skipped: list[SkippedRecord],
    ) -> list[LedgerEntry]:
        """Normalize one source kind and apply the in-process policies."""
        result = self._normalizer.normalize_many(records, kind=kind)
        for error in result.rejected:
            skipped.append(SkippedRecord(kind, error.record_id, error.reason))

        admitted = []
        for entry in result.entries:
            if str(entry.apartment_id) != str(apartment_id):
                reason = f"belongs to apartment {entry.apartment_id}"
                logger.warning(
                    "record_rejected",
                    extra={
                        "source_kind": kind.value,
                        "record_id": entry.source_id,
                        "reason": reason,
                    },
                )
                skipped.append(SkippedRecord(kind, entry.source_id, reason))
                continue
            if entry.payer not in allowed_payers:
                continue
            if filters.date_to is not None and entry.occurred_at > filters.date_to:
                continue
            if filters.booking_id is not None and str(entry.booking_ref) != str(filters.booking_id):
                continue
            admitted.append(entry)
        return admitted
