"""
ledger_services -- Orchestration over the ledger engines.

LedgerAggregator builds per-apartment summaries from a SourceGateway;
InvoiceService shapes them into invoice views and statements;
OccupancyService resolves and caches occupancy.
"""

from ledger_services.collaborators import FetchFilters, SourceGateway, SqlSourceGateway
from ledger_services.invoice_service import (
    InvoiceService,
    InvoicesSummary,
    PreviousYearsTotals,
)
from ledger_services.ledger_aggregator import LedgerAggregator
from ledger_services.occupancy_service import OccupancyService

__all__ = [
    "FetchFilters",
    "InvoiceService",
    "InvoicesSummary",
    "LedgerAggregator",
    "OccupancyService",
    "PreviousYearsTotals",
    "SourceGateway",
    "SqlSourceGateway",
]
