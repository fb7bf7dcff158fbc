"""
Module: ledger_kernel.selectors.base
Responsibility: Base class for read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/ and models/.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors never add, delete, flush or commit.
    - DTO return convention: selectors return frozen dataclasses, not ORM
      instances, so results can safely cross thread boundaries.
    - Session ownership: the caller owns the session and its scope.
"""

from abc import ABC
from datetime import date

from sqlalchemy import Select, func, or_
from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only
        queries, and return DTOs.
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _date_window(
        stmt: Select,
        column,
        date_from: date | None,
        date_to: date | None,
        keep_nulls: bool = False,
    ) -> Select:
        """Restrict ``column`` to [date_from, date_to] (both inclusive)."""
        if date_from is not None:
            cond = column >= date_from
            stmt = stmt.where(or_(cond, column.is_(None)) if keep_nulls else cond)
        if date_to is not None:
            cond = column <= date_to
            stmt = stmt.where(or_(cond, column.is_(None)) if keep_nulls else cond)
        return stmt

    @staticmethod
    def _exclude_renter(stmt: Select, column) -> Select:
        """Drop renter-paid rows; rows with no payer recorded are kept."""
        return stmt.where(or_(func.lower(column) != "renter", column.is_(None)))
