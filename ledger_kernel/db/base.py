"""
Module: ledger_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.
    Provides the type annotation map for consistent column types and the
    TimestampedBase mixin for created/updated timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.

Invariants enforced:
    - Integer primary keys: the consumed tables of the property system use
      auto-incrementing integer ids, and every model follows that
      convention.
    - Decimal precision: type_annotation_map maps Python Decimal to
      Numeric(15, 2).  NEVER use float for monetary amounts.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import Date, DateTime, Integer, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ledger_kernel.db.types import MONEY_PRECISION, MONEY_SCALE


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is an auto-incrementing integer primary key.
        - Decimal maps to Numeric(15, 2).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(MONEY_PRECISION, MONEY_SCALE),
        datetime: DateTime(timezone=True),
        date: Date,
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampedBase(Base):
    """Abstract base adding created_at / updated_at."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
