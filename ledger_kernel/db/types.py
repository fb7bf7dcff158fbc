"""
Module: ledger_kernel.db.types
Responsibility: Annotated column type aliases shared by every model, so
    that monetary amounts, meter readings and currency codes are stored with
    identical precision across the schema.
Architecture position: Kernel > DB.  MUST NOT import from models/,
    selectors/ or outer layers.

Invariants enforced:
    - Monetary columns are Numeric(15, 2): two fractional digits, values up
      to the billions.  No floats.
    - Meter readings keep two fractional digits as well; usage is derived
      from them by ledger_engines.metering.
"""

from decimal import Decimal
from typing import Annotated

from sqlalchemy import Numeric, String

MONEY_PRECISION = 15
MONEY_SCALE = 2

# Monetary amount, two fractional digits
MoneyAmount = Annotated[Decimal, Numeric(MONEY_PRECISION, MONEY_SCALE)]

# Unit price for utilities (per m3 / per kWh)
UnitPrice = Annotated[Decimal, Numeric(10, 2)]

# Meter reading
MeterReading = Annotated[Decimal, Numeric(12, 2)]

# Currency code ("EGP", "GBP")
CurrencyCode = Annotated[str, String(3)]

# Short identifier strings
ShortCode = Annotated[str, String(50)]

# Names and free text
Name = Annotated[str, String(255)]
LongText = Annotated[str, String(4000)]
