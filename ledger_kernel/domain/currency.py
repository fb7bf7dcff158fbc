"""Currency -- supported ledger currencies and their precision."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single supported currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest representable unit, e.g. Decimal("0.01")."""
        if self.decimal_places == 0:
            return Decimal("1")
        return Decimal("0." + "0" * (self.decimal_places - 1) + "1")


class CurrencyRegistry:
    """Registry of the currencies the ledger tracks.

    Amounts are never converted between these currencies; each one is
    accumulated and reported on its own.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "EGP": CurrencyInfo("EGP", 2, "Egyptian Pound"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a code is a supported ledger currency."""
        return code in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get the registry entry for a code, or None."""
        return cls._CURRENCIES.get(code)

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for a supported currency (2 when unknown)."""
        info = cls._CURRENCIES.get(code)
        return info.decimal_places if info else 2

    @classmethod
    def all_codes(cls) -> tuple[str, ...]:
        """All supported codes in registry order."""
        return tuple(cls._CURRENCIES)
