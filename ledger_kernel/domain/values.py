"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides Currency and Money, the value types used for every amount that
    flows through the ledger.  They replace bare Decimal/str pairs wherever
    financial data appears in engine or service code.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module. No outward dependencies except
    ledger_kernel.domain.currency and ledger_kernel.exceptions.

Invariants enforced:
    - Currency is always one of the registered ledger currencies (EGP, GBP).
    - Money amounts are Decimal with exactly the currency's fractional
      digits (2).  More precision is rejected, never silently rounded;
      Money.rounded() is the explicit rounding entry point for computed
      amounts.
    - Money arithmetic never mixes currencies.

Failure modes:
    - InvalidCurrencyError for unsupported currency codes.
    - TypeError when a float is used as an amount.
    - ValueError for non-numeric, non-finite or over-precise amounts.
    - CurrencyMismatchError when arithmetic mixes currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.exceptions import CurrencyMismatchError, InvalidCurrencyError


class Currency(str, Enum):
    """
    Ledger currency.

    Contract:
        Only currencies present in CurrencyRegistry are members.  Amounts in
        different currencies are tracked independently and never converted.
    """

    EGP = "EGP"
    GBP = "GBP"

    @classmethod
    def parse(cls, value: Currency | str | None) -> Currency:
        """
        Parse a currency code.

        Raises:
            InvalidCurrencyError: If value is missing or unsupported.
        """
        if isinstance(value, Currency):
            return value
        if not isinstance(value, str):
            raise InvalidCurrencyError(value)
        normalized = value.strip().upper()
        if not CurrencyRegistry.is_valid(normalized):
            raise InvalidCurrencyError(value)
        return cls(normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.value)

    @property
    def quantum(self) -> Decimal:
        """Smallest unit of the currency, Decimal("0.01") for EGP and GBP."""
        info = CurrencyRegistry.get_info(self.value)
        return info.quantum if info else Decimal("0.01")

    @property
    def display_name(self) -> str:
        info = CurrencyRegistry.get_info(self.value)
        return info.name if info else self.value

    def __str__(self) -> str:
        return self.value


def _to_decimal(amount: object) -> Decimal:
    if isinstance(amount, bool) or isinstance(amount, float):
        raise TypeError(f"Money amount must not be {type(amount).__name__}: {amount!r}")
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, (int, str)):
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {amount!r}") from e
    else:
        raise TypeError(f"Money amount must be Decimal, int or str, got {type(amount).__name__}")
    if not value.is_finite():
        raise ValueError(f"Amount must be finite: {amount!r}")
    return value


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency -- they are NEVER separated.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - amount is a Decimal quantized to the currency's 2 fractional digits
        - Arithmetic operations enforce the same-currency constraint

    Non-goals:
        - Does NOT perform currency conversion
        - Does NOT enforce positivity; nets and balances may be negative
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        currency = Currency.parse(self.currency)
        value = _to_decimal(self.amount)
        try:
            quantized = value.quantize(currency.quantum)
        except InvalidOperation as e:
            raise ValueError(f"Amount out of range: {self.amount!r}") from e
        if quantized != value:
            raise ValueError(
                f"Amount {value} has more than {currency.decimal_places} "
                f"fractional digits"
            )
        object.__setattr__(self, "currency", currency)
        object.__setattr__(self, "amount", quantized)

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: Currency | str) -> Money:
        """Factory method for creating Money."""
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: Currency | str) -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def rounded(
        cls,
        amount: Decimal | str | int,
        currency: Currency | str,
        rounding: str = ROUND_HALF_UP,
    ) -> Money:
        """
        Round a computed amount to the currency precision.

        This is the one sanctioned way to turn a derived value (for example
        meter usage times unit price) into Money.
        """
        parsed = Currency.parse(currency)
        value = _to_decimal(amount)
        return cls(amount=value.quantize(parsed.quantum, rounding=rounding), currency=parsed)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency is not other.currency:
            raise CurrencyMismatchError(
                self.currency.value, other.currency.value, operation
            )

    def __add__(self, other: Money) -> Money:
        """Add two Money values. Must be same currency."""
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        """Subtract two Money values. Must be same currency."""
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency.value!r})"
