"""
Unit tests for Money and decimal handling.

Verifies:
- Exact two-decimal precision, never silently rounded
- Explicit rounding through Money.rounded (half up)
- Float constructor prohibition
- Same-currency arithmetic
"""

from decimal import Decimal

import pytest

from ledger_kernel.domain.values import Currency, Money
from ledger_kernel.exceptions import CurrencyMismatchError, InvalidCurrencyError


class TestMoneyConstruction:
    """Tests for Money construction and validation."""

    def test_from_string(self):
        """String amounts are parsed exactly."""
        m = Money.of("100.50", "EGP")
        assert m.amount == Decimal("100.50")
        assert m.currency is Currency.EGP

    def test_integer_amount_gets_two_places(self):
        m = Money.of(100, Currency.GBP)
        assert str(m.amount) == "100.00"

    def test_lowercase_currency_parsed(self):
        assert Money.of("1", "gbp").currency is Currency.GBP

    def test_float_rejected(self):
        """Floats never become Money."""
        with pytest.raises(TypeError):
            Money.of(100.5, "EGP")

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            Money.of(True, "EGP")

    def test_three_decimals_rejected(self):
        """More precision than the currency allows is an error, not a rounding."""
        with pytest.raises(ValueError):
            Money.of("10.005", "EGP")

    def test_trailing_zeros_accepted(self):
        assert Money.of("10.500", "EGP").amount == Decimal("10.50")

    def test_non_numeric_rejected(self):
        with pytest.raises(ValueError):
            Money.of("ten", "EGP")

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError):
            Money.of("NaN", "EGP")
        with pytest.raises(ValueError):
            Money.of("Infinity", "EGP")

    def test_unsupported_currency_rejected(self):
        with pytest.raises(InvalidCurrencyError):
            Money.of("10", "USD")

    def test_negative_allowed(self):
        """Nets and balances may be negative."""
        assert Money.of("-5.25", "EGP").is_negative


class TestMoneyRounded:
    """Tests for the explicit rounding entry point."""

    def test_half_up(self):
        assert Money.rounded(Decimal("2.345"), "EGP").amount == Decimal("2.35")

    def test_half_up_negative(self):
        assert Money.rounded(Decimal("-2.345"), "EGP").amount == Decimal("-2.35")

    def test_below_half_rounds_down(self):
        assert Money.rounded(Decimal("2.344"), "EGP").amount == Decimal("2.34")

    def test_rounding_is_deterministic(self):
        results = {Money.rounded(Decimal("1.005"), "GBP") for _ in range(50)}
        assert results == {Money.of("1.01", "GBP")}

    def test_rounded_rejects_float(self):
        with pytest.raises(TypeError):
            Money.rounded(1.005, "GBP")


class TestMoneyArithmetic:
    """Tests for same-currency arithmetic."""

    def setup_method(self):
        self.egp = Money.of("100.00", "EGP")
        self.gbp = Money.of("100.00", "GBP")

    def test_add(self):
        assert (self.egp + Money.of("0.50", "EGP")).amount == Decimal("100.50")

    def test_subtract(self):
        assert (self.egp - Money.of("150", "EGP")).amount == Decimal("-50.00")

    def test_negation_and_abs(self):
        assert (-self.egp).amount == Decimal("-100.00")
        assert abs(-self.egp) == self.egp

    def test_cross_currency_add_rejected(self):
        """EGP and GBP are never combined."""
        with pytest.raises(CurrencyMismatchError):
            self.egp + self.gbp

    def test_cross_currency_compare_rejected(self):
        with pytest.raises(CurrencyMismatchError):
            self.egp < self.gbp

    def test_zero(self):
        z = Money.zero("GBP")
        assert z.is_zero
        assert z + self.gbp == self.gbp

    def test_hashable_and_equal(self):
        assert Money.of("1.10", "EGP") == Money.of("1.1", "EGP")
        assert len({Money.of("1.10", "EGP"), Money.of("1.1", "EGP")}) == 1

    def test_str(self):
        assert str(self.egp) == "100.00 EGP"
