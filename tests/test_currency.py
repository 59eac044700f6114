"""
Test suite for currency module

Tests rounding, the Money value, the static cross-rate table and proper
Decimal handling. All monetary calculations must use Decimal precision.
"""

import pytest
from decimal import Decimal

from lending_core.currency import Currency, Money, lookup_rate, rate_table, round_money, to_decimal


class TestRounding:
    """Test half-up rounding to two places"""

    def test_half_up(self):
        assert round_money(Decimal('2.345')) == Decimal('2.35')
        assert round_money(Decimal('2.344')) == Decimal('2.34')
        assert round_money(Decimal('-2.345')) == Decimal('-2.35')

    def test_accepts_strings_and_ints(self):
        assert round_money("10.005") == Decimal('10.01')
        assert round_money(7) == Decimal('7.00')

    def test_to_decimal_avoids_binary_float(self):
        assert to_decimal(0.1) == Decimal('0.1')

    def test_to_decimal_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_decimal("ten")
        with pytest.raises(ValueError):
            to_decimal(True)

    @pytest.mark.parametrize("value", ["NaN", "sNaN", "Infinity", "-Infinity", Decimal('NaN'), float('inf')])
    def test_to_decimal_rejects_non_finite(self, value):
        with pytest.raises(ValueError, match="finite"):
            to_decimal(value)

    def test_round_money_rejects_non_finite(self):
        with pytest.raises(ValueError):
            round_money("Infinity")


class TestMoney:
    """Test Money class operations"""

    def test_money_creation_rounds(self):
        money = Money(Decimal('100.555'), Currency.USD)
        assert money.amount == Decimal('100.56')
        assert money.currency == Currency.USD

    def test_default_currency_is_peso(self):
        assert Money(Decimal('1')).currency == Currency.DOP

    def test_to_string(self):
        assert Money(Decimal('1250.5')).to_string() == "DOP 1,250.50"
        assert Money(Decimal('-3')).to_string() == "DOP -3.00"

    def test_from_code(self):
        assert Currency.from_code("usd") == Currency.USD
        with pytest.raises(ValueError, match="Unsupported currency"):
            Currency.from_code("JPY")


class TestStaticRates:
    """Test the static cross-rate table"""

    def test_identity(self):
        for currency in Currency:
            assert lookup_rate(currency, currency) == Decimal('1')

    def test_rates_against_peso(self):
        assert lookup_rate(Currency.USD, Currency.DOP) == Decimal('58.50')
        assert lookup_rate(Currency.EUR, Currency.DOP) == Decimal('63.50')

    def test_cross_rate(self):
        table = rate_table()
        assert table[("EUR", "USD")] == Decimal('1.085470')
        assert len(table) == 9
