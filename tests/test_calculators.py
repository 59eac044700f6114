"""
Tests for the standalone financial calculators
"""

import pytest
from decimal import Decimal

from lending_core.calculators import annualized_return, convert_between, convert_currency, simple_interest
from lending_core.currency import Currency


class TestSimpleInterest:

    def test_half_year(self):
        assert simple_interest(Decimal('10000'), Decimal('12'), 6) == Decimal('600.00')

    def test_rounded_to_cents(self):
        # 1000 * 0.07 * 5 / 12 = 29.1666...
        assert simple_interest(1000, 7, 5) == Decimal('29.17')

    def test_zero_rate(self):
        assert simple_interest(5000, 0, 12) == Decimal('0.00')

    def test_non_finite_inputs_rejected(self):
        with pytest.raises(ValueError):
            simple_interest("NaN", 12, 6)
        with pytest.raises(ValueError):
            simple_interest(1000, "Infinity", 6)
        with pytest.raises(ValueError):
            annualized_return(1000, "NaN", 12)
        with pytest.raises(ValueError):
            convert_between("Infinity", "USD", "DOP")


class TestAnnualizedReturn:
    """Linear annualization, not compound"""

    def test_one_year(self):
        assert annualized_return(Decimal('100000'), Decimal('120000'), 12) == Decimal('20.0')

    def test_half_year_is_scaled_linearly(self):
        # 10% in six months annualizes to 20%, not 21%
        assert annualized_return(1000, 1100, 6) == Decimal('20.00')

    def test_loss(self):
        assert annualized_return(1000, 900, 12) == Decimal('-10.00')

    def test_zero_initial_rejected(self):
        with pytest.raises(ValueError, match="Initial"):
            annualized_return(0, 100, 12)

    def test_zero_months_rejected(self):
        with pytest.raises(ValueError, match="Months"):
            annualized_return(100, 120, 0)


class TestCurrencyConversion:

    def test_convert_with_rate(self):
        assert convert_currency(Decimal('100'), Decimal('58.50')) == Decimal('5850.00')

    def test_convert_between_codes(self):
        assert convert_between(100, "USD", "DOP") == Decimal('5850.00')
        assert convert_between(5850, "DOP", "USD") == Decimal('100.00')

    def test_same_currency(self):
        assert convert_between(Decimal('12.34'), Currency.EUR, Currency.EUR) == Decimal('12.34')

    def test_unknown_currency(self):
        with pytest.raises(ValueError):
            convert_between(100, "USD", "JPY")
