"""
Tests for rate conversion and due date arithmetic
"""

import pytest
from decimal import Decimal
from datetime import date

from lending_core.errors import UnsupportedFrequencyOrAmortizationError
from lending_core.rates import (
    PaymentFrequency, periods_per_year, period_rate, period_count, add_months, advance
)


class TestPaymentFrequency:
    """Test frequency parsing"""

    def test_parse_string(self):
        assert PaymentFrequency.parse("monthly") == PaymentFrequency.MONTHLY
        assert PaymentFrequency.parse("BIWEEKLY") == PaymentFrequency.BIWEEKLY
        assert PaymentFrequency.parse(PaymentFrequency.DAILY) == PaymentFrequency.DAILY

    def test_unknown_frequency_rejected(self):
        with pytest.raises(UnsupportedFrequencyOrAmortizationError, match="quarterly"):
            PaymentFrequency.parse("quarterly")

    def test_unknown_frequency_is_value_error(self):
        with pytest.raises(ValueError):
            PaymentFrequency.parse("")


class TestPeriodRate:
    """Test annual to per-period rate conversion"""

    def test_periods_per_year(self):
        assert periods_per_year(PaymentFrequency.MONTHLY) == 12
        assert periods_per_year(PaymentFrequency.BIWEEKLY) == 26
        assert periods_per_year(PaymentFrequency.WEEKLY) == 52
        assert periods_per_year(PaymentFrequency.DAILY) == 365

    def test_monthly_rate(self):
        assert period_rate(Decimal('15'), PaymentFrequency.MONTHLY) == Decimal('0.0125')

    def test_weekly_rate(self):
        assert period_rate(Decimal('52'), "weekly") == Decimal('0.01')

    def test_zero_rate(self):
        assert period_rate(0, PaymentFrequency.DAILY) == Decimal('0')


class TestPeriodCount:
    """Test number of periods in a term"""

    def test_twelve_month_term(self):
        assert period_count(12, PaymentFrequency.MONTHLY) == 12
        assert period_count(12, PaymentFrequency.BIWEEKLY) == 26
        assert period_count(12, PaymentFrequency.WEEKLY) == 52
        assert period_count(12, PaymentFrequency.DAILY) == 365

    def test_short_terms_round_half_up(self):
        assert period_count(1, PaymentFrequency.WEEKLY) == 4       # 4.33
        assert period_count(1, PaymentFrequency.BIWEEKLY) == 2     # 2.17
        assert period_count(1, PaymentFrequency.DAILY) == 30       # 30.42
        assert period_count(6, PaymentFrequency.BIWEEKLY) == 13
        assert period_count(3, PaymentFrequency.WEEKLY) == 13

    def test_half_rounds_up(self):
        # 18 * 26 / 12 = 39.0, 3 * 26 / 12 = 6.5
        assert period_count(18, PaymentFrequency.BIWEEKLY) == 39
        assert period_count(3, PaymentFrequency.BIWEEKLY) == 7


class TestDueDates:
    """Test date advancement"""

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 1, 31), 2) == date(2024, 3, 31)
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)

    def test_monthly_dates_count_from_first_date(self):
        first = date(2024, 1, 31)
        dates = [advance(first, n, PaymentFrequency.MONTHLY) for n in range(4)]
        assert dates == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]

    def test_fixed_day_increments(self):
        first = date(2024, 1, 1)
        assert advance(first, 2, PaymentFrequency.WEEKLY) == date(2024, 1, 15)
        assert advance(first, 1, "biweekly") == date(2024, 1, 15)
        assert advance(first, 31, PaymentFrequency.DAILY) == date(2024, 2, 1)
