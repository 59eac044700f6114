"""
Rate Conversion Module

Converts a nominal annual interest rate and a payment frequency into the
per-period rate and period count used by every amortization policy, and
advances due dates by whole payment periods.
"""

from decimal import Decimal, ROUND_HALF_UP
from datetime import date, timedelta
from typing import Union
from enum import Enum
import calendar

from .currency import Numeric, to_decimal
from .errors import UnsupportedFrequencyOrAmortizationError


class PaymentFrequency(Enum):
    """Payment frequency options"""
    MONTHLY = "monthly"      # 12 payments per year
    BIWEEKLY = "biweekly"    # 26 payments per year
    WEEKLY = "weekly"        # 52 payments per year
    DAILY = "daily"          # 365 payments per year

    @classmethod
    def parse(cls, value: Union['PaymentFrequency', str]) -> 'PaymentFrequency':
        """Collapse a stored string into the closed enum"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFrequencyOrAmortizationError(
                f"Unsupported payment frequency: {value}"
            )


PERIODS_PER_YEAR = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.BIWEEKLY: 26,
    PaymentFrequency.WEEKLY: 52,
    PaymentFrequency.DAILY: 365,
}

# Fixed day increments for the non-monthly frequencies
DAYS_PER_PERIOD = {
    PaymentFrequency.BIWEEKLY: 14,
    PaymentFrequency.WEEKLY: 7,
    PaymentFrequency.DAILY: 1,
}


def periods_per_year(frequency: Union[PaymentFrequency, str]) -> int:
    """Get number of payments per year for a frequency"""
    return PERIODS_PER_YEAR[PaymentFrequency.parse(frequency)]


def period_rate(annual_rate_percent: Numeric, frequency: Union[PaymentFrequency, str]) -> Decimal:
    """
    Convert a nominal annual percentage rate into a per-period rate

    Args:
        annual_rate_percent: Annual rate, e.g. 15 for 15%
        frequency: Payment frequency

    Returns:
        Per-period rate as a fraction, e.g. 0.0125 for 15% monthly
    """
    return (to_decimal(annual_rate_percent) / Decimal('100')) / Decimal(periods_per_year(frequency))


def period_count(term_months: int, frequency: Union[PaymentFrequency, str]) -> int:
    """
    Number of payment periods in a term, rounded half-up, never below 1

    A 12 month term has 12 monthly, 26 biweekly, 52 weekly or 365 daily
    periods; a 1 month weekly term has round(52 / 12) = 4.
    """
    exact = Decimal(term_months) * Decimal(periods_per_year(frequency)) / Decimal('12')
    count = int(exact.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    return max(1, count)


def add_months(start_date: date, months: int) -> date:
    """Add months to a date, clamping the day to the end of the target month"""
    month = start_date.month - 1 + months
    year = start_date.year + month // 12
    month = month % 12 + 1
    day = min(start_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def advance(first_date: date, periods: int, frequency: Union[PaymentFrequency, str]) -> date:
    """
    Date that lies a whole number of payment periods after first_date

    Monthly periods are calendar months counted from first_date itself, so a
    schedule starting on Jan 31 falls on Feb 28/29, Mar 31, Apr 30 and so on.
    """
    frequency = PaymentFrequency.parse(frequency)
    if frequency == PaymentFrequency.MONTHLY:
        return add_months(first_date, periods)
    return first_date + timedelta(days=DAYS_PER_PERIOD[frequency] * periods)
