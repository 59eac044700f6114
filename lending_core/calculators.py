"""
Financial Calculators

Standalone calculators behind the utilities screen: simple interest,
annualized return and currency conversion. They share no state with the
amortization engine.
"""

from decimal import Decimal
from typing import Union

from .currency import Currency, Numeric, lookup_rate, round_money, to_decimal


HUNDRED = Decimal('100')
TWELVE = Decimal('12')


def simple_interest(principal: Numeric, annual_rate_percent: Numeric, months: Numeric) -> Decimal:
    """
    Simple interest earned over a number of months

    simple_interest(10000, 12, 6) == 600.00
    """
    interest = (
        to_decimal(principal)
        * (to_decimal(annual_rate_percent) / HUNDRED)
        * (to_decimal(months) / TWELVE)
    )
    return round_money(interest)


def annualized_return(initial: Numeric, final: Numeric, months: Numeric) -> Decimal:
    """
    Linear annualization of a realized return, in percent

    This is deliberately not a compound CAGR: the period return is scaled
    by 12 / months.

    Raises:
        ValueError: If initial or months is zero
    """
    initial = to_decimal(initial)
    months = to_decimal(months)
    if initial == 0:
        raise ValueError("Initial amount cannot be zero")
    if months == 0:
        raise ValueError("Months cannot be zero")

    period_return = (to_decimal(final) - initial) / initial * HUNDRED
    return round_money(period_return / months * TWELVE)


def convert_currency(amount: Numeric, rate: Numeric) -> Decimal:
    """Convert an amount with a cross-rate taken from the static rate table"""
    return round_money(to_decimal(amount) * to_decimal(rate))


def convert_between(
    amount: Numeric,
    from_currency: Union[Currency, str],
    to_currency: Union[Currency, str]
) -> Decimal:
    """Convert an amount between two currencies using the static rate table"""
    if not isinstance(from_currency, Currency):
        from_currency = Currency.from_code(from_currency)
    if not isinstance(to_currency, Currency):
        to_currency = Currency.from_code(to_currency)
    return convert_currency(amount, lookup_rate(from_currency, to_currency))
