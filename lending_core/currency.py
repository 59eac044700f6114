"""
Currency Support Module

Handles the currencies a lending company operates in, two-decimal rounding of
monetary figures and the static cross-rate table used by the currency
calculator. NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from dataclasses import dataclass
from typing import Dict, Tuple, Union
from enum import Enum

# High precision for intermediate financial calculations
getcontext().prec = 28

Numeric = Union[Decimal, int, float, str]


class Currency(Enum):
    """ISO 4217 currency codes with precision info"""
    DOP = ("DOP", 2)  # Dominican Peso, 2 decimal places
    USD = ("USD", 2)  # US Dollar, 2 decimal places
    EUR = ("EUR", 2)  # Euro, 2 decimal places

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        """Resolve a currency from its ISO code"""
        try:
            return cls[code.upper()]
        except (KeyError, AttributeError):
            raise ValueError(f"Unsupported currency: {code}")


# Static cross-rates expressed as units of DOP per one unit of the currency.
# There is no live feed; every pair is derived from this table.
STATIC_DOP_RATES: Dict[Currency, Decimal] = {
    Currency.DOP: Decimal('1'),
    Currency.USD: Decimal('58.50'),
    Currency.EUR: Decimal('63.50'),
}


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric input to Decimal without going through binary floats

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Cannot convert {value!r} to Decimal")
    if not result.is_finite():
        raise ValueError(f"Amount must be a finite number, got {value!r}")
    return result


def round_money(value: Numeric, currency: Currency = Currency.DOP) -> Decimal:
    """Round a monetary value half-up to the currency minor unit"""
    return to_decimal(value).quantize(
        Decimal('0.1') ** currency.precision,
        rounding=ROUND_HALF_UP
    )


@dataclass(frozen=True)
class Money:
    """
    Immutable money representation with currency and proper precision.
    Used where an amount travels together with its currency on receipts.
    """
    amount: Decimal
    currency: Currency = Currency.DOP

    def __post_init__(self):
        object.__setattr__(self, 'amount', round_money(self.amount, self.currency))

    def to_string(self) -> str:
        """Format for display"""
        return f"{self.currency.code} {self.amount:,.{self.currency.precision}f}"


def lookup_rate(from_currency: Currency, to_currency: Currency) -> Decimal:
    """
    Get the static cross-rate for a currency pair

    Args:
        from_currency: Currency being converted
        to_currency: Target currency

    Returns:
        Units of to_currency per one unit of from_currency
    """
    if from_currency == to_currency:
        return Decimal('1')
    return STATIC_DOP_RATES[from_currency] / STATIC_DOP_RATES[to_currency]


def rate_table() -> Dict[Tuple[str, str], Decimal]:
    """All cross-rates keyed by (from_code, to_code), rounded to 6 places"""
    rates = {}
    for source in Currency:
        for target in Currency:
            rates[(source.code, target.code)] = lookup_rate(source, target).quantize(
                Decimal('0.000001'), rounding=ROUND_HALF_UP
            )
    return rates

