"""
Payment Module

Minimum payment resolution, interest-first allocation of payments to an
installment and the outstanding balance of a schedule.
"""

from decimal import Decimal
from dataclasses import dataclass, replace
from typing import Union
from enum import Enum

from .currency import Numeric, round_money, to_decimal
from .errors import UnsupportedFrequencyOrAmortizationError
from .loans import Installment, PaymentSchedule


ZERO = Decimal('0')
HUNDRED = Decimal('100')


class MinimumPaymentType(Enum):
    """Installment component(s) the minimum percentage applies to"""
    INTEREST = "interest"
    PRINCIPAL = "principal"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Union['MinimumPaymentType', str]) -> 'MinimumPaymentType':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFrequencyOrAmortizationError(
                f"Unsupported minimum payment type: {value}"
            )


@dataclass(frozen=True)
class MinimumPaymentPolicy:
    """Minimum acceptable payment, as a percentage of installment components"""
    type: MinimumPaymentType
    percentage: Decimal

    def __post_init__(self):
        object.__setattr__(self, 'type', MinimumPaymentType.parse(self.type))
        object.__setattr__(self, 'percentage', to_decimal(self.percentage))
        if not ZERO < self.percentage <= HUNDRED:
            raise ValueError(f"Minimum payment percentage must be in (0, 100], got {self.percentage}")


@dataclass(frozen=True)
class PaymentAllocation:
    """How a payment splits over an installment's interest and principal"""
    interest_amount: Decimal
    principal_amount: Decimal
    overpayment: Decimal

    @property
    def applied_amount(self) -> Decimal:
        return self.interest_amount + self.principal_amount


@dataclass(frozen=True)
class BalanceBreakdown:
    """Pending capital and interest of a schedule"""
    capital_pending: Decimal
    interest_pending: Decimal

    @property
    def total(self) -> Decimal:
        return self.capital_pending + self.interest_pending


def compute_minimum_payment(installment: Installment, policy: MinimumPaymentPolicy) -> Decimal:
    """
    Minimum payment that keeps the loan in good standing for the period

    Args:
        installment: Installment being paid
        policy: Minimum payment policy

    Returns:
        Minimum payment rounded to 2 decimal places, never negative
    """
    if policy.type == MinimumPaymentType.INTEREST:
        base = installment.interest_due
    elif policy.type == MinimumPaymentType.PRINCIPAL:
        base = installment.principal_due
    else:
        base = installment.interest_due + installment.principal_due

    return max(round_money(ZERO), round_money(base * policy.percentage / HUNDRED))


def _paid_split(installment: Installment):
    """Interest and principal already covered by amount_paid, interest first"""
    interest_paid = min(installment.amount_paid, installment.interest_due)
    principal_paid = min(installment.amount_paid - interest_paid, installment.principal_due)
    return interest_paid, principal_paid


def allocate_payment(installment: Installment, amount: Numeric) -> PaymentAllocation:
    """
    Split a payment over an installment: interest first, then principal

    Amounts already paid on the installment are taken into account; anything
    beyond the outstanding amount is reported as overpayment.
    """
    amount = round_money(amount)
    if amount <= ZERO:
        raise ValueError("Payment amount must be positive")

    interest_paid, principal_paid = _paid_split(installment)
    interest_remaining = installment.interest_due - interest_paid
    principal_remaining = installment.principal_due - principal_paid

    interest_amount = min(amount, interest_remaining)
    principal_amount = min(amount - interest_amount, principal_remaining)

    return PaymentAllocation(
        interest_amount=round_money(interest_amount),
        principal_amount=round_money(principal_amount),
        overpayment=round_money(amount - interest_amount - principal_amount),
    )


def apply_payment(installment: Installment, amount: Numeric, late_fee_amount: Numeric = ZERO) -> Installment:
    """Return a replacement installment with the payment, and any late fee paid with it, applied"""
    late_fee_amount = round_money(late_fee_amount)
    if late_fee_amount < ZERO:
        raise ValueError("Late fee amount cannot be negative")

    allocation = allocate_payment(installment, amount)
    return replace(
        installment,
        amount_paid=round_money(installment.amount_paid + allocation.applied_amount),
        late_fee_paid=round_money(installment.late_fee_paid + late_fee_amount),
    )


def outstanding_balance(schedule: PaymentSchedule) -> BalanceBreakdown:
    """
    Capital and interest still pending on a schedule

    For indefinite loans the principal is never scheduled, so the pending
    capital is the full principal while interest is counted per period.
    """
    capital_paid = ZERO
    interest_pending = ZERO
    for installment in schedule:
        interest_paid, principal_paid = _paid_split(installment)
        capital_paid += principal_paid
        interest_pending += installment.interest_due - interest_paid

    capital_pending = max(ZERO, round_money(schedule.terms.principal) - capital_paid)
    return BalanceBreakdown(
        capital_pending=round_money(capital_pending),
        interest_pending=round_money(interest_pending),
    )
