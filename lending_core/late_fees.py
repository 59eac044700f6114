"""
Late Fee Module

Computes late-fee accrual for overdue installments under the daily, monthly
and compound policies, honouring the grace period and the optional cap.

Computation is pure and idempotent: the same installment, policy and as-of
date always report the same figure, and nothing is persisted here.
"""

from decimal import Decimal
from datetime import date, timedelta
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union
from enum import Enum

from .currency import Numeric, round_money, to_decimal
from .errors import UnsupportedFrequencyOrAmortizationError
from .loans import Installment, PaymentSchedule


ZERO = Decimal('0')
DAYS_PER_LATE_FEE_PERIOD = 30


class LateFeeCalculationType(Enum):
    """How the late fee rate is applied to overdue days"""
    DAILY = "daily"          # Linear accrual per overdue day
    MONTHLY = "monthly"      # Steps once per started 30-day block
    COMPOUND = "compound"    # Compounded per 30-day period, fractional via exponent

    @classmethod
    def parse(cls, value: Union['LateFeeCalculationType', str]) -> 'LateFeeCalculationType':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFrequencyOrAmortizationError(
                f"Unsupported late fee calculation type: {value}"
            )


@dataclass(frozen=True)
class LateFeePolicy:
    """Late fee configuration for a loan"""
    enabled: bool = False
    rate_percent: Decimal = ZERO
    grace_period_days: int = 0
    max_late_fee: Optional[Decimal] = None    # None means no cap
    calculation_type: LateFeeCalculationType = LateFeeCalculationType.DAILY

    def __post_init__(self):
        object.__setattr__(self, 'calculation_type', LateFeeCalculationType.parse(self.calculation_type))
        object.__setattr__(self, 'rate_percent', to_decimal(self.rate_percent))
        if self.max_late_fee is not None:
            object.__setattr__(self, 'max_late_fee', to_decimal(self.max_late_fee))

        if self.rate_percent < ZERO:
            raise ValueError("Late fee rate cannot be negative")
        if self.grace_period_days < 0:
            raise ValueError("Grace period cannot be negative")
        if self.max_late_fee is not None and self.max_late_fee < ZERO:
            raise ValueError("Maximum late fee cannot be negative")

    @property
    def has_cap(self) -> bool:
        return self.max_late_fee is not None

    @classmethod
    def from_settings(
        cls,
        enabled: bool,
        rate_percent: Numeric,
        grace_period_days: int = 0,
        max_late_fee: Optional[Numeric] = None,
        calculation_type: Union[LateFeeCalculationType, str] = LateFeeCalculationType.DAILY
    ) -> 'LateFeePolicy':
        """
        Build a policy from stored company/loan settings

        Stored settings use 0 for "no maximum", which maps to no cap here.
        """
        cap = None
        if max_late_fee is not None and to_decimal(max_late_fee) > ZERO:
            cap = to_decimal(max_late_fee)
        return cls(
            enabled=bool(enabled),
            rate_percent=to_decimal(rate_percent or 0),
            grace_period_days=int(grace_period_days or 0),
            max_late_fee=cap,
            calculation_type=calculation_type or LateFeeCalculationType.DAILY,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'enabled': self.enabled,
            'rate_percent': str(self.rate_percent),
            'grace_period_days': self.grace_period_days,
            'max_late_fee': str(self.max_late_fee) if self.max_late_fee is not None else None,
            'calculation_type': self.calculation_type.value,
        }


@dataclass(frozen=True)
class LateFeeBreakdownEntry:
    """Late fee position of one installment"""
    sequence_number: int
    due_date: date
    days_overdue: int
    outstanding_amount: Decimal
    late_fee: Decimal
    is_paid: bool


@dataclass(frozen=True)
class LateFeeBreakdown:
    """Late fee position of a whole schedule as of a date"""
    as_of_date: date
    entries: Tuple[LateFeeBreakdownEntry, ...] = field(default_factory=tuple)

    @property
    def total_late_fee(self) -> Decimal:
        return sum((e.late_fee for e in self.entries if not e.is_paid), ZERO)

    @property
    def overdue_installments(self) -> int:
        return sum(1 for e in self.entries if e.late_fee > ZERO)


def overdue_days(installment: Installment, policy: LateFeePolicy, as_of_date: date) -> int:
    """Days past due date plus grace period, 0 while still inside the grace period"""
    accrual_start = installment.due_date + timedelta(days=policy.grace_period_days)
    return max(0, (as_of_date - accrual_start).days)


class LateFeeCalculator:
    """Accrued late fee per outstanding installment"""

    def compute_late_fee(
        self,
        installment: Installment,
        policy: LateFeePolicy,
        as_of_date: date
    ) -> Decimal:
        """
        Late fee accrued by an installment as of a date

        Args:
            installment: Installment with due date and amount already paid
            policy: Late fee policy of the loan
            as_of_date: Date the fee is computed for

        Returns:
            Accrued fee rounded to 2 decimal places (never above the cap)
        """
        if not policy.enabled:
            return round_money(ZERO)

        days = overdue_days(installment, policy, as_of_date)
        if days <= 0:
            return round_money(ZERO)

        base = installment.outstanding_amount
        rate = policy.rate_percent / Decimal('100')

        if policy.calculation_type == LateFeeCalculationType.DAILY:
            fee = base * rate * Decimal(days)
        elif policy.calculation_type == LateFeeCalculationType.MONTHLY:
            # Partial 30-day blocks count as full months
            months = -(-days // DAYS_PER_LATE_FEE_PERIOD)
            fee = base * rate * Decimal(months)
        elif policy.calculation_type == LateFeeCalculationType.COMPOUND:
            periods = Decimal(days) / Decimal(DAYS_PER_LATE_FEE_PERIOD)
            fee = base * ((Decimal('1') + rate) ** periods - Decimal('1'))
        else:
            raise UnsupportedFrequencyOrAmortizationError(
                f"Unsupported late fee calculation type: {policy.calculation_type}"
            )

        if policy.has_cap and fee > policy.max_late_fee:
            fee = policy.max_late_fee

        return round_money(fee)

    def breakdown(
        self,
        schedule: PaymentSchedule,
        policy: LateFeePolicy,
        as_of_date: date
    ) -> LateFeeBreakdown:
        """
        Late fee position of every installment in a schedule

        Fees already paid on an installment are deducted from its accrued fee;
        paid installments report zero days and zero fee.
        """
        entries = []
        for installment in schedule:
            if installment.is_paid:
                entries.append(LateFeeBreakdownEntry(
                    sequence_number=installment.sequence_number,
                    due_date=installment.due_date,
                    days_overdue=0,
                    outstanding_amount=ZERO,
                    late_fee=round_money(ZERO),
                    is_paid=True,
                ))
                continue

            accrued = self.compute_late_fee(installment, policy, as_of_date)
            days = overdue_days(installment, policy, as_of_date) if policy.enabled else 0
            entries.append(LateFeeBreakdownEntry(
                sequence_number=installment.sequence_number,
                due_date=installment.due_date,
                days_overdue=days,
                outstanding_amount=installment.outstanding_amount,
                late_fee=max(round_money(ZERO), accrued - installment.late_fee_paid),
                is_paid=False,
            ))

        return LateFeeBreakdown(as_of_date=as_of_date, entries=tuple(entries))


_calculator = LateFeeCalculator()


def compute_late_fee(installment: Installment, policy: LateFeePolicy, as_of_date: date) -> Decimal:
    """Late fee accrued by an installment as of a date"""
    return _calculator.compute_late_fee(installment, policy, as_of_date)


def late_fee_breakdown(schedule: PaymentSchedule, policy: LateFeePolicy, as_of_date: date) -> LateFeeBreakdown:
    """Late fee position of every installment in a schedule"""
    return _calculator.breakdown(schedule, policy, as_of_date)
