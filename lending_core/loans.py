"""
Loan Module

Loan terms, payment schedules and the amortization engine that derives a
schedule from the terms under one of five amortization policies: simple,
french, german, american and indefinite.

Every function here is pure: no clock reads, no I/O, no logging. Identical
terms always produce identical schedules.
"""

from decimal import Decimal
from datetime import date
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
from enum import Enum

from .currency import Numeric, round_money, to_decimal
from .errors import InvalidTermsError, UnsupportedFrequencyOrAmortizationError
from .rates import PaymentFrequency, advance, period_count, period_rate


ZERO = Decimal('0')


class AmortizationType(Enum):
    """Methods for loan amortization"""
    SIMPLE = "simple"            # Flat interest on original principal, equal principal
    FRENCH = "french"            # Annuity - equal total installments
    GERMAN = "german"            # Equal principal + declining interest
    AMERICAN = "american"        # Interest only, principal balloon at end
    INDEFINITE = "indefinite"    # Revolving, interest only, no scheduled amortization

    @classmethod
    def parse(cls, value: Union['AmortizationType', str]) -> 'AmortizationType':
        """Collapse a stored string into the closed enum"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFrequencyOrAmortizationError(
                f"Unsupported amortization type: {value}"
            )


@dataclass(frozen=True)
class LoanTerms:
    """Loan terms and conditions, immutable once a loan is created"""
    principal: Decimal
    annual_interest_rate_percent: Decimal     # e.g. 15 for 15%
    term_months: int
    amortization_type: AmortizationType
    payment_frequency: PaymentFrequency
    first_payment_date: date
    closing_costs: Decimal = ZERO             # Added to the disbursement, never amortized

    def __post_init__(self):
        object.__setattr__(self, 'amortization_type', AmortizationType.parse(self.amortization_type))
        object.__setattr__(self, 'payment_frequency', PaymentFrequency.parse(self.payment_frequency))

        try:
            principal = to_decimal(self.principal)
            rate = to_decimal(self.annual_interest_rate_percent)
            closing_costs = to_decimal(self.closing_costs)
        except ValueError as e:
            raise InvalidTermsError(str(e))

        if isinstance(self.term_months, bool) or not isinstance(self.term_months, int):
            raise InvalidTermsError(f"Term must be a whole number of months, got {self.term_months!r}")

        if principal <= ZERO:
            raise InvalidTermsError("Principal must be positive")
        if self.term_months < 1:
            raise InvalidTermsError("Term must be at least one month")
        if rate < ZERO:
            raise InvalidTermsError("Annual interest rate cannot be negative")
        if closing_costs < ZERO:
            raise InvalidTermsError("Closing costs cannot be negative")
        if not isinstance(self.first_payment_date, date):
            raise InvalidTermsError("First payment date must be a date")

        object.__setattr__(self, 'principal', principal)
        object.__setattr__(self, 'annual_interest_rate_percent', rate)
        object.__setattr__(self, 'closing_costs', closing_costs)

    @property
    def period_count(self) -> int:
        """Number of installments in the schedule"""
        return period_count(self.term_months, self.payment_frequency)

    @property
    def period_rate(self) -> Decimal:
        """Per-period interest rate as a fraction"""
        return period_rate(self.annual_interest_rate_percent, self.payment_frequency)

    @property
    def disbursement_amount(self) -> Decimal:
        """Amount of the first disbursement: principal plus closing costs"""
        return round_money(self.principal + self.closing_costs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            'principal': str(self.principal),
            'annual_interest_rate_percent': str(self.annual_interest_rate_percent),
            'term_months': self.term_months,
            'amortization_type': self.amortization_type.value,
            'payment_frequency': self.payment_frequency.value,
            'first_payment_date': self.first_payment_date.isoformat(),
            'closing_costs': str(self.closing_costs),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoanTerms':
        """Create terms from a stored dictionary"""
        return cls(
            principal=Decimal(data['principal']),
            annual_interest_rate_percent=Decimal(data['annual_interest_rate_percent']),
            term_months=int(data['term_months']),
            amortization_type=data['amortization_type'],
            payment_frequency=data['payment_frequency'],
            first_payment_date=date.fromisoformat(data['first_payment_date']),
            closing_costs=Decimal(data.get('closing_costs', '0')),
        )


@dataclass(frozen=True)
class Installment:
    """Single entry in a payment schedule"""
    sequence_number: int
    due_date: date
    principal_due: Decimal
    interest_due: Decimal
    opening_balance: Decimal
    closing_balance: Decimal
    amount_paid: Decimal = ZERO
    late_fee_paid: Decimal = ZERO

    @property
    def total_due(self) -> Decimal:
        return self.principal_due + self.interest_due

    @property
    def outstanding_amount(self) -> Decimal:
        """Unpaid portion of the installment total"""
        return max(ZERO, self.total_due - self.amount_paid)

    @property
    def is_paid(self) -> bool:
        return self.outstanding_amount == ZERO

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and API responses"""
        return {
            'sequence_number': self.sequence_number,
            'due_date': self.due_date.isoformat(),
            'principal_due': str(self.principal_due),
            'interest_due': str(self.interest_due),
            'total_due': str(self.total_due),
            'opening_balance': str(self.opening_balance),
            'closing_balance': str(self.closing_balance),
            'amount_paid': str(self.amount_paid),
            'late_fee_paid': str(self.late_fee_paid),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Installment':
        return cls(
            sequence_number=int(data['sequence_number']),
            due_date=date.fromisoformat(data['due_date']),
            principal_due=Decimal(data['principal_due']),
            interest_due=Decimal(data['interest_due']),
            opening_balance=Decimal(data['opening_balance']),
            closing_balance=Decimal(data['closing_balance']),
            amount_paid=Decimal(data.get('amount_paid', '0')),
            late_fee_paid=Decimal(data.get('late_fee_paid', '0')),
        )


@dataclass(frozen=True)
class PaymentSchedule:
    """Ordered, gapless sequence of installments generated from loan terms"""
    terms: LoanTerms
    installments: Tuple[Installment, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Installment]:
        return iter(self.installments)

    def __len__(self) -> int:
        return len(self.installments)

    def installment(self, sequence_number: int) -> Installment:
        """Get installment by its 1-based sequence number"""
        if not 1 <= sequence_number <= len(self.installments):
            raise IndexError(f"Installment {sequence_number} is outside the schedule")
        return self.installments[sequence_number - 1]

    def with_installment(self, installment: Installment) -> 'PaymentSchedule':
        """Return a new schedule with one installment replaced"""
        self.installment(installment.sequence_number)
        installments = list(self.installments)
        installments[installment.sequence_number - 1] = installment
        return replace(self, installments=tuple(installments))

    @property
    def total_principal(self) -> Decimal:
        return sum((i.principal_due for i in self.installments), ZERO)

    @property
    def total_interest(self) -> Decimal:
        return sum((i.interest_due for i in self.installments), ZERO)

    @property
    def total_payment(self) -> Decimal:
        return self.total_principal + self.total_interest

    @property
    def total_cost(self) -> Decimal:
        """Everything the borrower pays, closing costs included"""
        return self.total_payment + round_money(self.terms.closing_costs)

    @property
    def installment_amount(self) -> Decimal:
        """Regular installment (first period total)"""
        if not self.installments:
            return ZERO
        return self.installments[0].total_due

    @property
    def maturity_date(self) -> Optional[date]:
        if not self.installments:
            return None
        return self.installments[-1].due_date


class AmortizationEngine:
    """
    Derives payment schedules from loan terms

    Every monetary figure is rounded half-up to 2 decimal places per period.
    The final installment absorbs the rounding drift so the principal column
    sums exactly to the loan principal.
    """

    def generate_schedule(self, terms: LoanTerms) -> PaymentSchedule:
        """
        Generate the payment schedule for loan terms

        Args:
            terms: Validated loan terms

        Returns:
            PaymentSchedule with one installment per payment period
        """
        generators = {
            AmortizationType.SIMPLE: self._generate_simple_schedule,
            AmortizationType.FRENCH: self._generate_french_schedule,
            AmortizationType.GERMAN: self._generate_german_schedule,
            AmortizationType.AMERICAN: self._generate_american_schedule,
            AmortizationType.INDEFINITE: self._generate_indefinite_schedule,
        }
        generator = generators.get(terms.amortization_type)
        if generator is None:
            raise UnsupportedFrequencyOrAmortizationError(
                f"Unsupported amortization type: {terms.amortization_type}"
            )

        installments = generator(terms, terms.period_count, terms.period_rate)
        return PaymentSchedule(terms=terms, installments=tuple(installments))

    def installment_amount(self, terms: LoanTerms) -> Decimal:
        """Constant annuity installment P * r(1+r)^n / ((1+r)^n - 1)"""
        principal = terms.principal
        n = terms.period_count
        r = terms.period_rate

        if r == ZERO:
            return round_money(principal / Decimal(n))

        factor = (Decimal('1') + r) ** n
        return round_money(principal * (r * factor) / (factor - Decimal('1')))

    def _generate_french_schedule(self, terms: LoanTerms, n: int, r: Decimal) -> List[Installment]:
        """Equal total installments, principal share growing over time"""
        schedule = []
        payment_amount = self.installment_amount(terms)
        balance = round_money(terms.principal)

        for number in range(1, n + 1):
            interest = round_money(balance * r)

            if number == n:
                # Final payment pays off exactly what's left
                principal = balance
            else:
                principal = min(max(ZERO, payment_amount - interest), balance)

            schedule.append(self._entry(terms, number, balance, principal, interest, balance - principal))
            balance = balance - principal

        return schedule

    def _generate_german_schedule(self, terms: LoanTerms, n: int, r: Decimal) -> List[Installment]:
        """Constant principal, interest declining with the balance"""
        schedule = []
        principal_per_payment = round_money(terms.principal / Decimal(n))
        balance = round_money(terms.principal)

        for number in range(1, n + 1):
            interest = round_money(balance * r)
            principal = balance if number == n else min(principal_per_payment, balance)

            schedule.append(self._entry(terms, number, balance, principal, interest, balance - principal))
            balance = balance - principal

        return schedule

    def _generate_american_schedule(self, terms: LoanTerms, n: int, r: Decimal) -> List[Installment]:
        """Interest only, full principal balloon on the final installment"""
        schedule = []
        balance = round_money(terms.principal)
        interest = round_money(balance * r)

        for number in range(1, n):
            schedule.append(self._entry(terms, number, balance, ZERO, interest, balance))

        schedule.append(self._entry(terms, n, balance, balance, interest, ZERO))
        return schedule

    def _generate_indefinite_schedule(self, terms: LoanTerms, n: int, r: Decimal) -> List[Installment]:
        """Interest only; the balance only moves through manual principal payments"""
        balance = round_money(terms.principal)
        interest = round_money(balance * r)
        return [
            self._entry(terms, number, balance, ZERO, interest, balance)
            for number in range(1, n + 1)
        ]

    def _generate_simple_schedule(self, terms: LoanTerms, n: int, r: Decimal) -> List[Installment]:
        """Flat interest on the original principal, spread evenly over the periods"""
        schedule = []
        exact_total_interest = (
            terms.principal
            * (terms.annual_interest_rate_percent / Decimal('100'))
            * (Decimal(terms.term_months) / Decimal('12'))
        )
        principal_per_payment = round_money(terms.principal / Decimal(n))
        balance = round_money(terms.principal)
        interest_charged = ZERO

        for number in range(1, n + 1):
            # Interest charged so far tracks the rounded running share of the total
            interest = round_money(exact_total_interest * Decimal(number) / Decimal(n)) - interest_charged
            if number == n:
                principal = balance
            else:
                principal = min(principal_per_payment, balance)

            schedule.append(self._entry(terms, number, balance, principal, interest, balance - principal))
            balance = balance - principal
            interest_charged += interest

        return schedule

    def _entry(
        self,
        terms: LoanTerms,
        number: int,
        opening: Decimal,
        principal: Decimal,
        interest: Decimal,
        closing: Decimal
    ) -> Installment:
        return Installment(
            sequence_number=number,
            due_date=advance(terms.first_payment_date, number - 1, terms.payment_frequency),
            principal_due=round_money(principal),
            interest_due=round_money(interest),
            opening_balance=round_money(opening),
            closing_balance=round_money(closing),
        )


_engine = AmortizationEngine()


def generate_schedule(terms: LoanTerms) -> PaymentSchedule:
    """Generate the payment schedule for loan terms"""
    return _engine.generate_schedule(terms)


def validate_loan_amount(
    terms: LoanTerms,
    min_amount: Optional[Numeric] = None,
    max_amount: Optional[Numeric] = None
) -> LoanTerms:
    """
    Check the principal against a company's configured loan limits

    Raises:
        InvalidTermsError: If the principal is outside [min_amount, max_amount]
    """
    if min_amount is not None and terms.principal < to_decimal(min_amount):
        raise InvalidTermsError(
            f"Principal {terms.principal} is below the minimum loan amount {min_amount}"
        )
    if max_amount is not None and terms.principal > to_decimal(max_amount):
        raise InvalidTermsError(
            f"Principal {terms.principal} exceeds the maximum loan amount {max_amount}"
        )
    return terms
