"""
Pydantic schemas for API requests and responses
"""

from decimal import Decimal
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

from ..config import LendingConfig
from ..late_fees import LateFeeBreakdown, LateFeePolicy
from ..loans import Installment, LoanTerms, PaymentSchedule
from ..repository import LoanRecord, PaymentRecord


class LoanTermsModel(BaseModel):
    principal: str = Field(..., description="Decimal amount as string")
    annual_interest_rate_percent: Optional[str] = Field(None, description="Annual rate, e.g. 15 for 15%")
    term_months: Optional[int] = None
    amortization_type: Optional[str] = Field(None, description="simple, french, german, american or indefinite")
    payment_frequency: Optional[str] = Field(None, description="monthly, biweekly, weekly or daily")
    first_payment_date: date
    closing_costs: str = "0"

    def to_loan_terms(self, config: LendingConfig) -> LoanTerms:
        """Loan terms, with omitted fields taken from the company defaults"""
        def pick(value, default):
            return default if value is None else value

        return LoanTerms(
            principal=self.principal,
            annual_interest_rate_percent=pick(self.annual_interest_rate_percent, config.default_interest_rate_percent),
            term_months=pick(self.term_months, config.default_term_months),
            amortization_type=pick(self.amortization_type, config.default_amortization_type),
            payment_frequency=pick(self.payment_frequency, config.default_payment_frequency),
            first_payment_date=self.first_payment_date,
            closing_costs=self.closing_costs,
        )


class LateFeePolicyModel(BaseModel):
    enabled: bool = True
    rate_percent: str = "0"
    grace_period_days: int = 0
    max_late_fee: Optional[str] = Field(None, description="Omit for no cap")
    calculation_type: str = Field("daily", description="daily, monthly or compound")

    def to_policy(self) -> LateFeePolicy:
        return LateFeePolicy(
            enabled=self.enabled,
            rate_percent=self.rate_percent,
            grace_period_days=self.grace_period_days,
            max_late_fee=self.max_late_fee,
            calculation_type=self.calculation_type,
        )


class CreateLoanRequest(BaseModel):
    terms: LoanTermsModel
    late_fee_policy: Optional[LateFeePolicyModel] = None


class LoanPaymentRequest(BaseModel):
    sequence_number: int
    amount: str = Field(..., description="Decimal amount as string")
    payment_date: Optional[date] = None
    late_fee_amount: str = Field("0", description="Late fee paid on top of the amount")
    phone: Optional[str] = Field(None, description="Send a receipt to this phone")


class InstallmentModel(BaseModel):
    sequence_number: int
    due_date: date
    principal_due: str
    interest_due: str
    total_due: str
    opening_balance: str
    closing_balance: str
    amount_paid: str
    late_fee_paid: str

    @classmethod
    def from_installment(cls, installment: Installment) -> 'InstallmentModel':
        return cls(
            sequence_number=installment.sequence_number,
            due_date=installment.due_date,
            principal_due=str(installment.principal_due),
            interest_due=str(installment.interest_due),
            total_due=str(installment.total_due),
            opening_balance=str(installment.opening_balance),
            closing_balance=str(installment.closing_balance),
            amount_paid=str(installment.amount_paid),
            late_fee_paid=str(installment.late_fee_paid),
        )


class ScheduleResponse(BaseModel):
    installment_amount: str
    total_principal: str
    total_interest: str
    total_payment: str
    total_cost: str
    disbursement_amount: str
    maturity_date: Optional[date] = None
    installments: List[InstallmentModel]

    @classmethod
    def from_schedule(cls, schedule: PaymentSchedule) -> 'ScheduleResponse':
        return cls(
            installment_amount=str(schedule.installment_amount),
            total_principal=str(schedule.total_principal),
            total_interest=str(schedule.total_interest),
            total_payment=str(schedule.total_payment),
            total_cost=str(schedule.total_cost),
            disbursement_amount=str(schedule.terms.disbursement_amount),
            maturity_date=schedule.maturity_date,
            installments=[InstallmentModel.from_installment(i) for i in schedule],
        )


class LoanResponse(BaseModel):
    id: str
    company_id: str
    principal: str
    annual_interest_rate_percent: str
    term_months: int
    amortization_type: str
    payment_frequency: str
    first_payment_date: date
    closing_costs: str
    schedule: Optional[ScheduleResponse] = None

    @classmethod
    def from_record(cls, record: LoanRecord, schedule: Optional[PaymentSchedule] = None) -> 'LoanResponse':
        terms = record.terms
        return cls(
            id=record.id,
            company_id=record.company_id,
            principal=str(terms.principal),
            annual_interest_rate_percent=str(terms.annual_interest_rate_percent),
            term_months=terms.term_months,
            amortization_type=terms.amortization_type.value,
            payment_frequency=terms.payment_frequency.value,
            first_payment_date=terms.first_payment_date,
            closing_costs=str(terms.closing_costs),
            schedule=ScheduleResponse.from_schedule(schedule) if schedule else None,
        )


class PaymentResponse(BaseModel):
    payment_id: str
    loan_id: str
    sequence_number: int
    payment_date: date
    amount: str
    interest_amount: str
    principal_amount: str
    overpayment: str
    late_fee_amount: str
    receipt_sent: Optional[bool] = None

    @classmethod
    def from_payment(cls, payment: PaymentRecord, receipt_sent: Optional[bool] = None) -> 'PaymentResponse':
        return cls(
            payment_id=payment.id,
            loan_id=payment.loan_id,
            sequence_number=payment.sequence_number,
            payment_date=payment.payment_date,
            amount=str(payment.amount),
            interest_amount=str(payment.interest_amount),
            principal_amount=str(payment.principal_amount),
            overpayment=str(payment.overpayment),
            late_fee_amount=str(payment.late_fee_amount),
            receipt_sent=receipt_sent,
        )


class LateFeeEntryModel(BaseModel):
    sequence_number: int
    due_date: date
    days_overdue: int
    outstanding_amount: str
    late_fee: str
    is_paid: bool


class LateFeeResponse(BaseModel):
    as_of_date: date
    total_late_fee: str
    overdue_installments: int
    entries: List[LateFeeEntryModel]

    @classmethod
    def from_breakdown(cls, breakdown: LateFeeBreakdown) -> 'LateFeeResponse':
        return cls(
            as_of_date=breakdown.as_of_date,
            total_late_fee=str(breakdown.total_late_fee),
            overdue_installments=breakdown.overdue_installments,
            entries=[
                LateFeeEntryModel(
                    sequence_number=e.sequence_number,
                    due_date=e.due_date,
                    days_overdue=e.days_overdue,
                    outstanding_amount=str(e.outstanding_amount),
                    late_fee=str(e.late_fee),
                    is_paid=e.is_paid,
                )
                for e in breakdown.entries
            ],
        )


# Calculator schemas
class SimpleInterestRequest(BaseModel):
    principal: str
    annual_rate_percent: str
    months: str


class AnnualizedReturnRequest(BaseModel):
    initial: str
    final: str
    months: str


class CurrencyConversionRequest(BaseModel):
    amount: str
    from_currency: str = Field(..., description="Currency code (DOP, USD, EUR)")
    to_currency: str = Field(..., description="Currency code (DOP, USD, EUR)")


class CalculatorResponse(BaseModel):
    result: str

    @classmethod
    def from_decimal(cls, value: Decimal) -> 'CalculatorResponse':
        return cls(result=str(value))
