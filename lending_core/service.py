"""
Loan Service

Orchestrates the pure financial core with the persistence and delivery
collaborators: creating loans, regenerating schedules while no payment
exists, recording payments and reporting late fees, minimum payments and
balances. Company defaults are passed in explicitly through LendingConfig.
"""

from decimal import Decimal
from datetime import datetime, timezone, date
from typing import List, Optional
import uuid

from .config import LendingConfig
from .currency import Currency, Numeric
from .delivery import (
    LogReceiptChannel, PlainTextReceiptRenderer, ReceiptChannel, ReceiptRenderer,
    deliver_receipt, export_csv, schedule_rows
)
from .errors import ScheduleLockedError
from .late_fees import LateFeeBreakdown, LateFeePolicy, late_fee_breakdown
from .loans import LoanTerms, PaymentSchedule, generate_schedule, validate_loan_amount
from .logging_config import get_logger, log_action
from .payments import BalanceBreakdown, MinimumPaymentPolicy, compute_minimum_payment, outstanding_balance
from .repository import LoanRecord, LoanRepository, PaymentRecord, installment_id
from .storage import StorageInterface


class LoanService:
    """
    Manages loans of every company from creation through payments
    """

    def __init__(
        self,
        storage: StorageInterface,
        config: LendingConfig,
        renderer: Optional[ReceiptRenderer] = None,
        channel: Optional[ReceiptChannel] = None
    ):
        self.storage = storage
        self.config = config
        self.repository = LoanRepository(storage)
        self.renderer = renderer or PlainTextReceiptRenderer(
            config.company_name, Currency.from_code(config.currency)
        )
        self.channel = channel or LogReceiptChannel()
        self.logger = get_logger("lending.loans")

    def preview_schedule(self, terms: LoanTerms) -> PaymentSchedule:
        """Schedule for ad-hoc terms, nothing is stored"""
        return generate_schedule(terms)

    def create_loan(
        self,
        company_id: str,
        terms: LoanTerms,
        late_fee_policy: Optional[LateFeePolicy] = None
    ) -> LoanRecord:
        """
        Create a loan and persist its schedule

        Args:
            company_id: Owning company
            terms: Loan terms
            late_fee_policy: Loan policy, company default when omitted

        Returns:
            Created LoanRecord

        Raises:
            InvalidTermsError: If the principal is outside company limits
        """
        validate_loan_amount(terms, self.config.min_loan_amount, self.config.max_loan_amount)
        schedule = generate_schedule(terms)

        now = datetime.now(timezone.utc)
        record = LoanRecord(
            id=str(uuid.uuid4()),
            company_id=company_id,
            terms=terms,
            late_fee_policy=late_fee_policy or self.config.late_fee_policy(),
            created_at=now,
            updated_at=now,
        )

        with self.storage.atomic():
            self.repository.save_loan(record)
            self.repository.save_schedule(company_id, record.id, schedule)

        log_action(
            self.logger, "info", "Loan created",
            company_id=company_id, action="create_loan", resource=f"loan:{record.id}",
            extra={
                "principal": str(terms.principal),
                "amortization_type": terms.amortization_type.value,
                "payment_frequency": terms.payment_frequency.value,
                "installments": len(schedule),
            }
        )
        return record

    def get_loan(self, company_id: str, loan_id: str) -> LoanRecord:
        return self.repository.get_loan(company_id, loan_id)

    def list_loans(self, company_id: str) -> List[LoanRecord]:
        return self.repository.list_loans(company_id)

    def get_schedule(self, company_id: str, loan_id: str) -> PaymentSchedule:
        return self.repository.load_schedule(company_id, loan_id)

    def update_terms(self, company_id: str, loan_id: str, terms: LoanTerms) -> PaymentSchedule:
        """
        Replace a loan's terms and regenerate its schedule wholesale

        Raises:
            ScheduleLockedError: If a payment was already recorded on the loan
        """
        validate_loan_amount(terms, self.config.min_loan_amount, self.config.max_loan_amount)
        schedule = generate_schedule(terms)

        with self.storage.atomic():
            record = self.repository.get_loan(company_id, loan_id)
            if self.repository.has_payments(company_id, loan_id):
                raise ScheduleLockedError(
                    f"Loan {loan_id} has recorded payments; its schedule can no longer be regenerated"
                )

            record.terms = terms
            record.updated_at = datetime.now(timezone.utc)
            self.repository.save_loan(record)
            self.repository.save_schedule(company_id, loan_id, schedule)

        log_action(
            self.logger, "info", "Loan schedule regenerated",
            company_id=company_id, action="regenerate_schedule", resource=f"loan:{loan_id}",
            extra={"installments": len(schedule)}
        )
        return schedule

    def record_payment(
        self,
        company_id: str,
        loan_id: str,
        sequence_number: int,
        amount: Numeric,
        payment_date: Optional[date] = None,
        late_fee_amount: Numeric = Decimal('0')
    ) -> PaymentRecord:
        """Apply a payment, plus any late fee paid with it, to one installment of a loan"""
        with self.storage.atomic():
            self.repository.get_loan(company_id, loan_id)
            payment = self.repository.record_payment(
                company_id,
                installment_id(loan_id, sequence_number),
                amount,
                payment_date or date.today(),
                late_fee_amount
            )

        log_action(
            self.logger, "info", "Loan payment recorded",
            company_id=company_id, action="record_payment", resource=f"payment:{payment.id}",
            extra={
                "loan_id": loan_id,
                "installment": sequence_number,
                "amount": str(payment.amount),
                "interest": str(payment.interest_amount),
                "principal": str(payment.principal_amount),
                "late_fee": str(payment.late_fee_amount),
            }
        )
        return payment

    async def send_receipt(self, payment: PaymentRecord, phone: str) -> bool:
        """Render and deliver a payment receipt, best-effort"""
        artifact = self.renderer.render_receipt(payment)
        return await deliver_receipt(self.channel, phone, artifact, self.logger)

    def get_payments(self, company_id: str, loan_id: str) -> List[PaymentRecord]:
        self.repository.get_loan(company_id, loan_id)
        return self.repository.get_payments(company_id, loan_id)

    def late_fees(
        self,
        company_id: str,
        loan_id: str,
        as_of_date: date,
        policy: Optional[LateFeePolicy] = None
    ) -> LateFeeBreakdown:
        """Late fee position of a loan as of a date"""
        record = self.repository.get_loan(company_id, loan_id)
        policy = policy or record.late_fee_policy or self.config.late_fee_policy()
        schedule = self.repository.load_schedule(company_id, loan_id)
        return late_fee_breakdown(schedule, policy, as_of_date)

    def minimum_payment(
        self,
        company_id: str,
        loan_id: str,
        sequence_number: int,
        policy: MinimumPaymentPolicy
    ) -> Decimal:
        """Minimum payment due on one installment"""
        schedule = self.repository.load_schedule(company_id, loan_id)
        return compute_minimum_payment(schedule.installment(sequence_number), policy)

    def balance(self, company_id: str, loan_id: str) -> BalanceBreakdown:
        """Pending capital and interest of a loan"""
        return outstanding_balance(self.repository.load_schedule(company_id, loan_id))

    def export_schedule(self, company_id: str, loan_id: str) -> str:
        """Stored schedule of a loan as CSV"""
        return export_csv(schedule_rows(self.repository.load_schedule(company_id, loan_id)))
