"""
Loan Repository

Persistence collaborator of the financial core. Loans, their installments and
payments are stored per owning company; a record belonging to another company
is reported as not found.
"""

from decimal import Decimal
from datetime import datetime, timezone, date
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import uuid

from .currency import Numeric, round_money
from .errors import LoanNotFoundError
from .late_fees import LateFeePolicy
from .loans import Installment, LoanTerms, PaymentSchedule
from .payments import allocate_payment, apply_payment
from .storage import StorageInterface


@dataclass
class LoanRecord:
    """Stored loan with its terms and late fee policy"""
    id: str
    company_id: str
    terms: LoanTerms
    late_fee_policy: Optional[LateFeePolicy]
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'company_id': self.company_id,
            'terms': self.terms.to_dict(),
            'late_fee_policy': self.late_fee_policy.to_dict() if self.late_fee_policy else None,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoanRecord':
        policy_data = data.get('late_fee_policy')
        policy = None
        if policy_data:
            policy = LateFeePolicy(
                enabled=policy_data['enabled'],
                rate_percent=Decimal(policy_data['rate_percent']),
                grace_period_days=int(policy_data['grace_period_days']),
                max_late_fee=Decimal(policy_data['max_late_fee']) if policy_data.get('max_late_fee') else None,
                calculation_type=policy_data['calculation_type'],
            )
        return cls(
            id=data['id'],
            company_id=data['company_id'],
            terms=LoanTerms.from_dict(data['terms']),
            late_fee_policy=policy,
            created_at=datetime.fromisoformat(data['created_at']),
            updated_at=datetime.fromisoformat(data['updated_at']),
        )


@dataclass
class PaymentRecord:
    """Payment applied to one installment"""
    id: str
    company_id: str
    loan_id: str
    installment_id: str
    sequence_number: int
    payment_date: date
    amount: Decimal
    interest_amount: Decimal
    principal_amount: Decimal
    overpayment: Decimal
    late_fee_amount: Decimal = Decimal('0')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'company_id': self.company_id,
            'loan_id': self.loan_id,
            'installment_id': self.installment_id,
            'sequence_number': self.sequence_number,
            'payment_date': self.payment_date.isoformat(),
            'amount': str(self.amount),
            'interest_amount': str(self.interest_amount),
            'principal_amount': str(self.principal_amount),
            'overpayment': str(self.overpayment),
            'late_fee_amount': str(self.late_fee_amount),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PaymentRecord':
        return cls(
            id=data['id'],
            company_id=data['company_id'],
            loan_id=data['loan_id'],
            installment_id=data['installment_id'],
            sequence_number=int(data['sequence_number']),
            payment_date=date.fromisoformat(data['payment_date']),
            amount=Decimal(data['amount']),
            interest_amount=Decimal(data['interest_amount']),
            principal_amount=Decimal(data['principal_amount']),
            overpayment=Decimal(data['overpayment']),
            late_fee_amount=Decimal(data.get('late_fee_amount', '0')),
        )


def installment_id(loan_id: str, sequence_number: int) -> str:
    """Storage id of an installment"""
    return f"{loan_id}_{sequence_number}"


class LoanRepository:
    """Company-keyed storage of loans, schedules and payments"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage

        self.loans_table = "loans"
        self.installments_table = "installments"
        self.payments_table = "loan_payments"

    def save_loan(self, record: LoanRecord) -> None:
        """Save loan record"""
        self.storage.save(self.loans_table, record.id, record.to_dict())

    def get_loan(self, company_id: str, loan_id: str) -> LoanRecord:
        """
        Get a company's loan

        Raises:
            LoanNotFoundError: If the loan does not exist for this company
        """
        data = self.storage.load(self.loans_table, loan_id)
        if not data or data.get('company_id') != company_id:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return LoanRecord.from_dict(data)

    def list_loans(self, company_id: str) -> List[LoanRecord]:
        """All loans of a company"""
        records = self.storage.find(self.loans_table, {"company_id": company_id})
        return [LoanRecord.from_dict(data) for data in records]

    def load_loan_terms(self, company_id: str, loan_id: str) -> LoanTerms:
        """Terms of a company's loan"""
        return self.get_loan(company_id, loan_id).terms

    def save_schedule(self, company_id: str, loan_id: str, schedule: PaymentSchedule) -> None:
        """
        Replace the stored schedule of a loan, all or nothing

        Installments of the previous schedule are removed in the same atomic
        block, so sequence numbers stay gapless with no stale remnants.
        """
        self.get_loan(company_id, loan_id)

        with self.storage.atomic():
            existing = self.storage.find(
                self.installments_table,
                {"company_id": company_id, "loan_id": loan_id}
            )
            for data in existing:
                self.storage.delete(self.installments_table, data['id'])

            for installment in schedule:
                self._save_installment(company_id, loan_id, installment)

    def load_schedule(self, company_id: str, loan_id: str) -> PaymentSchedule:
        """Stored schedule of a company's loan"""
        record = self.get_loan(company_id, loan_id)
        rows = self.storage.find(
            self.installments_table,
            {"company_id": company_id, "loan_id": loan_id}
        )
        installments = sorted(
            (Installment.from_dict(row) for row in rows),
            key=lambda i: i.sequence_number
        )
        return PaymentSchedule(terms=record.terms, installments=tuple(installments))

    def record_payment(
        self,
        company_id: str,
        installment_id: str,
        amount: Numeric,
        payment_date: date,
        late_fee_amount: Numeric = Decimal('0')
    ) -> PaymentRecord:
        """
        Apply a payment to an installment and store it

        The late fee amount is paid on top of the installment amount and is
        added to the installment's late_fee_paid.

        Raises:
            LoanNotFoundError: If the installment does not exist for this company
            ValueError: If the amount is not positive or the late fee is negative
        """
        with self.storage.atomic():
            data = self.storage.load(self.installments_table, installment_id)
            if not data or data.get('company_id') != company_id:
                raise LoanNotFoundError(f"Installment {installment_id} not found")

            loan_id = data['loan_id']
            installment = Installment.from_dict(data)
            updated = apply_payment(installment, amount, late_fee_amount)
            allocation = allocate_payment(installment, amount)

            payment = PaymentRecord(
                id=str(uuid.uuid4()),
                company_id=company_id,
                loan_id=loan_id,
                installment_id=installment_id,
                sequence_number=installment.sequence_number,
                payment_date=payment_date,
                amount=round_money(amount),
                interest_amount=allocation.interest_amount,
                principal_amount=allocation.principal_amount,
                overpayment=allocation.overpayment,
                late_fee_amount=updated.late_fee_paid - installment.late_fee_paid,
            )

            self._save_installment(company_id, loan_id, updated)
            self.storage.save(self.payments_table, payment.id, payment.to_dict())
            self._touch_loan(loan_id)

        return payment

    def get_payments(self, company_id: str, loan_id: str) -> List[PaymentRecord]:
        """Payment history of a loan, oldest first"""
        rows = self.storage.find(
            self.payments_table,
            {"company_id": company_id, "loan_id": loan_id}
        )
        payments = [PaymentRecord.from_dict(row) for row in rows]
        payments.sort(key=lambda p: (p.payment_date, p.sequence_number))
        return payments

    def has_payments(self, company_id: str, loan_id: str) -> bool:
        return bool(self.get_payments(company_id, loan_id))

    def _save_installment(self, company_id: str, loan_id: str, installment: Installment) -> None:
        record_id = installment_id(loan_id, installment.sequence_number)
        row = installment.to_dict()
        row.update({'id': record_id, 'company_id': company_id, 'loan_id': loan_id})
        self.storage.save(self.installments_table, record_id, row)

    def _touch_loan(self, loan_id: str) -> None:
        data = self.storage.load(self.loans_table, loan_id)
        if data:
            data['updated_at'] = datetime.now(timezone.utc).isoformat()
            self.storage.save(self.loans_table, loan_id, data)
