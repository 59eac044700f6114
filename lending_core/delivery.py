"""
Delivery Module

Rendering and messaging collaborators of the lending core: payment receipts,
CSV export of schedules and the channels receipts are delivered through.
Delivery is best-effort; a failing channel never breaks the payment flow.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import csv
import io
import logging

from .currency import Currency, Money
from .loans import PaymentSchedule
from .logging_config import get_logger, log_action
from .repository import PaymentRecord


@dataclass(frozen=True)
class ReceiptArtifact:
    """Printable/exportable output of a renderer"""
    content: str
    media_type: str = "text/plain"
    filename: Optional[str] = None


class ReceiptRenderer(ABC):
    """Abstract base class for payment receipt renderers"""

    @abstractmethod
    def render_receipt(self, payment: PaymentRecord) -> ReceiptArtifact:
        """Render a payment into a printable artifact"""
        pass


class PlainTextReceiptRenderer(ReceiptRenderer):
    """Plain-text receipt suitable for thermal printers and chat messages"""

    def __init__(self, company_name: str = "", currency: Currency = Currency.DOP):
        self.company_name = company_name
        self.currency = currency

    def render_receipt(self, payment: PaymentRecord) -> ReceiptArtifact:
        def money(amount) -> str:
            return Money(amount, self.currency).to_string()

        lines = []
        if self.company_name:
            lines.append(self.company_name)
        lines.extend([
            f"Receipt {payment.id[:8].upper()}",
            f"Date: {payment.payment_date.isoformat()}",
            f"Loan: {payment.loan_id}",
            f"Installment: {payment.sequence_number}",
            f"Interest: {money(payment.interest_amount)}",
            f"Principal: {money(payment.principal_amount)}",
        ])
        if payment.overpayment:
            lines.append(f"Overpayment: {money(payment.overpayment)}")
        if payment.late_fee_amount:
            lines.append(f"Late fee: {money(payment.late_fee_amount)}")
        lines.append(f"Total paid: {money(payment.amount + payment.late_fee_amount)}")

        return ReceiptArtifact(
            content="\n".join(lines) + "\n",
            filename=f"receipt-{payment.id}.txt",
        )


def schedule_rows(schedule: PaymentSchedule) -> List[Dict[str, Any]]:
    """Flat rows of a schedule for tabular export"""
    return [
        {
            "installment": i.sequence_number,
            "due_date": i.due_date.isoformat(),
            "principal": str(i.principal_due),
            "interest": str(i.interest_due),
            "payment": str(i.total_due),
            "remaining_balance": str(i.closing_balance),
        }
        for i in schedule
    ]


def export_csv(rows: List[Dict[str, Any]]) -> str:
    """
    Export rows as CSV text

    Headers are taken from the first row; no rows produce an empty string.
    """
    output = io.StringIO()

    if rows:
        headers = list(rows[0].keys())
        writer = csv.DictWriter(output, fieldnames=headers)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    csv_content = output.getvalue()
    output.close()
    return csv_content


class ReceiptChannel(ABC):
    """Abstract base class for receipt delivery channels"""

    @abstractmethod
    async def deliver(self, phone: str, artifact: ReceiptArtifact) -> bool:
        """Deliver a receipt to a phone number. Returns True if successful."""
        pass


class LogReceiptChannel(ReceiptChannel):
    """Logs receipts instead of sending them, for development"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("lending.delivery")

    async def deliver(self, phone: str, artifact: ReceiptArtifact) -> bool:
        log_action(
            self.logger, "info", f"Receipt to {phone}",
            action="deliver_receipt", resource=artifact.filename,
            extra={"media_type": artifact.media_type, "length": len(artifact.content)}
        )
        return True


async def deliver_receipt(
    channel: ReceiptChannel,
    phone: str,
    artifact: ReceiptArtifact,
    logger: Optional[logging.Logger] = None
) -> bool:
    """
    Best-effort receipt delivery

    Channel failures are logged and reported as False, never raised.
    """
    logger = logger or get_logger("lending.delivery")
    try:
        return await channel.deliver(phone, artifact)
    except Exception as e:
        logger.error(f"Receipt delivery to {phone} failed: {e}")
        return False
