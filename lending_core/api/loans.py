"""
Loan endpoints
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status

from .deps import LendingSystem, get_company_id, get_lending_system, to_http_error
from .schemas import (
    CreateLoanRequest, LateFeeResponse, LoanPaymentRequest, LoanResponse, LoanTermsModel,
    PaymentResponse, ScheduleResponse
)
from ..errors import ScheduleLockedError
from ..payments import MinimumPaymentPolicy


router = APIRouter()

DOMAIN_ERRORS = (ValueError, LookupError, ScheduleLockedError)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=LoanResponse)
async def create_loan(
    request: CreateLoanRequest,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Create a loan and persist its payment schedule"""
    try:
        policy = request.late_fee_policy.to_policy() if request.late_fee_policy else None
        record = system.loan_service.create_loan(company_id, request.terms.to_loan_terms(system.config), policy)
        schedule = system.loan_service.get_schedule(company_id, record.id)
        return LoanResponse.from_record(record, schedule)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@router.get("", response_model=List[LoanResponse])
async def list_loans(
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """List the company's loans"""
    return [LoanResponse.from_record(record) for record in system.loan_service.list_loans(company_id)]


@router.get("/{loan_id}", response_model=LoanResponse)
async def get_loan(
    loan_id: str,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Get loan details"""
    try:
        return LoanResponse.from_record(system.loan_service.get_loan(company_id, loan_id))
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@router.get("/{loan_id}/schedule", response_model=ScheduleResponse)
async def get_loan_schedule(
    loan_id: str,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Get the stored payment schedule"""
    try:
        return ScheduleResponse.from_schedule(system.loan_service.get_schedule(company_id, loan_id))
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@router.get("/{loan_id}/schedule.csv")
async def export_loan_schedule(
    loan_id: str,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Export the stored payment schedule as CSV"""
    try:
        content = system.loan_service.export_schedule(company_id, loan_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=schedule-{loan_id}.csv"}
    )


@router.put("/{loan_id}/terms", response_model=ScheduleResponse)
async def update_loan_terms(
    loan_id: str,
    request: LoanTermsModel,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Replace the loan terms and regenerate the schedule (only before any payment)"""
    try:
        schedule = system.loan_service.update_terms(company_id, loan_id, request.to_loan_terms(system.config))
        return ScheduleResponse.from_schedule(schedule)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@router.post("/{loan_id}/payments", status_code=status.HTTP_201_CREATED, response_model=PaymentResponse)
async def make_loan_payment(
    loan_id: str,
    request: LoanPaymentRequest,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Record a payment against one installment"""
    try:
        payment = system.loan_service.record_payment(
            company_id, loan_id, request.sequence_number, request.amount, request.payment_date,
            request.late_fee_amount
        )
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)

    receipt_sent = None
    if request.phone:
        receipt_sent = await system.loan_service.send_receipt(payment, request.phone)

    return PaymentResponse.from_payment(payment, receipt_sent)


@router.get("/{loan_id}/payments", response_model=List[PaymentResponse])
async def get_loan_payments(
    loan_id: str,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Payment history of a loan"""
    try:
        payments = system.loan_service.get_payments(company_id, loan_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return [PaymentResponse.from_payment(p) for p in payments]


@router.get("/{loan_id}/late-fees", response_model=LateFeeResponse)
async def get_late_fees(
    loan_id: str,
    as_of: Optional[date] = None,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Late fees accrued on the loan as of a date (today by default)"""
    try:
        breakdown = system.loan_service.late_fees(company_id, loan_id, as_of or date.today())
        return LateFeeResponse.from_breakdown(breakdown)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@router.get("/{loan_id}/balance")
async def get_loan_balance(
    loan_id: str,
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Pending capital and interest of the loan"""
    try:
        balance = system.loan_service.balance(company_id, loan_id)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)

    return {
        "loan_id": loan_id,
        "capital_pending": str(balance.capital_pending),
        "interest_pending": str(balance.interest_pending),
        "total": str(balance.total),
    }


@router.get("/{loan_id}/installments/{sequence_number}/minimum-payment")
async def get_minimum_payment(
    loan_id: str,
    sequence_number: int,
    type: str = "both",
    percentage: str = "100",
    company_id: str = Depends(get_company_id),
    system: LendingSystem = Depends(get_lending_system)
):
    """Minimum acceptable payment for one installment"""
    try:
        policy = MinimumPaymentPolicy(type=type, percentage=percentage)
        amount = system.loan_service.minimum_payment(company_id, loan_id, sequence_number, policy)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)

    return {
        "loan_id": loan_id,
        "sequence_number": sequence_number,
        "type": policy.type.value,
        "percentage": str(policy.percentage),
        "minimum_payment": str(amount),
    }
