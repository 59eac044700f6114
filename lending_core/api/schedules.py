"""
Schedule preview endpoints
"""

from fastapi import APIRouter, Depends

from .deps import LendingSystem, get_lending_system, to_http_error
from .schemas import LoanTermsModel, ScheduleResponse


router = APIRouter()


@router.post("/preview", response_model=ScheduleResponse)
async def preview_schedule(
    request: LoanTermsModel,
    system: LendingSystem = Depends(get_lending_system)
):
    """Payment schedule for ad-hoc terms; nothing is stored"""
    try:
        return ScheduleResponse.from_schedule(system.loan_service.preview_schedule(request.to_loan_terms(system.config)))
    except ValueError as e:
        raise to_http_error(e)
