"""
Financial calculator endpoints
"""

from fastapi import APIRouter

from .deps import to_http_error
from .schemas import (
    AnnualizedReturnRequest, CalculatorResponse, CurrencyConversionRequest, SimpleInterestRequest
)
from ..calculators import annualized_return, convert_between, simple_interest
from ..currency import rate_table


router = APIRouter()


@router.post("/simple-interest", response_model=CalculatorResponse)
async def calculate_simple_interest(request: SimpleInterestRequest):
    """Simple interest over a number of months"""
    try:
        return CalculatorResponse.from_decimal(
            simple_interest(request.principal, request.annual_rate_percent, request.months)
        )
    except ValueError as e:
        raise to_http_error(e)


@router.post("/annualized-return", response_model=CalculatorResponse)
async def calculate_annualized_return(request: AnnualizedReturnRequest):
    """Linear annualized return, in percent"""
    try:
        return CalculatorResponse.from_decimal(
            annualized_return(request.initial, request.final, request.months)
        )
    except ValueError as e:
        raise to_http_error(e)


@router.post("/currency", response_model=CalculatorResponse)
async def convert_currency(request: CurrencyConversionRequest):
    """Convert an amount between supported currencies"""
    try:
        return CalculatorResponse.from_decimal(
            convert_between(request.amount, request.from_currency, request.to_currency)
        )
    except ValueError as e:
        raise to_http_error(e)


@router.get("/currency/rates")
async def get_exchange_rates():
    """Static cross-rate table"""
    return {
        "rates": [
            {"from": from_code, "to": to_code, "rate": str(rate)}
            for (from_code, to_code), rate in rate_table().items()
        ]
    }
