"""
Market router - public reference data (no authentication).

Endpoints:
  GET /market/forex-rates - Simulated USD exchange rates
  GET /market/branches    - Branch locations, optionally by service
"""

from fastapi import APIRouter, Query

from bank_portal.schemas.market import BranchResponse, ForexRatesResponse
from bank_portal.services import market_service

router = APIRouter()


@router.get(
    "/forex-rates",
    response_model=ForexRatesResponse,
    summary="Get foreign exchange rates",
)
async def forex_rates():
    return market_service.get_forex_rates()


@router.get(
    "/branches",
    response_model=list[BranchResponse],
    summary="List branches",
)
async def branches(
    service: str | None = Query(None, description="Only branches offering this service"),
):
    return market_service.get_branches(service)
