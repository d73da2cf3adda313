from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from milkbook.core.auth import get_current_account
from milkbook.core.database import get_db
from milkbook.schemas.common import ApiResponse
from milkbook.schemas.delivery import MONTH_YEAR_PATTERN
from milkbook.schemas.summary import (
    AnalyticsResponse,
    MonthlyRateUpdate,
    MonthlyRateUpdateResult,
    MonthlySummaryResponse,
)
from milkbook.services.summary_service import SummaryService

router = APIRouter()


@router.get(
    "/summary/{month_year}",
    response_model=ApiResponse[MonthlySummaryResponse],
    summary="Get monthly summary",
    responses={
        401: {"description": "Unauthorized"},
        422: {"description": "Invalid month_year"},
    },
)
async def get_monthly_summary(
    month_year: str = Path(..., pattern=MONTH_YEAR_PATTERN),
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[MonthlySummaryResponse]:
    """Totals of every delivery of the account tagged with the period."""
    return ApiResponse(data=SummaryService(db).get_monthly_summary(account_id, month_year))


@router.put(
    "/summary/{month_year}/rate",
    response_model=ApiResponse[MonthlyRateUpdateResult],
    summary="Set rate for a month",
    responses={
        401: {"description": "Unauthorized"},
        422: {"description": "Validation error"},
    },
)
async def update_monthly_rate(
    data: MonthlyRateUpdate,
    month_year: str = Path(..., pattern=MONTH_YEAR_PATTERN),
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[MonthlyRateUpdateResult]:
    """Overwrite the rate of every delivery of the account in the period."""
    result = SummaryService(db).update_monthly_rate(account_id, month_year, data.rate_per_litre)
    return ApiResponse(
        data=result,
        message=f"Updated rate for {result.updated_count} deliveries",
    )


@router.get(
    "/analytics",
    response_model=ApiResponse[AnalyticsResponse],
    summary="Get delivery analytics",
    responses={401: {"description": "Unauthorized"}},
)
async def get_analytics(
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[AnalyticsResponse]:
    return ApiResponse(data=SummaryService(db).get_analytics(account_id))
