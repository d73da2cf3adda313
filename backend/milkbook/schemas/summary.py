from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from milkbook.schemas.bill import BillLineItem, BillSummary


class MonthlySummaryResponse(BaseModel):
    month_year: str
    total_litres: Decimal
    total_delivered_days: int
    total_absent_days: int
    average_rate: Decimal
    total_bill: Decimal


class MonthlyRateUpdate(BaseModel):
    rate_per_litre: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class MonthlyRateUpdateResult(BaseModel):
    month_year: str
    rate_per_litre: Decimal
    updated_count: int


class MonthlyTrend(BaseModel):
    month_year: str
    total_litres: Decimal
    total_days: int
    absent_days: int
    average_daily_delivery: Decimal


class AnalyticsResponse(BaseModel):
    monthly_trends: list[MonthlyTrend]
    total_deliveries: int
    total_litres: Decimal


class CustomerDeliveryHistory(BaseModel):
    customer_id: UUID
    customer_name: str
    period: str
    deliveries: list[BillLineItem]
    summary: BillSummary
