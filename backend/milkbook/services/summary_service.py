"""Monthly summaries, bulk period rate updates and delivery analytics."""

import logging
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from milkbook.core.errors import NotFoundError
from milkbook.repositories.customer_repository import CustomerRepository
from milkbook.repositories.delivery_repository import DeliveryRepository
from milkbook.schemas.bill import BillLineItem
from milkbook.schemas.summary import (
    AnalyticsResponse,
    CustomerDeliveryHistory,
    MonthlyRateUpdateResult,
    MonthlySummaryResponse,
    MonthlyTrend,
)
from milkbook.services.bill_service import to_bill_summary, to_delivery_rows, to_line_items
from milkbook.services.billing_engine import ZERO, aggregate_deliveries

logger = logging.getLogger(__name__)


def _decimal(value: object) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value))


class SummaryService:
    def __init__(self, db: Session):
        self.db = db
        self.delivery_repo = DeliveryRepository(db)
        self.customer_repo = CustomerRepository(db)

    def get_monthly_summary(self, account_id: UUID, month_year: str) -> MonthlySummaryResponse:
        """Summarize every delivery of an account tagged with a period."""
        rows = self.delivery_repo.get_billing_rows(account_id, month_year=month_year)
        summary = aggregate_deliveries(to_delivery_rows(rows)).summary
        return MonthlySummaryResponse(
            month_year=month_year,
            total_litres=summary.total_quantity,
            total_delivered_days=summary.total_delivered_days,
            total_absent_days=summary.total_absent_days,
            average_rate=summary.average_rate,
            total_bill=summary.total_amount,
        )

    def update_monthly_rate(
        self, account_id: UUID, month_year: str, rate: Decimal
    ) -> MonthlyRateUpdateResult:
        """Overwrite the record-level rate of every delivery in a period."""
        count = self.delivery_repo.update_rate_for_month(account_id, month_year, rate)
        logger.info(
            "Set rate %s on %d deliveries of %s for account %s",
            rate,
            count,
            month_year,
            account_id,
        )
        return MonthlyRateUpdateResult(
            month_year=month_year, rate_per_litre=rate, updated_count=count
        )

    def get_analytics(self, account_id: UUID) -> AnalyticsResponse:
        trends = [
            MonthlyTrend(
                month_year=row["month_year"],
                total_litres=_decimal(row["total_litres"]),
                total_days=int(row["total_days"] or 0),
                absent_days=int(row["absent_days"] or 0),
                average_daily_delivery=_decimal(row["average_daily_delivery"]).quantize(
                    Decimal("0.01"), rounding=ROUND_HALF_UP
                ),
            )
            for row in self.delivery_repo.monthly_trends(account_id)
        ]
        return AnalyticsResponse(
            monthly_trends=trends,
            total_deliveries=sum(t.total_days for t in trends),
            total_litres=sum((t.total_litres for t in trends), ZERO),
        )

    def get_customer_history(
        self, account_id: UUID, customer_id: UUID, month_year: str | None = None
    ) -> CustomerDeliveryHistory:
        """Delivered and absent entries of one customer, newest first.

        Raises:
            NotFoundError: The customer does not belong to the account.
        """
        customer = self.customer_repo.get_by_id(customer_id, account_id)
        if not customer:
            raise NotFoundError("Customer not found")

        rows = self.delivery_repo.get_billing_rows(
            account_id, customer_id=customer_id, month_year=month_year
        )
        result = aggregate_deliveries(to_delivery_rows(rows))

        entries = to_line_items(result) + [
            BillLineItem(date=d, quantity=ZERO, rate=ZERO, amount=ZERO, status="absent")
            for d in result.absent_dates
        ]
        entries.sort(key=lambda entry: entry.date, reverse=True)

        summary = result.summary
        if summary.average_rate == ZERO:
            summary = replace(summary, average_rate=_decimal(customer.rate_per_litre))

        return CustomerDeliveryHistory(
            customer_id=customer_id,
            customer_name=str(customer.name),
            period=month_year or "All Time",
            deliveries=entries,
            summary=to_bill_summary(summary),
        )
