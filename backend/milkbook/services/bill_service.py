"""Billing period report builder."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from milkbook.core.errors import NotFoundError
from milkbook.models.delivery import Delivery
from milkbook.repositories.account_repository import AccountRepository
from milkbook.repositories.customer_repository import CustomerRepository
from milkbook.repositories.delivery_repository import DeliveryRepository
from milkbook.schemas.bill import (
    AbsentDay,
    BillData,
    BillIssuer,
    BillLineItem,
    BillReport,
    BillSummary,
)
from milkbook.services.billing_engine import (
    AggregationResult,
    DeliveryRow,
    PeriodSummary,
    aggregate_deliveries,
)

ALL_CUSTOMERS = "all"
ALL_CUSTOMERS_LABEL = "All Customers"


def to_delivery_rows(rows: list[tuple[Delivery, Decimal | None]]) -> list[DeliveryRow]:
    """Adapt (delivery, customer default rate) query rows for the billing engine."""
    return [
        DeliveryRow(
            delivery_date=delivery.delivery_date,  # type: ignore[arg-type]
            status=str(delivery.status),
            quantity=delivery.quantity,  # type: ignore[arg-type]
            rate_override=delivery.rate_per_litre,  # type: ignore[arg-type]
            customer_rate=customer_rate,
        )
        for delivery, customer_rate in rows
    ]


def to_bill_summary(summary: PeriodSummary) -> BillSummary:
    return BillSummary(
        total_litres=summary.total_quantity,
        total_delivered_days=summary.total_delivered_days,
        total_absent_days=summary.total_absent_days,
        average_rate=summary.average_rate,
        total_amount=summary.total_amount,
    )


def to_line_items(result: AggregationResult) -> list[BillLineItem]:
    return [
        BillLineItem(
            date=item.date,
            quantity=item.quantity,
            rate=item.rate,
            amount=item.amount,
            status=item.status,
        )
        for item in result.line_items
    ]


def parse_customer_filter(customer_filter: str | None) -> tuple[bool, UUID | None]:
    """Split a customer filter into (all customers?, customer id).

    A filter that is neither ``all`` nor a valid id selects a specific but
    unknown customer, i.e. ``(False, None)``.
    """
    if customer_filter is None or customer_filter.strip() in ("", ALL_CUSTOMERS):
        return True, None
    try:
        return False, UUID(customer_filter.strip())
    except ValueError:
        return False, None


class BillService:
    """Builds invoice-ready bills for a date range."""

    def __init__(self, db: Session):
        self.db = db
        self.account_repo = AccountRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.delivery_repo = DeliveryRepository(db)

    def build_bill(
        self,
        account_id: UUID,
        period_start: date,
        period_end: date,
        customer_filter: str | None = None,
    ) -> BillReport:
        """Build the bill of an account for an inclusive date range.

        Args:
            account_id: The issuing account.
            period_start: First day of the period.
            period_end: Last day of the period.
            customer_filter: ``all``/None for every delivery, or a customer id.
                An unknown customer yields an empty bill labelled
                "All Customers".

        Raises:
            ValueError: period_start is after period_end.
            NotFoundError: The account does not exist.
        """
        if period_start > period_end:
            raise ValueError("period_start must not be after period_end")

        account = self.account_repo.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account not found")

        all_customers, customer_id = parse_customer_filter(customer_filter)

        customer_name = ALL_CUSTOMERS_LABEL
        customer_address: str | None = None
        customer_contact: str | None = None

        if all_customers:
            rows = self.delivery_repo.get_billing_rows(account_id, period_start, period_end)
        elif customer_id is None:
            rows = []
        else:
            rows = self.delivery_repo.get_billing_rows(
                account_id, period_start, period_end, customer_id=customer_id
            )
            customer = self.customer_repo.get_by_id(customer_id, account_id)
            if customer:
                customer_name = str(customer.name)
                customer_address = customer.address  # type: ignore[assignment]
                customer_contact = customer.contact  # type: ignore[assignment]

        result = aggregate_deliveries(to_delivery_rows(rows))

        bill = BillData(
            customer_name=customer_name,
            customer_address=customer_address,
            customer_contact=customer_contact,
            period_start=period_start,
            period_end=period_end,
            deliveries=to_line_items(result),
            absent_days=[AbsentDay(date=d) for d in result.absent_dates],
            summary=to_bill_summary(result.summary),
        )
        return BillReport(
            bill=bill,
            user=BillIssuer(name=str(account.fullname), address=str(account.address)),
        )
