"""Delivery repository for data access."""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from milkbook.core.errors import ConflictError
from milkbook.models.customer import Customer
from milkbook.models.delivery import Delivery, DeliveryStatus
from milkbook.schemas.delivery import DeliveryUpsert


class DeliveryRepository:
    """Repository for Delivery model. Every query is scoped to one account."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, delivery_id: UUID, account_id: UUID) -> Delivery | None:
        return (
            self.db.query(Delivery)
            .filter(Delivery.id == delivery_id, Delivery.account_id == account_id)
            .first()
        )

    def get_by_key(
        self,
        account_id: UUID,
        delivery_date: date,
        customer_id: UUID | None,
    ) -> Delivery | None:
        """Get the delivery identified by account, date and customer-or-none."""
        query = self.db.query(Delivery).filter(
            Delivery.account_id == account_id,
            Delivery.delivery_date == delivery_date,
        )
        if customer_id is None:
            query = query.filter(Delivery.customer_id.is_(None))
        else:
            query = query.filter(Delivery.customer_id == customer_id)
        return query.first()

    def get_all_with_customer(
        self, account_id: UUID, month_year: str | None = None
    ) -> list[tuple[Delivery, str | None, str | None]]:
        """Deliveries of an account, newest first, with customer name and contact."""
        query = (
            self.db.query(Delivery, Customer.name, Customer.contact)
            .outerjoin(Customer, Delivery.customer_id == Customer.id)
            .filter(Delivery.account_id == account_id)
        )
        if month_year:
            query = query.filter(Delivery.month_year == month_year)
        rows = query.order_by(Delivery.delivery_date.desc(), Delivery.created_at.desc()).all()
        return [(delivery, name, contact) for delivery, name, contact in rows]

    def get_billing_rows(
        self,
        account_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        customer_id: UUID | None = None,
        month_year: str | None = None,
    ) -> list[tuple[Delivery, Decimal | None]]:
        """Deliveries joined with their customer's default rate, oldest first.

        With ``customer_id`` only that customer's deliveries are returned,
        otherwise customer-less deliveries are included as well.
        """
        query = self.db.query(Delivery, Customer.rate_per_litre)
        if customer_id is not None:
            query = query.join(Customer, Delivery.customer_id == Customer.id).filter(
                Delivery.customer_id == customer_id
            )
        else:
            query = query.outerjoin(Customer, Delivery.customer_id == Customer.id)
        query = query.filter(Delivery.account_id == account_id)
        if start_date is not None:
            query = query.filter(Delivery.delivery_date >= start_date)
        if end_date is not None:
            query = query.filter(Delivery.delivery_date <= end_date)
        if month_year:
            query = query.filter(Delivery.month_year == month_year)
        rows = query.order_by(Delivery.delivery_date.asc(), Delivery.created_at.asc()).all()
        return [(delivery, rate) for delivery, rate in rows]

    def upsert(self, account_id: UUID, data: DeliveryUpsert) -> tuple[Delivery, bool]:
        """Create or overwrite the delivery for (account, date, customer-or-none).

        The lookup and the write are separate statements; a concurrent writer
        for the same key makes the unique index reject this one, which is
        reported as a ConflictError.

        Returns:
            The saved delivery and whether it was created.
        """
        existing = self.get_by_key(account_id, data.delivery_date, data.customer_id)
        try:
            if existing:
                existing.quantity = data.quantity  # type: ignore[assignment]
                existing.status = data.status.value  # type: ignore[assignment]
                existing.rate_per_litre = data.rate_per_litre  # type: ignore[assignment]
                existing.customer_id = data.customer_id  # type: ignore[assignment]
                existing.month_year = data.month_year  # type: ignore[assignment]
                self.db.commit()
                self.db.refresh(existing)
                return existing, False

            record = Delivery(
                account_id=account_id,
                customer_id=data.customer_id,
                delivery_date=data.delivery_date,
                quantity=data.quantity,
                status=data.status.value,
                month_year=data.month_year,
                rate_per_litre=data.rate_per_litre,
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return record, True
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Delivery already exists for this date and customer") from exc

    def update_rate_for_month(self, account_id: UUID, month_year: str, rate: Decimal) -> int:
        """Overwrite the rate of every delivery in a period. Returns rows updated."""
        count = (
            self.db.query(Delivery)
            .filter(Delivery.account_id == account_id, Delivery.month_year == month_year)
            .update(
                {Delivery.rate_per_litre: rate, Delivery.updated_at: func.now()},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return int(count)

    def monthly_trends(self, account_id: UUID) -> list[dict[str, Any]]:
        """Per-period delivery counters, oldest period first."""
        delivered_quantity = case(
            (Delivery.status == DeliveryStatus.DELIVERED.value, Delivery.quantity),
            else_=0,
        )
        absent = case((Delivery.status == DeliveryStatus.ABSENT.value, 1), else_=0)
        rows = (
            self.db.query(
                Delivery.month_year,
                func.sum(delivered_quantity).label("total_litres"),
                func.count(Delivery.id).label("total_days"),
                func.sum(absent).label("absent_days"),
                func.avg(delivered_quantity).label("average_daily_delivery"),
            )
            .filter(Delivery.account_id == account_id)
            .group_by(Delivery.month_year)
            .order_by(Delivery.month_year.asc())
            .all()
        )
        return [
            {
                "month_year": row.month_year,
                "total_litres": row.total_litres,
                "total_days": row.total_days,
                "absent_days": row.absent_days,
                "average_daily_delivery": row.average_daily_delivery,
            }
            for row in rows
        ]

    def delete(self, delivery_id: UUID, account_id: UUID) -> bool:
        """Delete a delivery record."""
        record = self.get_by_id(delivery_id, account_id)
        if not record:
            return False
        self.db.delete(record)
        self.db.commit()
        return True
