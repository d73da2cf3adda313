"""Delivery model - one status entry per account, date and customer."""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
    literal_column,
)

from milkbook.core.database import Base
from milkbook.models.shared import NO_CUSTOMER_KEY, UUIDType, generate_uuid


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    ABSENT = "absent"
    MIXED = "mixed"
    NO_ENTRY = "no_entry"


class Delivery(Base):
    __tablename__ = "deliveries"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    account_id = Column(
        UUIDType,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id = Column(
        UUIDType,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    delivery_date = Column(Date, nullable=False, index=True)
    quantity = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False)
    month_year = Column(String(7), nullable=False)
    # Record-level override of the customer's default rate
    rate_per_litre = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "status IN ('delivered', 'absent', 'mixed', 'no_entry')",
            name="ck_deliveries_status",
        ),
        CheckConstraint("quantity >= 0", name="ck_deliveries_quantity_non_negative"),
        CheckConstraint(
            "rate_per_litre IS NULL OR rate_per_litre >= 0",
            name="ck_deliveries_rate_non_negative",
        ),
        Index("ix_deliveries_account_month", "account_id", "month_year"),
    )


Index(
    "uq_deliveries_account_date_customer",
    Delivery.account_id,
    Delivery.delivery_date,
    func.coalesce(Delivery.customer_id, literal_column(f"'{NO_CUSTOMER_KEY}'")),
    unique=True,
)
