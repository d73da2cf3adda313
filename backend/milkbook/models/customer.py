from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from milkbook.core.database import Base
from milkbook.models.shared import UUIDType, generate_uuid


class Customer(Base):
    __tablename__ = "customers"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    account_id = Column(
        UUIDType,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)
    address = Column(Text, nullable=True)
    contact = Column(String(30), nullable=True)
    rate_per_litre = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("account_id", "name", name="uq_customers_account_name"),
        CheckConstraint("rate_per_litre > 0", name="ck_customers_rate_positive"),
    )
