from datetime import date, datetime
from decimal import Decimal
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from milkbook.models.delivery import DeliveryStatus

MONTH_YEAR_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def month_year_of(value: date) -> str:
    """Return the YYYY-MM period tag of a date."""
    return value.strftime("%Y-%m")


class DeliveryUpsert(BaseModel):
    """Schema for creating or overwriting the delivery of one date and customer."""

    customer_id: UUID | None = None
    delivery_date: date
    quantity: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    status: DeliveryStatus
    month_year: str | None = Field(default=None, pattern=MONTH_YEAR_PATTERN)
    rate_per_litre: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @field_validator("customer_id", "rate_per_litre", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("quantity", mode="before")
    @classmethod
    def missing_quantity_to_zero(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return Decimal("0")
        return value

    @model_validator(mode="after")
    def validate_month_year(self) -> Self:
        """Derive the period tag from the date, rejecting a mismatching one."""
        expected = month_year_of(self.delivery_date)
        if self.month_year is None:
            self.month_year = expected
        elif self.month_year != expected:
            msg = f"month_year {self.month_year} does not match delivery_date {self.delivery_date}"
            raise ValueError(msg)
        return self


class DeliveryResponse(BaseModel):
    id: UUID
    customer_id: UUID | None
    customer_name: str | None = None
    delivery_date: date
    quantity: Decimal
    status: str
    month_year: str
    rate_per_litre: Decimal | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
