from datetime import datetime
from decimal import Decimal
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    address: str | None = Field(default=None, max_length=500)
    contact: str | None = Field(default=None, max_length=30)
    rate_per_litre: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)

    @field_validator("address", "contact", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CustomerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    address: str | None = Field(default=None, max_length=500)
    contact: str | None = Field(default=None, max_length=30)
    rate_per_litre: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)

    @field_validator("address", "contact", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def validate_not_empty(self) -> Self:
        """At least one field must be supplied."""
        if not self.model_fields_set:
            msg = "At least one field is required for update"
            raise ValueError(msg)
        return self


class CustomerResponse(BaseModel):
    id: UUID
    name: str
    address: str | None
    contact: str | None
    rate_per_litre: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
