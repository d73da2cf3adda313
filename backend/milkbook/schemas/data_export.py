"""Snapshot export and import schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from milkbook.schemas.account import AccountResponse
from milkbook.schemas.customer import CustomerCreate, CustomerResponse
from milkbook.schemas.delivery import DeliveryResponse


class ExportSnapshot(BaseModel):
    account: AccountResponse
    customers: list[CustomerResponse]
    deliveries: list[DeliveryResponse]
    exported_at: datetime


class ImportCustomer(CustomerCreate):
    """A customer entry of an import payload.

    ``id`` is the identifier the customer had in the exporting system; it is
    only used to re-point imported deliveries at the reconciled customer.
    """

    id: UUID | None = None


class ImportPayload(BaseModel):
    # Entries are validated one at a time so a malformed row only fails itself.
    customers: list[Any] = Field(default_factory=list)
    deliveries: list[Any]


class ImportResult(BaseModel):
    imported: int = 0
    updated: int = 0
    errors: int = 0
