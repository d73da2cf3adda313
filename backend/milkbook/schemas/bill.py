from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class BillLineItem(BaseModel):
    date: date
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    status: str


class AbsentDay(BaseModel):
    date: date


class BillSummary(BaseModel):
    total_litres: Decimal
    total_delivered_days: int
    total_absent_days: int
    average_rate: Decimal
    total_amount: Decimal


class BillData(BaseModel):
    customer_name: str
    customer_address: str | None
    customer_contact: str | None
    period_start: date
    period_end: date
    deliveries: list[BillLineItem]
    absent_days: list[AbsentDay]
    summary: BillSummary


class BillIssuer(BaseModel):
    name: str
    address: str


class BillReport(BaseModel):
    """Invoice-ready bill together with the issuing account."""

    bill: BillData
    user: BillIssuer
