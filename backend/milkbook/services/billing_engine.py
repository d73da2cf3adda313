"""Rate resolution and period aggregation for delivery records.

Everything here is pure: rows in, line items and a summary out. The bill
builder, the monthly summary and the customer history all feed their query
results through :func:`aggregate_deliveries` so the counters agree everywhere.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from milkbook.models.delivery import DeliveryStatus

ZERO = Decimal("0")
_CENTS = Decimal("0.01")


def _to_decimal(value: object) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round_money(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DeliveryRow:
    """One delivery joined with the default rate of its customer, if any."""

    delivery_date: date
    status: str
    quantity: Decimal = ZERO
    rate_override: Decimal | None = None
    customer_rate: Decimal | None = None


@dataclass(frozen=True)
class LineItem:
    date: date
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    status: str


@dataclass(frozen=True)
class PeriodSummary:
    total_quantity: Decimal = ZERO
    total_delivered_days: int = 0
    total_absent_days: int = 0
    average_rate: Decimal = ZERO
    total_amount: Decimal = ZERO


@dataclass
class AggregationResult:
    line_items: list[LineItem] = field(default_factory=list)
    absent_dates: list[date] = field(default_factory=list)
    summary: PeriodSummary = field(default_factory=PeriodSummary)


def resolve_rate(rate_override: object, customer_rate: object) -> Decimal:
    """Return the effective rate of a delivery.

    Precedence: an explicit record-level override (zero included), then the
    linked customer's default rate, then zero.
    """
    if rate_override is not None:
        return _to_decimal(rate_override)
    if customer_rate is not None:
        return _to_decimal(customer_rate)
    return ZERO


def aggregate_deliveries(rows: Iterable[DeliveryRow]) -> AggregationResult:
    """Turn delivery rows into billable line items and a period summary.

    Only ``delivered`` rows produce line items and count towards quantity,
    amount and the average rate; ``absent`` rows only count as absent days.
    ``mixed`` and ``no_entry`` rows are ignored. Zero-rate deliveries count
    as delivered days but are left out of the average rate.
    """
    result = AggregationResult()
    total_quantity = ZERO
    total_amount = ZERO
    delivered_days = 0
    absent_days = 0
    rate_sum = ZERO
    rate_count = 0

    for row in rows:
        if row.status == DeliveryStatus.DELIVERED.value:
            rate = resolve_rate(row.rate_override, row.customer_rate)
            quantity = _to_decimal(row.quantity)
            amount = _round_money(quantity * rate)
            result.line_items.append(
                LineItem(
                    date=row.delivery_date,
                    quantity=quantity,
                    rate=rate,
                    amount=amount,
                    status=row.status,
                )
            )
            total_quantity += quantity
            total_amount += amount
            delivered_days += 1
            if rate > 0:
                rate_sum += rate
                rate_count += 1
        elif row.status == DeliveryStatus.ABSENT.value:
            result.absent_dates.append(row.delivery_date)
            absent_days += 1

    average_rate = _round_money(rate_sum / rate_count) if rate_count else ZERO
    result.summary = PeriodSummary(
        total_quantity=total_quantity,
        total_delivered_days=delivered_days,
        total_absent_days=absent_days,
        average_rate=average_rate,
        total_amount=total_amount,
    )
    return result
