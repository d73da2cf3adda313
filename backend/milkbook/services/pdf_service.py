"""PDF rendering of delivery bills."""

from __future__ import annotations

from decimal import Decimal
from html import escape
from string import Template
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from milkbook.schemas.bill import BillReport

_BILL_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
<head>
<style>
  body { font-family: Helvetica, Arial, sans-serif; font-size: 12px; color: #333; margin: 40px; }
  h1 { font-size: 22px; margin-bottom: 4px; }
  h2 { font-size: 14px; margin: 24px 0 8px; }
  .header { display: flex; justify-content: space-between; margin-bottom: 24px; }
  .header-left, .header-right { width: 48%; }
  .meta td { padding: 2px 8px 2px 0; }
  table.items { width: 100%; border-collapse: collapse; margin-bottom: 16px; }
  table.items th { text-align: left; border-bottom: 2px solid #333; padding: 6px 8px; }
  table.items td { padding: 6px 8px; border-bottom: 1px solid #ddd; }
  table.items .right { text-align: right; }
  .absent { color: #c5221f; }
  .totals { width: 300px; margin-left: auto; }
  .totals td { padding: 4px 8px; }
  .totals .label { text-align: right; }
  .totals .total-row { font-weight: bold; border-top: 2px solid #333; }
</style>
</head>
<body>
<div class="header">
  <div class="header-left">
    <h1>${issuer_name}</h1>
    <p>${issuer_address}</p>
  </div>
  <div class="header-right" style="text-align: right;">
    <h1>MILK BILL</h1>
    <p>${period}</p>
  </div>
</div>
<table class="meta">
  <tr><td><strong>Bill To:</strong></td></tr>
  <tr><td>${customer_name}</td></tr>
  <tr><td>${customer_address}</td></tr>
  <tr><td>${customer_contact}</td></tr>
</table>
<table class="items">
  <thead>
    <tr>
      <th>Date</th>
      <th class="right">Litres</th>
      <th class="right">Rate</th>
      <th class="right">Amount</th>
    </tr>
  </thead>
  <tbody>
    ${delivery_rows}
  </tbody>
</table>
<h2>Absent Days</h2>
<p class="absent">${absent_days}</p>
<table class="totals">
  <tr><td class="label">Total Litres:</td><td class="right">${total_litres}</td></tr>
  <tr><td class="label">Delivered Days:</td><td class="right">${delivered_days}</td></tr>
  <tr><td class="label">Absent Days:</td><td class="right">${absent_count}</td></tr>
  <tr><td class="label">Average Rate:</td><td class="right">${average_rate}</td></tr>
  <tr class="total-row"><td class="label">Total:</td><td class="right">${total_amount}</td></tr>
</table>
</body>
</html>
""")

_DELIVERY_ROW_TEMPLATE = Template(
    '<tr><td>${date}</td><td class="right">${quantity}</td>'
    '<td class="right">${rate}</td><td class="right">${amount}</td></tr>'
)


def _format_amount(value: object) -> str:
    """Format a quantity or amount to two decimal places."""
    if value is None:
        return "0.00"
    return f"{Decimal(str(value)):.2f}"


def _format_date(value: object) -> str:
    if value is None:
        return ""
    return str(value)[:10]


def render_bill_html(report: BillReport) -> str:
    """Fill the bill template with a report's values."""
    bill = report.bill
    delivery_rows = "\n    ".join(
        _DELIVERY_ROW_TEMPLATE.substitute(
            date=_format_date(item.date),
            quantity=_format_amount(item.quantity),
            rate=_format_amount(item.rate),
            amount=_format_amount(item.amount),
        )
        for item in bill.deliveries
    )
    absent_days = ", ".join(_format_date(day.date) for day in bill.absent_days) or "None"

    return _BILL_TEMPLATE.substitute(
        issuer_name=escape(report.user.name),
        issuer_address=escape(report.user.address),
        period=f"{_format_date(bill.period_start)} to {_format_date(bill.period_end)}",
        customer_name=escape(bill.customer_name),
        customer_address=escape(bill.customer_address or ""),
        customer_contact=escape(bill.customer_contact or ""),
        delivery_rows=delivery_rows,
        absent_days=absent_days,
        total_litres=_format_amount(bill.summary.total_litres),
        delivered_days=bill.summary.total_delivered_days,
        absent_count=bill.summary.total_absent_days,
        average_rate=_format_amount(bill.summary.average_rate),
        total_amount=_format_amount(bill.summary.total_amount),
    )


class PdfService:
    """Service for generating PDF documents."""

    def generate_bill_pdf(self, report: BillReport) -> bytes:
        """Render a bill report to PDF.

        Args:
            report: The bill and its issuing account.

        Returns:
            Raw PDF bytes.
        """
        html = render_bill_html(report)

        import weasyprint

        pdf_bytes: bytes = weasyprint.HTML(string=html).write_pdf()
        return pdf_bytes
