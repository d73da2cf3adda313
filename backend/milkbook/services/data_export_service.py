"""Snapshot export and reconciling import of an account's data."""

import csv
import io
import logging
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.orm import Session

from milkbook.core.errors import ConflictError, NotFoundError
from milkbook.repositories.account_repository import AccountRepository
from milkbook.repositories.customer_repository import CustomerRepository
from milkbook.repositories.delivery_repository import DeliveryRepository
from milkbook.schemas.account import AccountResponse
from milkbook.schemas.customer import CustomerResponse
from milkbook.schemas.data_export import (
    ExportSnapshot,
    ImportCustomer,
    ImportPayload,
    ImportResult,
)
from milkbook.schemas.delivery import DeliveryResponse, DeliveryUpsert

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "delivery_date",
    "customer_name",
    "quantity",
    "status",
    "rate_per_litre",
    "month_year",
    "customer_contact",
]

# Failures that reject a single imported entity without aborting the import.
_ENTITY_ERRORS = (ValidationError, ConflictError, NotFoundError)


def _fmt(value: object) -> str:
    if value is None:
        return ""
    return str(value)


class DataExportService:
    """Exports an account as JSON or CSV and imports snapshots back."""

    def __init__(self, db: Session):
        self.db = db
        self.account_repo = AccountRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.delivery_repo = DeliveryRepository(db)

    def export_json(self, account_id: UUID) -> ExportSnapshot:
        account = self.account_repo.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account not found")

        customers = self.customer_repo.get_all(account_id)
        deliveries = [
            DeliveryResponse.model_validate(delivery).model_copy(update={"customer_name": name})
            for delivery, name, _contact in self.delivery_repo.get_all_with_customer(account_id)
        ]
        return ExportSnapshot(
            account=AccountResponse.model_validate(account),
            customers=[CustomerResponse.model_validate(c) for c in customers],
            deliveries=deliveries,
            exported_at=datetime.now(UTC),
        )

    def export_csv(self, account_id: UUID) -> tuple[str, str]:
        """Render every delivery of the account as CSV, newest first.

        Returns:
            The CSV content and the attachment filename.
        """
        account = self.account_repo.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account not found")

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_FIELDS)
        rows = self.delivery_repo.get_all_with_customer(account_id)
        for delivery, name, contact in rows:
            writer.writerow(
                [
                    delivery.delivery_date.isoformat(),
                    name or "",
                    _fmt(delivery.quantity),
                    delivery.status,
                    _fmt(delivery.rate_per_litre),
                    delivery.month_year,
                    contact or "",
                ]
            )

        filename = f"milk-data-{account.username}-{date.today().isoformat()}.csv"
        logger.info("Exported %d deliveries of account %s as CSV", len(rows), account_id)
        return output.getvalue(), filename

    def import_snapshot(self, account_id: UUID, payload: ImportPayload) -> ImportResult:
        """Reconcile an exported snapshot into the account.

        Customers are matched by name and deliveries by date and customer.
        Each entity is validated and committed on its own; a failing entity
        is counted and skipped while the rest of the import goes on.
        """
        result = ImportResult()
        # Exported customer id -> id of the reconciled customer in this account.
        id_map: dict[UUID, UUID] = {}

        for index, raw in enumerate(payload.customers):
            try:
                entry = ImportCustomer.model_validate(raw)
                customer, created = self.customer_repo.upsert_by_name(entry, account_id)
            except _ENTITY_ERRORS as exc:
                self.db.rollback()
                result.errors += 1
                logger.warning("Skipped customer #%d of import: %s", index, exc)
                continue
            if entry.id is not None:
                id_map[entry.id] = customer.id  # type: ignore[assignment]
            if created:
                result.imported += 1
            else:
                result.updated += 1

        for index, raw in enumerate(payload.deliveries):
            try:
                delivery_data = self._resolve_delivery(account_id, raw, id_map)
                _delivery, created = self.delivery_repo.upsert(account_id, delivery_data)
            except _ENTITY_ERRORS as exc:
                self.db.rollback()
                result.errors += 1
                logger.warning("Skipped delivery #%d of import: %s", index, exc)
                continue
            if created:
                result.imported += 1
            else:
                result.updated += 1

        logger.info(
            "Imported into account %s: %d created, %d updated, %d failed",
            account_id,
            result.imported,
            result.updated,
            result.errors,
        )
        return result

    def _resolve_delivery(
        self, account_id: UUID, raw: Any, id_map: dict[UUID, UUID]
    ) -> DeliveryUpsert:
        """Validate an imported delivery and point it at a customer of this account."""
        data = DeliveryUpsert.model_validate(raw)
        if data.customer_id is None:
            return data
        if data.customer_id in id_map:
            return data.model_copy(update={"customer_id": id_map[data.customer_id]})
        if not self.customer_repo.get_by_id(data.customer_id, account_id):
            raise NotFoundError(f"Unknown customer reference {data.customer_id}")
        return data
