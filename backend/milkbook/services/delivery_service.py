"""Delivery upsert protocol."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from milkbook.core.errors import ConflictError, NotFoundError
from milkbook.models.delivery import Delivery
from milkbook.repositories.customer_repository import CustomerRepository
from milkbook.repositories.delivery_repository import DeliveryRepository
from milkbook.schemas.delivery import DeliveryUpsert

logger = logging.getLogger(__name__)


class DeliveryService:
    """Creates or overwrites deliveries keyed by account, date and customer-or-none."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DeliveryRepository(db)
        self.customer_repo = CustomerRepository(db)

    def upsert(self, account_id: UUID, data: DeliveryUpsert) -> tuple[Delivery, bool]:
        """Save a delivery, overwriting the one with the same key if present.

        Raises:
            NotFoundError: The customer does not belong to the account.
            ConflictError: A concurrent write for the same key won.

        Returns:
            The saved delivery and whether it was created.
        """
        if data.customer_id is not None and not self.customer_repo.get_by_id(
            data.customer_id, account_id
        ):
            raise NotFoundError(f"Customer {data.customer_id} not found")

        try:
            delivery, created = self.repo.upsert(account_id, data)
        except ConflictError:
            logger.warning(
                "Conflicting delivery write for account %s on %s (customer %s)",
                account_id,
                data.delivery_date,
                data.customer_id,
            )
            raise

        logger.info(
            "%s delivery %s for account %s on %s",
            "Created" if created else "Updated",
            delivery.id,
            account_id,
            data.delivery_date,
        )
        return delivery, created
