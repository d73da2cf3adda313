from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from milkbook.core.errors import ConflictError
from milkbook.models.customer import Customer
from milkbook.models.delivery import Delivery
from milkbook.schemas.customer import CustomerCreate, CustomerUpdate

# Columns that may be cleared by an update; the rest are NOT NULL.
_NULLABLE_FIELDS = {"address", "contact"}


class CustomerRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self, account_id: UUID) -> list[Customer]:
        return (
            self.db.query(Customer)
            .filter(Customer.account_id == account_id)
            .order_by(Customer.name.asc())
            .all()
        )

    def get_by_id(self, customer_id: UUID, account_id: UUID) -> Customer | None:
        return (
            self.db.query(Customer)
            .filter(Customer.id == customer_id, Customer.account_id == account_id)
            .first()
        )

    def get_by_name(self, name: str, account_id: UUID) -> Customer | None:
        return (
            self.db.query(Customer)
            .filter(Customer.name == name, Customer.account_id == account_id)
            .first()
        )

    def name_exists(self, name: str, account_id: UUID) -> bool:
        """Check if a customer with the given name already exists in the account."""
        return self.get_by_name(name, account_id) is not None

    def create(self, data: CustomerCreate, account_id: UUID) -> Customer:
        customer = Customer(
            account_id=account_id,
            name=data.name,
            address=data.address,
            contact=data.contact,
            rate_per_litre=data.rate_per_litre,
        )
        self.db.add(customer)
        self._commit("Customer with this name already exists")
        self.db.refresh(customer)
        return customer

    def update(
        self, customer_id: UUID, data: CustomerUpdate, account_id: UUID
    ) -> Customer | None:
        customer = self.get_by_id(customer_id, account_id)
        if not customer:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key not in _NULLABLE_FIELDS:
                continue
            setattr(customer, key, value)
        self._commit("Customer with this name already exists")
        self.db.refresh(customer)
        return customer

    def upsert_by_name(self, data: CustomerCreate, account_id: UUID) -> tuple[Customer, bool]:
        """Create the customer or update the one with the same name.

        Returns:
            The saved customer and whether it was created.
        """
        existing = self.get_by_name(data.name, account_id)
        if existing:
            existing.address = data.address  # type: ignore[assignment]
            existing.contact = data.contact  # type: ignore[assignment]
            existing.rate_per_litre = data.rate_per_litre  # type: ignore[assignment]
            self._commit("Customer with this name already exists")
            self.db.refresh(existing)
            return existing, False
        return self.create(data, account_id), True

    def delete(self, customer_id: UUID, account_id: UUID) -> bool:
        """Delete a customer, detaching its deliveries instead of deleting them."""
        customer = self.get_by_id(customer_id, account_id)
        if not customer:
            return False
        try:
            self.db.query(Delivery).filter(
                Delivery.customer_id == customer_id,
                Delivery.account_id == account_id,
            ).update({Delivery.customer_id: None}, synchronize_session=False)
            self.db.delete(customer)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(
                "Cannot detach deliveries: an entry without customer already exists "
                "on the same date"
            ) from exc
        return True

    def _commit(self, conflict_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(conflict_message) from exc
