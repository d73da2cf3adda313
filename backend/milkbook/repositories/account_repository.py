from uuid import UUID

from sqlalchemy.orm import Session

from milkbook.models.account import Account
from milkbook.models.customer import Customer
from milkbook.models.delivery import Delivery
from milkbook.schemas.account import AccountRegister


class AccountRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, account_id: UUID) -> Account | None:
        return self.db.query(Account).filter(Account.id == account_id).first()

    def get_by_username(self, username: str) -> Account | None:
        return self.db.query(Account).filter(Account.username == username).first()

    def username_exists(self, username: str) -> bool:
        return self.get_by_username(username) is not None

    def create(self, data: AccountRegister, password_hash: str) -> Account:
        account = Account(
            username=data.username,
            fullname=data.fullname,
            address=data.address,
            password_hash=password_hash,
        )
        self.db.add(account)
        self.db.commit()
        self.db.refresh(account)
        return account

    def update_password(self, account: Account, password_hash: str) -> Account:
        account.password_hash = password_hash  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(account)
        return account

    def delete(self, account_id: UUID) -> bool:
        """Delete an account together with its customers and deliveries."""
        account = self.get_by_id(account_id)
        if not account:
            return False
        self.db.query(Delivery).filter(Delivery.account_id == account_id).delete(
            synchronize_session=False
        )
        self.db.query(Customer).filter(Customer.account_id == account_id).delete(
            synchronize_session=False
        )
        self.db.delete(account)
        self.db.commit()
        return True
