import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from milkbook.core.auth import create_access_token, hash_password, verify_password
from milkbook.core.errors import AuthenticationError, ConflictError
from milkbook.models.account import Account
from milkbook.repositories.account_repository import AccountRepository
from milkbook.schemas.account import AccountLogin, AccountRegister

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = AccountRepository(db)

    def register(self, data: AccountRegister) -> tuple[Account, str]:
        """Create an account and issue its first bearer token."""
        if self.repo.username_exists(data.username):
            raise ConflictError("Username already exists")
        try:
            account = self.repo.create(data, hash_password(data.password))
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Username already exists") from exc
        logger.info("Registered account %s", account.username)
        return account, create_access_token(account.id, str(account.username))  # type: ignore[arg-type]

    def login(self, data: AccountLogin) -> tuple[Account, str]:
        account = self.repo.get_by_username(data.username)
        if not account or not verify_password(data.password, account.password_hash):  # type: ignore[arg-type]
            raise AuthenticationError("Invalid username or password")
        return account, create_access_token(account.id, str(account.username))  # type: ignore[arg-type]

    def change_password(self, account: Account, current_password: str, new_password: str) -> None:
        """Rotate the credential of an account."""
        if not verify_password(current_password, account.password_hash):  # type: ignore[arg-type]
            raise AuthenticationError("Current password is incorrect")
        self.repo.update_password(account, hash_password(new_password))
        logger.info("Rotated password for account %s", account.username)
