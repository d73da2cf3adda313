from datetime import UTC, datetime, timedelta
from uuid import UUID

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from milkbook.core.config import settings
from milkbook.core.database import get_db
from milkbook.repositories.account_repository import AccountRepository


def hash_password(password: str) -> str:
    """bcrypt hash of a plaintext password."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def create_access_token(account_id: UUID, username: str) -> str:
    """Issue a bearer token for an account."""
    payload = {
        "sub": str(account_id),
        "username": username,
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str) -> UUID:
    """Decode and validate a bearer token.

    Returns the account id.
    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Invalid token type")
    return UUID(payload["sub"])


def get_current_account(
    request: Request,
    db: Session = Depends(get_db),
) -> UUID:
    """Extract the account id from the bearer token in the Authorization header.

    The token must belong to an account that still exists.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    token = auth_header[7:]
    if not token:
        raise HTTPException(status_code=401, detail="Bearer token is required")

    try:
        account_id = verify_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired") from None
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired token") from None

    if not AccountRepository(db).get_by_id(account_id):
        raise HTTPException(status_code=401, detail="Account no longer exists")

    return account_id
