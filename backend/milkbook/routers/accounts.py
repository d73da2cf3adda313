from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from milkbook.core.auth import get_current_account
from milkbook.core.database import get_db
from milkbook.core.errors import AuthenticationError
from milkbook.models.account import Account
from milkbook.repositories.account_repository import AccountRepository
from milkbook.schemas.account import AccountResponse, PasswordChange
from milkbook.schemas.common import ApiResponse
from milkbook.services.auth_service import AuthService

router = APIRouter()


def _get_account(account_id: UUID, db: Session) -> Account:
    account = AccountRepository(db).get_by_id(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.get(
    "/me",
    response_model=ApiResponse[AccountResponse],
    summary="Get current account",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Account not found"},
    },
)
async def get_me(
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[AccountResponse]:
    account = _get_account(account_id, db)
    return ApiResponse(data=AccountResponse.model_validate(account))


@router.put(
    "/me/password",
    response_model=ApiResponse[None],
    summary="Change password",
    responses={
        401: {"description": "Unauthorized or wrong current password"},
        404: {"description": "Account not found"},
    },
)
async def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[None]:
    account = _get_account(account_id, db)
    try:
        AuthService(db).change_password(account, data.current_password, data.new_password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e)) from None
    return ApiResponse(message="Password updated successfully")


@router.delete(
    "/me",
    response_model=ApiResponse[None],
    summary="Delete current account",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Account not found"},
    },
)
async def delete_me(
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[None]:
    """Delete the account together with its customers and deliveries."""
    if not AccountRepository(db).delete(account_id):
        raise HTTPException(status_code=404, detail="Account not found")
    return ApiResponse(message="Account deleted successfully")
