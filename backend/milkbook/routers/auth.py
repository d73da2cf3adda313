from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from milkbook.core.database import get_db
from milkbook.core.errors import AuthenticationError, ConflictError
from milkbook.schemas.account import AccountLogin, AccountRegister, AccountResponse, AuthResponse
from milkbook.schemas.common import ApiResponse
from milkbook.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=201,
    summary="Register account",
    responses={
        409: {"description": "Username already exists"},
        422: {"description": "Validation error"},
    },
)
async def register(
    data: AccountRegister,
    db: Session = Depends(get_db),
) -> ApiResponse[AuthResponse]:
    """Create an account and return it with a bearer token."""
    try:
        account, token = AuthService(db).register(data)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    return ApiResponse(
        data=AuthResponse(account=AccountResponse.model_validate(account), token=token),
        message="Account created successfully",
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    summary="Log in",
    responses={401: {"description": "Invalid username or password"}},
)
async def login(
    data: AccountLogin,
    db: Session = Depends(get_db),
) -> ApiResponse[AuthResponse]:
    try:
        account, token = AuthService(db).login(data)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e)) from None
    return ApiResponse(
        data=AuthResponse(account=AccountResponse.model_validate(account), token=token),
        message="Login successful",
    )
