from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class AccountRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    fullname: str = Field(..., min_length=2, max_length=100)
    address: str = Field(..., min_length=3, max_length=500)
    password: str = Field(..., min_length=8, max_length=72)


class AccountLogin(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=8, max_length=72)


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=8, max_length=72)
    new_password: str = Field(..., min_length=8, max_length=72)


class AccountResponse(BaseModel):
    id: UUID
    username: str
    fullname: str
    address: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    account: AccountResponse
    token: str
