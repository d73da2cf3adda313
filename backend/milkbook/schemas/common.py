"""Uniform response envelope shared by every JSON endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT | None = None
    message: str | None = None
    error: str | None = None
