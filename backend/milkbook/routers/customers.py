from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from milkbook.core.auth import get_current_account
from milkbook.core.database import get_db
from milkbook.core.errors import ConflictError, NotFoundError
from milkbook.repositories.customer_repository import CustomerRepository
from milkbook.schemas.common import ApiResponse
from milkbook.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from milkbook.schemas.delivery import MONTH_YEAR_PATTERN
from milkbook.schemas.summary import CustomerDeliveryHistory
from milkbook.services.summary_service import SummaryService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[CustomerResponse]],
    summary="List customers",
    responses={401: {"description": "Unauthorized"}},
)
async def list_customers(
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[list[CustomerResponse]]:
    """List the customers of the account, ordered by name."""
    customers = CustomerRepository(db).get_all(account_id)
    return ApiResponse(data=[CustomerResponse.model_validate(c) for c in customers])


@router.post(
    "",
    response_model=ApiResponse[CustomerResponse],
    status_code=201,
    summary="Create customer",
    responses={
        401: {"description": "Unauthorized"},
        409: {"description": "Customer with this name already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[CustomerResponse]:
    repo = CustomerRepository(db)
    if repo.name_exists(data.name, account_id):
        raise HTTPException(status_code=409, detail="Customer with this name already exists")
    try:
        customer = repo.create(data, account_id)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    return ApiResponse(
        data=CustomerResponse.model_validate(customer),
        message="Customer created successfully",
    )


@router.get(
    "/{customer_id}",
    response_model=ApiResponse[CustomerResponse],
    summary="Get customer",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Customer not found"},
    },
)
async def get_customer(
    customer_id: UUID,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[CustomerResponse]:
    customer = CustomerRepository(db).get_by_id(customer_id, account_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return ApiResponse(data=CustomerResponse.model_validate(customer))


@router.put(
    "/{customer_id}",
    response_model=ApiResponse[CustomerResponse],
    summary="Update customer",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Customer not found"},
        409: {"description": "Customer with this name already exists"},
        422: {"description": "Validation error"},
    },
)
async def update_customer(
    customer_id: UUID,
    data: CustomerUpdate,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[CustomerResponse]:
    repo = CustomerRepository(db)
    try:
        customer = repo.update(customer_id, data, account_id)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return ApiResponse(
        data=CustomerResponse.model_validate(customer),
        message="Customer updated successfully",
    )


@router.delete(
    "/{customer_id}",
    response_model=ApiResponse[None],
    summary="Delete customer",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Customer not found"},
        409: {"description": "Deliveries could not be detached"},
    },
)
async def delete_customer(
    customer_id: UUID,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[None]:
    """Delete a customer. Its deliveries are kept without a customer."""
    try:
        deleted = CustomerRepository(db).delete(customer_id, account_id)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    if not deleted:
        raise HTTPException(status_code=404, detail="Customer not found")
    return ApiResponse(message="Customer deleted successfully")


@router.get(
    "/{customer_id}/deliveries",
    response_model=ApiResponse[CustomerDeliveryHistory],
    summary="Get customer delivery history",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Customer not found"},
    },
)
async def get_customer_deliveries(
    customer_id: UUID,
    month_year: str | None = Query(default=None, pattern=MONTH_YEAR_PATTERN),
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[CustomerDeliveryHistory]:
    """Delivered and absent entries of one customer, newest first."""
    try:
        history = SummaryService(db).get_customer_history(account_id, customer_id, month_year)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    return ApiResponse(data=history)
