from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from milkbook.core.auth import get_current_account
from milkbook.core.database import get_db
from milkbook.core.errors import ConflictError, NotFoundError
from milkbook.repositories.delivery_repository import DeliveryRepository
from milkbook.schemas.common import ApiResponse
from milkbook.schemas.delivery import MONTH_YEAR_PATTERN, DeliveryResponse, DeliveryUpsert
from milkbook.services.delivery_service import DeliveryService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[DeliveryResponse]],
    summary="List deliveries",
    responses={401: {"description": "Unauthorized"}},
)
async def list_deliveries(
    month_year: str | None = Query(default=None, pattern=MONTH_YEAR_PATTERN),
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[list[DeliveryResponse]]:
    """List deliveries of the account, newest first, optionally for one period."""
    rows = DeliveryRepository(db).get_all_with_customer(account_id, month_year)
    return ApiResponse(
        data=[
            DeliveryResponse.model_validate(delivery).model_copy(update={"customer_name": name})
            for delivery, name, _contact in rows
        ]
    )


@router.post(
    "",
    response_model=ApiResponse[DeliveryResponse],
    status_code=201,
    summary="Create or update delivery",
    responses={
        200: {"description": "Existing delivery updated"},
        401: {"description": "Unauthorized"},
        404: {"description": "Customer not found"},
        409: {"description": "Conflicting concurrent write"},
        422: {"description": "Validation error"},
    },
)
async def upsert_delivery(
    data: DeliveryUpsert,
    response: Response,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[DeliveryResponse]:
    """Save the delivery of a date and customer, overwriting any existing one."""
    try:
        delivery, created = DeliveryService(db).upsert(account_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    if not created:
        response.status_code = 200
    return ApiResponse(
        data=DeliveryResponse.model_validate(delivery),
        message="Delivery created successfully" if created else "Delivery updated successfully",
    )


@router.delete(
    "/{delivery_id}",
    response_model=ApiResponse[None],
    summary="Delete delivery",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Delivery not found"},
    },
)
async def delete_delivery(
    delivery_id: UUID,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[None]:
    if not DeliveryRepository(db).delete(delivery_id, account_id):
        raise HTTPException(status_code=404, detail="Delivery not found")
    return ApiResponse(message="Delivery deleted successfully")
