"""Account snapshot export and import endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from milkbook.core.auth import get_current_account
from milkbook.core.database import get_db
from milkbook.core.errors import NotFoundError
from milkbook.schemas.common import ApiResponse
from milkbook.schemas.data_export import ExportSnapshot, ImportPayload, ImportResult
from milkbook.services.data_export_service import DataExportService

router = APIRouter()


@router.get(
    "/json",
    response_model=ApiResponse[ExportSnapshot],
    summary="Export account as JSON",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Account not found"},
    },
)
async def export_json(
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[ExportSnapshot]:
    try:
        snapshot = DataExportService(db).export_json(account_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    return ApiResponse(data=snapshot)


@router.get(
    "/csv",
    summary="Export deliveries as CSV",
    responses={
        200: {"content": {"text/csv": {}}},
        401: {"description": "Unauthorized"},
        404: {"description": "Account not found"},
    },
)
async def export_csv(
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> Response:
    try:
        content, filename = DataExportService(db).export_csv(account_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/import",
    response_model=ApiResponse[ImportResult],
    summary="Import account snapshot",
    responses={
        401: {"description": "Unauthorized"},
        422: {"description": "Malformed payload"},
    },
)
async def import_snapshot(
    payload: ImportPayload,
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[ImportResult]:
    """Reconcile customers by name and deliveries by date and customer."""
    result = DataExportService(db).import_snapshot(account_id, payload)
    return ApiResponse(
        data=result,
        message=(
            f"Import finished: {result.imported} created, {result.updated} updated, "
            f"{result.errors} failed"
        ),
    )
