from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from milkbook.core.auth import get_current_account
from milkbook.core.database import get_db
from milkbook.core.errors import NotFoundError
from milkbook.schemas.bill import BillReport
from milkbook.schemas.common import ApiResponse
from milkbook.services.bill_service import BillService
from milkbook.services.pdf_service import PdfService

router = APIRouter()


def _build_report(
    db: Session,
    account_id: UUID,
    period_start: date,
    period_end: date,
    customer_id: str | None,
) -> BillReport:
    try:
        return BillService(db).build_bill(account_id, period_start, period_end, customer_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.get(
    "",
    response_model=ApiResponse[BillReport],
    summary="Get bill",
    responses={
        400: {"description": "period_start is after period_end"},
        401: {"description": "Unauthorized"},
        404: {"description": "Account not found"},
    },
)
async def get_bill(
    period_start: date = Query(...),
    period_end: date = Query(...),
    customer_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> ApiResponse[BillReport]:
    """Bill of one customer, or of every delivery when customer_id is ``all``."""
    report = _build_report(db, account_id, period_start, period_end, customer_id)
    return ApiResponse(data=report)


@router.get(
    "/pdf",
    summary="Download bill PDF",
    responses={
        200: {"content": {"application/pdf": {}}},
        400: {"description": "period_start is after period_end"},
        401: {"description": "Unauthorized"},
        404: {"description": "Account not found"},
    },
)
async def download_bill_pdf(
    period_start: date = Query(...),
    period_end: date = Query(...),
    customer_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    account_id: UUID = Depends(get_current_account),
) -> Response:
    report = _build_report(db, account_id, period_start, period_end, customer_id)
    pdf_bytes = PdfService().generate_bill_pdf(report)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": (
                f'attachment; filename="bill_{period_start.isoformat()}_{period_end.isoformat()}.pdf"'
            )
        },
    )
