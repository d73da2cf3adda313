import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from milkbook.core.config import settings
from milkbook.core.database import init_db
from milkbook.routers import accounts, auth, bills, customers, deliveries, exports, summary
from milkbook.schemas.common import ApiResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "Auth", "description": "Register accounts and issue bearer tokens."},
    {"name": "Accounts", "description": "Manage the authenticated account."},
    {"name": "Customers", "description": "Create, read, update, and delete customers."},
    {"name": "Deliveries", "description": "Record daily deliveries and absences."},
    {"name": "Summary", "description": "Monthly summaries, period rates, and analytics."},
    {"name": "Bills", "description": "Build bills for a date range as JSON or PDF."},
    {"name": "Export", "description": "Export account data and import snapshots."},
]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    init_db()
    logger.info("%s %s started", settings.APP_NAME, settings.version)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Milk delivery tracking API. "
        "Manage customers and daily deliveries, compute monthly summaries, "
        "build bills, and export or import account data."
    ),
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


def _envelope(status_code: int, error: str, data: object = None) -> JSONResponse:
    body = ApiResponse[object](success=False, data=data, error=error)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = _envelope(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _envelope(422, "Validation error", data=jsonable_encoder(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(500, "Internal server error")


app.include_router(auth.router, prefix="/v1/auth", tags=["Auth"])
app.include_router(accounts.router, prefix="/v1/accounts", tags=["Accounts"])
app.include_router(customers.router, prefix="/v1/customers", tags=["Customers"])
app.include_router(deliveries.router, prefix="/v1/deliveries", tags=["Deliveries"])
app.include_router(summary.router, prefix="/v1", tags=["Summary"])
app.include_router(bills.router, prefix="/v1/bill", tags=["Bills"])
app.include_router(exports.router, prefix="/v1/export", tags=["Export"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }


@app.get("/health", response_model=ApiResponse[None])
async def health() -> ApiResponse[None]:
    return ApiResponse(message="ok")
