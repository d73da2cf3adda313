from milkbook.schemas.account import (
    AccountLogin,
    AccountRegister,
    AccountResponse,
    AuthResponse,
    PasswordChange,
)
from milkbook.schemas.bill import (
    AbsentDay,
    BillData,
    BillIssuer,
    BillLineItem,
    BillReport,
    BillSummary,
)
from milkbook.schemas.common import ApiResponse
from milkbook.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from milkbook.schemas.data_export import (
    ExportSnapshot,
    ImportCustomer,
    ImportPayload,
    ImportResult,
)
from milkbook.schemas.delivery import DeliveryResponse, DeliveryUpsert
from milkbook.schemas.summary import (
    AnalyticsResponse,
    CustomerDeliveryHistory,
    MonthlyRateUpdate,
    MonthlyRateUpdateResult,
    MonthlySummaryResponse,
    MonthlyTrend,
)

__all__ = [
    "AbsentDay",
    "AccountLogin",
    "AccountRegister",
    "AccountResponse",
    "AnalyticsResponse",
    "ApiResponse",
    "AuthResponse",
    "BillData",
    "BillIssuer",
    "BillLineItem",
    "BillReport",
    "BillSummary",
    "CustomerCreate",
    "CustomerDeliveryHistory",
    "CustomerResponse",
    "CustomerUpdate",
    "DeliveryResponse",
    "DeliveryUpsert",
    "ExportSnapshot",
    "ImportCustomer",
    "ImportPayload",
    "ImportResult",
    "MonthlyRateUpdate",
    "MonthlyRateUpdateResult",
    "MonthlySummaryResponse",
    "MonthlyTrend",
    "PasswordChange",
]
