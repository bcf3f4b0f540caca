"""Pydantic schemas for request/response validation."""

from cvm_capital.schemas.auth import LoginRequest, LoginResponse
from cvm_capital.schemas.dashboard import (
    AccountSummaryResponse,
    AuditLogListResponse,
    AuditLogResponse,
    DashboardSummaryResponse,
    PeriodProfitResponse,
)
from cvm_capital.schemas.distribution import (
    AllocationResponse,
    DistributionPreviewResponse,
    DistributionRequest,
    DistributionResultResponse,
    SplitOverride,
)
from cvm_capital.schemas.ledger import (
    BalanceResponse,
    CapitalResponse,
    LedgerEntryResponse,
    LedgerEntryUpdate,
    LedgerListResponse,
)
from cvm_capital.schemas.notification import NotificationListResponse, NotificationResponse
from cvm_capital.schemas.participant import (
    ParticipantDeleteResponse,
    ParticipantResponse,
    PartnerUpdate,
)
from cvm_capital.schemas.period import (
    NextSequenceResponse,
    PeriodCreate,
    PeriodDeleteResponse,
    PeriodListResponse,
    PeriodResponse,
    PeriodUpdate,
)
from cvm_capital.schemas.profit_config import (
    ProfitConfigHistoryResponse,
    ProfitConfigResponse,
    ProfitConfigSave,
)
from cvm_capital.schemas.request import RequestCreate, RequestReject, RequestResponse

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    # Periods
    "PeriodCreate",
    "PeriodUpdate",
    "PeriodResponse",
    "PeriodListResponse",
    "PeriodDeleteResponse",
    "NextSequenceResponse",
    # Distribution
    "SplitOverride",
    "DistributionRequest",
    "AllocationResponse",
    "DistributionPreviewResponse",
    "DistributionResultResponse",
    # Profit configuration
    "ProfitConfigSave",
    "ProfitConfigResponse",
    "ProfitConfigHistoryResponse",
    # Ledger
    "LedgerEntryResponse",
    "LedgerEntryUpdate",
    "LedgerListResponse",
    "BalanceResponse",
    "CapitalResponse",
    # Requests
    "RequestCreate",
    "RequestReject",
    "RequestResponse",
    # Participants
    "ParticipantResponse",
    "PartnerUpdate",
    "ParticipantDeleteResponse",
    # Notifications
    "NotificationResponse",
    "NotificationListResponse",
    # Dashboard
    "DashboardSummaryResponse",
    "AccountSummaryResponse",
    "PeriodProfitResponse",
    "AuditLogResponse",
    "AuditLogListResponse",
]
