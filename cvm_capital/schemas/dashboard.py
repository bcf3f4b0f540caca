"""Dashboard, account summary and audit log schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from cvm_capital.schemas.ledger import BalanceResponse
from cvm_capital.schemas.period import PeriodResponse


class DashboardSummaryResponse(BaseModel):
    """Administrator dashboard."""

    total_capital: Decimal
    raw_total_capital: Decimal
    investors: int
    partners: int
    active_partners: int
    pending_requests: int
    total_profit_distributed: Decimal
    current_period: Optional[PeriodResponse] = None
    last_processed_period: Optional[PeriodResponse] = None
    next_sequence_number: Optional[int] = None
    proportional_percentage: Optional[Decimal] = None
    exclusive_percentage: Optional[Decimal] = None


class PeriodProfitResponse(BaseModel):
    """Profit credited to one participant for one processed period."""

    period_id: int
    sequence_number: int
    label: str
    start_date: date
    end_date: date
    amount: Decimal


class AccountSummaryResponse(BaseModel):
    """Participant panel summary."""

    kind: str
    id: int
    name: str
    balance: BalanceResponse
    pending_requests: int
    unread_notifications: int
    last_profit: Optional[PeriodProfitResponse] = None


class AuditLogResponse(BaseModel):
    """Audit log entry."""

    id: int
    user_id: int
    username: str
    display_name: str
    action: str
    target_type: Optional[str] = None
    target_id: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Paginated audit log."""

    items: List[AuditLogResponse]
    total: int
    page: int
    per_page: int
    pages: int
