"""Admin dashboard API endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.auth.dependencies import require_staff
from cvm_capital.db import get_db
from cvm_capital.models import (
    AccountingPeriod,
    ApprovalRequest,
    EntryKind,
    Investor,
    LedgerEntry,
    Partner,
    RequestStatus,
    User,
)
from cvm_capital.schemas.dashboard import DashboardSummaryResponse
from cvm_capital.schemas.period import PeriodResponse
from cvm_capital.services import balance, periods, profit_config

router = APIRouter(prefix="/dashboard")


@router.get("", response_model=DashboardSummaryResponse)
async def get_dashboard_summary(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Capital, participants, pending work and the state of the current period."""
    capital = await balance.compute_total_invested_capital(db)

    investors = await db.scalar(select(func.count()).select_from(Investor))
    partners = await db.scalar(select(func.count()).select_from(Partner))
    active_partners = await db.scalar(
        select(func.count()).select_from(Partner).where(Partner.is_active.is_(True))
    )
    pending_requests = await db.scalar(
        select(func.count())
        .select_from(ApprovalRequest)
        .where(ApprovalRequest.status == RequestStatus.PENDING)
    )
    total_profit = await db.scalar(
        select(func.coalesce(func.sum(LedgerEntry.amount), Decimal("0")))
        .where(LedgerEntry.kind == EntryKind.PROFIT)
    )

    current = await periods.get_current_period(db)
    last_processed = await db.scalar(
        select(AccountingPeriod)
        .where(AccountingPeriod.processed.is_(True))
        .order_by(AccountingPeriod.sequence_number.desc())
        .limit(1)
    )
    config = await profit_config.get_current_config(db)

    return DashboardSummaryResponse(
        total_capital=capital.total,
        raw_total_capital=capital.raw_total,
        investors=investors or 0,
        partners=partners or 0,
        active_partners=active_partners or 0,
        pending_requests=pending_requests or 0,
        total_profit_distributed=Decimal(total_profit or 0),
        current_period=PeriodResponse.model_validate(current) if current else None,
        last_processed_period=(
            PeriodResponse.model_validate(last_processed) if last_processed else None
        ),
        next_sequence_number=await periods.next_available_sequence_number(db),
        proportional_percentage=config.proportional_percentage if config else None,
        exclusive_percentage=config.exclusive_percentage if config else None,
    )
