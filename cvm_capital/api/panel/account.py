"""Participant account API endpoints: balance, history and monthly earnings."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.auth.dependencies import ParticipantIdentity, require_participant
from cvm_capital.db import get_db
from cvm_capital.models import (
    AccountingPeriod,
    ApprovalRequest,
    EntryKind,
    LedgerEntry,
    Notification,
    RequestStatus,
)
from cvm_capital.schemas.dashboard import AccountSummaryResponse, PeriodProfitResponse
from cvm_capital.schemas.ledger import BalanceResponse, LedgerEntryResponse
from cvm_capital.services import balance, ledger

router = APIRouter(prefix="/account")


async def _profit_by_period(
    db: AsyncSession,
    identity: ParticipantIdentity,
    limit: Optional[int] = None,
) -> List[PeriodProfitResponse]:
    query = (
        select(
            AccountingPeriod.id,
            AccountingPeriod.sequence_number,
            AccountingPeriod.label,
            AccountingPeriod.start_date,
            AccountingPeriod.end_date,
            func.sum(LedgerEntry.amount).label("amount"),
        )
        .join(LedgerEntry, LedgerEntry.period_id == AccountingPeriod.id)
        .where(
            LedgerEntry.owner_id == identity.id,
            LedgerEntry.owner_kind == identity.kind,
            LedgerEntry.kind == EntryKind.PROFIT,
        )
        .group_by(
            AccountingPeriod.id,
            AccountingPeriod.sequence_number,
            AccountingPeriod.label,
            AccountingPeriod.start_date,
            AccountingPeriod.end_date,
        )
        .order_by(AccountingPeriod.sequence_number.desc())
    )
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    return [
        PeriodProfitResponse(
            period_id=row.id,
            sequence_number=row.sequence_number,
            label=row.label,
            start_date=row.start_date,
            end_date=row.end_date,
            amount=row.amount,
        )
        for row in result.all()
    ]


@router.get("", response_model=AccountSummaryResponse)
async def get_account_summary(
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
):
    """Balance breakdown, open requests and the latest credited profit."""
    breakdown = await balance.get_breakdown(db, identity.id, identity.kind)

    pending_requests = await db.scalar(
        select(func.count())
        .select_from(ApprovalRequest)
        .where(
            ApprovalRequest.owner_id == identity.id,
            ApprovalRequest.owner_kind == identity.kind,
            ApprovalRequest.status == RequestStatus.PENDING,
        )
    )
    unread = await db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(
            Notification.owner_id == identity.id,
            Notification.owner_kind == identity.kind,
            Notification.is_read.is_(False),
        )
    )
    last_profit = await _profit_by_period(db, identity, limit=1)

    return AccountSummaryResponse(
        kind=identity.kind.value,
        id=identity.id,
        name=identity.account.display_name,
        balance=BalanceResponse(
            deposits=breakdown.deposits,
            withdrawals=breakdown.withdrawals,
            profit=breakdown.profit,
            balance=breakdown.balance,
        ),
        pending_requests=pending_requests or 0,
        unread_notifications=unread or 0,
        last_profit=last_profit[0] if last_profit else None,
    )


@router.get("/entries", response_model=list[LedgerEntryResponse])
async def list_my_entries(
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
    kind: Optional[EntryKind] = Query(None),
):
    """Own ledger history, newest first."""
    entries = await ledger.list_entries(db, identity.id, identity.kind, kind=kind)
    return [LedgerEntryResponse.from_entry(e) for e in entries]


@router.get("/profits", response_model=list[PeriodProfitResponse])
async def list_my_profits(
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
):
    """Profit credited per processed period."""
    return await _profit_by_period(db, identity)
