"""Admin ledger API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import require_admin, require_staff
from cvm_capital.db import get_db
from cvm_capital.models import AuditAction, EntryKind, LedgerEntry, ParticipantKind, User
from cvm_capital.schemas.ledger import LedgerEntryResponse, LedgerEntryUpdate, LedgerListResponse
from cvm_capital.services import directory, ledger
from cvm_capital.services.errors import CapitalError
from cvm_capital.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/ledger")


@router.get("", response_model=LedgerListResponse)
async def list_entries(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
    owner_kind: Optional[ParticipantKind] = Query(None),
    owner_id: Optional[int] = Query(None),
    kind: Optional[EntryKind] = Query(None),
    period_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
):
    """All ledger entries with filters, newest first."""
    query = select(LedgerEntry)

    if owner_kind:
        query = query.where(LedgerEntry.owner_kind == owner_kind)

    if owner_id:
        query = query.where(LedgerEntry.owner_id == owner_id)

    if kind:
        query = query.where(LedgerEntry.kind == kind)

    if period_id:
        query = query.where(LedgerEntry.period_id == period_id)

    count_query = select(func.count()).select_from(query.subquery())
    total = await db.scalar(count_query)

    query = query.order_by(LedgerEntry.occurred_at.desc(), LedgerEntry.id.desc())
    query = query.offset((page - 1) * per_page).limit(per_page)

    result = await db.execute(query)
    entries = result.scalars().all()
    names = await directory.display_names(db)

    return LedgerListResponse(
        items=[
            LedgerEntryResponse.from_entry(
                entry, names.get((entry.owner_kind, entry.owner_id))
            )
            for entry in entries
        ],
        total=total or 0,
        page=page,
        per_page=per_page,
        pages=(total + per_page - 1) // per_page if total else 0,
    )


@router.patch("/{entry_id}", response_model=LedgerEntryResponse)
async def update_entry(
    request: Request,
    entry_id: int,
    data: LedgerEntryUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Correct an entry. Balances follow automatically."""
    try:
        before = await ledger.get_entry(db, entry_id)
        previous = {"amount": str(before.amount), "kind": before.kind.value}
        entry = await ledger.update_entry(
            db,
            entry_id,
            amount=data.amount,
            kind=data.kind,
            description=data.description,
        )
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_ENTRY,
        target_type="ledger_entry",
        target_id=entry.id,
        action_metadata={
            "before": previous,
            "after": {"amount": str(entry.amount), "kind": entry.kind.value},
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(entry)

    return LedgerEntryResponse.from_entry(entry)


@router.delete("/{entry_id}")
async def delete_entry(
    request: Request,
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        entry = await ledger.get_entry(db, entry_id)
        metadata = {
            "owner_kind": entry.owner_kind.value,
            "owner_id": entry.owner_id,
            "kind": entry.kind.value,
            "amount": str(entry.amount),
        }
        await ledger.delete_entry(db, entry_id)
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.DELETE_ENTRY,
        target_type="ledger_entry",
        target_id=entry_id,
        action_metadata=metadata,
        ip_address=get_client_ip(request),
    )
    await db.commit()

    return {"success": True}
