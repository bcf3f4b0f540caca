"""Admin investor and partner directory API endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import require_admin, require_staff
from cvm_capital.db import get_db
from cvm_capital.models import AuditAction, ParticipantKind, User
from cvm_capital.schemas.ledger import BalanceResponse, CapitalResponse
from cvm_capital.schemas.participant import (
    ParticipantDeleteResponse,
    ParticipantResponse,
    PartnerUpdate,
)
from cvm_capital.services import balance, directory
from cvm_capital.services.errors import CapitalError
from cvm_capital.utils.audit import get_client_ip, log_action
from cvm_capital.utils.money import ZERO

router = APIRouter(prefix="/participants")


@router.get("/capital", response_model=CapitalResponse)
async def get_total_capital(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
    include_inactive_partners: bool = Query(False),
):
    """Total invested capital across investors and active partners."""
    summary = await balance.compute_total_invested_capital(
        db, include_inactive_partners=include_inactive_partners
    )
    return CapitalResponse(
        total_capital=summary.total,
        raw_total_capital=summary.raw_total,
        participants=len(summary.balances),
    )


@router.get("/{kind}", response_model=list[ParticipantResponse])
async def list_participants(
    kind: ParticipantKind,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
    active_only: bool = Query(False),
):
    """Investors or partners with their current balances."""
    participants = await directory.list_participants(db, kind, active_only=active_only)
    balances = await balance.compute_balances(db, owner_kind=kind)
    return [
        ParticipantResponse.from_participant(p, balances.get((kind, p.id), ZERO))
        for p in participants
    ]


@router.get("/{kind}/{participant_id}", response_model=ParticipantResponse)
async def get_participant(
    kind: ParticipantKind,
    participant_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    try:
        participant = await directory.get_participant(db, kind, participant_id)
    except CapitalError as e:
        raise_http_error(e)
    current = await balance.compute_balance(db, participant_id, kind)
    return ParticipantResponse.from_participant(participant, current)


@router.get("/{kind}/{participant_id}/balance", response_model=BalanceResponse)
async def get_participant_balance(
    kind: ParticipantKind,
    participant_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    try:
        await directory.get_participant(db, kind, participant_id)
    except CapitalError as e:
        raise_http_error(e)
    breakdown = await balance.get_breakdown(db, participant_id, kind)
    return BalanceResponse(
        deposits=breakdown.deposits,
        withdrawals=breakdown.withdrawals,
        profit=breakdown.profit,
        balance=breakdown.balance,
    )


@router.patch("/partner/{partner_id}", response_model=ParticipantResponse)
async def update_partner(
    request: Request,
    partner_id: int,
    data: PartnerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Activate or deactivate a partner.

    Inactive partners keep their history but are left out of future
    distributions.
    """
    try:
        partner = await directory.set_partner_active(db, partner_id, data.is_active)
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_PARTNER,
        target_type="partner",
        target_id=partner_id,
        action_metadata={"is_active": data.is_active},
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(partner)

    current = await balance.compute_balance(db, partner_id, ParticipantKind.PARTNER)
    return ParticipantResponse.from_participant(partner, current)


@router.delete("/{kind}/{participant_id}", response_model=ParticipantDeleteResponse)
async def delete_participant(
    request: Request,
    kind: ParticipantKind,
    participant_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Delete an investor or partner with all of their entries."""
    try:
        participant = await directory.get_participant(db, kind, participant_id)
        await log_action(
            db=db,
            user_id=current_user.id,
            action=AuditAction.DELETE_PARTICIPANT,
            target_type=kind.value,
            target_id=participant_id,
            action_metadata={"name": participant.display_name},
            ip_address=get_client_ip(request),
        )
        removed = await directory.delete_participant(db, kind, participant_id)
    except CapitalError as e:
        raise_http_error(e)

    return ParticipantDeleteResponse(success=True, deleted_entries=removed)
