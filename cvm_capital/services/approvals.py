"""
Deposit and withdrawal requests.

A participant asks, an administrator decides. Approval turns the request
into exactly one ledger entry; rejection records a reason and touches
nothing else.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import (
    ApprovalRequest,
    EntryKind,
    LedgerEntry,
    NotificationSeverity,
    ParticipantKind,
    RequestKind,
    RequestStatus,
)
from cvm_capital.services import balance, directory, ledger
from cvm_capital.services.errors import NotFoundError, ValidationError
from cvm_capital.services.notifications import NotificationDraft
from cvm_capital.utils.money import to_money

logger = logging.getLogger(__name__)

ENTRY_KIND_BY_REQUEST = {
    RequestKind.DEPOSIT: EntryKind.DEPOSIT,
    RequestKind.WITHDRAWAL: EntryKind.WITHDRAWAL,
}


async def get_request(db: AsyncSession, request_id: int) -> ApprovalRequest:
    request = await db.get(ApprovalRequest, request_id)
    if request is None:
        raise NotFoundError(f"Request {request_id} not found")
    return request


async def get_pending_request(
    db: AsyncSession,
    owner_kind: ParticipantKind,
    owner_id: int,
    kind: RequestKind,
) -> Optional[ApprovalRequest]:
    result = await db.execute(
        select(ApprovalRequest).where(
            ApprovalRequest.owner_kind == owner_kind,
            ApprovalRequest.owner_id == owner_id,
            ApprovalRequest.kind == kind,
            ApprovalRequest.status == RequestStatus.PENDING,
        )
    )
    return result.scalars().first()


async def list_requests(
    db: AsyncSession,
    status: Optional[RequestStatus] = None,
    owner_kind: Optional[ParticipantKind] = None,
    owner_id: Optional[int] = None,
) -> List[ApprovalRequest]:
    query = select(ApprovalRequest)
    if status is not None:
        query = query.where(ApprovalRequest.status == status)
    if owner_kind is not None:
        query = query.where(ApprovalRequest.owner_kind == owner_kind)
    if owner_id is not None:
        query = query.where(ApprovalRequest.owner_id == owner_id)
    query = query.order_by(ApprovalRequest.created_at.desc(), ApprovalRequest.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def _check_withdrawal(
    db: AsyncSession,
    owner_kind: ParticipantKind,
    owner_id: int,
    amount: Decimal,
) -> None:
    available = await balance.compute_balance(db, owner_id, owner_kind)
    if amount > available:
        raise ValidationError(
            f"Withdrawal of {amount} exceeds the available balance of {available}"
        )


async def submit_request(
    db: AsyncSession,
    owner_kind: ParticipantKind,
    owner_id: int,
    kind: RequestKind,
    amount: Decimal,
    note: Optional[str] = None,
) -> ApprovalRequest:
    """Create a pending request. Flushed, not committed."""
    participant = await directory.get_participant(db, owner_kind, owner_id)
    if not participant.is_active:
        raise ValidationError("Inactive accounts cannot submit requests")

    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    amount = to_money(amount)

    if await get_pending_request(db, owner_kind, owner_id, kind) is not None:
        raise ValidationError(
            f"You already have a pending {kind.value} request; wait for it to be reviewed"
        )

    if kind == RequestKind.WITHDRAWAL:
        await _check_withdrawal(db, owner_kind, owner_id, amount)

    request = ApprovalRequest(
        owner_kind=owner_kind,
        owner_id=owner_id,
        kind=kind,
        amount=amount,
        note=note,
        status=RequestStatus.PENDING,
    )
    db.add(request)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise ValidationError(
            f"You already have a pending {kind.value} request; wait for it to be reviewed"
        ) from e

    logger.info(f"{owner_kind.value} {owner_id} requested {kind.value} of {amount}")
    return request


async def cancel_request(
    db: AsyncSession,
    owner_kind: ParticipantKind,
    owner_id: int,
    request_id: int,
) -> None:
    """Withdraw one's own pending request."""
    request = await get_request(db, request_id)
    if request.owner_kind != owner_kind or request.owner_id != owner_id:
        raise NotFoundError(f"Request {request_id} not found")
    if request.status != RequestStatus.PENDING:
        raise ValidationError("Only pending requests can be cancelled")
    await db.delete(request)
    await db.flush()


def _ensure_pending(request: ApprovalRequest) -> None:
    if request.status != RequestStatus.PENDING:
        raise ValidationError(f"Request {request.id} was already {request.status.value}")


async def approve_request(
    db: AsyncSession,
    request_id: int,
    user_id: Optional[int] = None,
) -> Tuple[ApprovalRequest, LedgerEntry, NotificationDraft]:
    """
    Approve a pending request and write its ledger entry. Flushed, not committed.

    Returns the request, the new entry and the notification to send once
    the caller has committed.
    """
    request = await get_request(db, request_id)
    _ensure_pending(request)

    await directory.get_participant(db, request.owner_kind, request.owner_id)
    if request.kind == RequestKind.WITHDRAWAL:
        await _check_withdrawal(db, request.owner_kind, request.owner_id, request.amount)

    entry = await ledger.append_entry(
        db,
        owner_id=request.owner_id,
        owner_kind=request.owner_kind,
        kind=ENTRY_KIND_BY_REQUEST[request.kind],
        amount=request.amount,
        description=f"Approved {request.kind.value} request #{request.id}",
        request_id=request.id,
    )

    request.status = RequestStatus.APPROVED
    request.decided_at = datetime.now(timezone.utc)
    request.decided_by_user_id = user_id
    await db.flush()

    logger.info(f"Request {request_id} approved: {request.kind.value} {request.amount}")
    draft = NotificationDraft(
        owner_id=request.owner_id,
        owner_kind=request.owner_kind,
        title=f"{request.kind.value.capitalize()} approved",
        message=f"Your {request.kind.value} request of {request.amount} was approved.",
        severity=NotificationSeverity.SUCCESS,
    )
    return request, entry, draft


async def reject_request(
    db: AsyncSession,
    request_id: int,
    reason: str,
    user_id: Optional[int] = None,
) -> Tuple[ApprovalRequest, NotificationDraft]:
    """Reject a pending request with a reason. No ledger entry is written."""
    if not reason or not reason.strip():
        raise ValidationError("A rejection reason is required")

    request = await get_request(db, request_id)
    _ensure_pending(request)

    request.status = RequestStatus.REJECTED
    request.rejection_reason = reason.strip()
    request.decided_at = datetime.now(timezone.utc)
    request.decided_by_user_id = user_id
    await db.flush()

    logger.info(f"Request {request_id} rejected")
    draft = NotificationDraft(
        owner_id=request.owner_id,
        owner_kind=request.owner_kind,
        title=f"{request.kind.value.capitalize()} rejected",
        message=f"Your {request.kind.value} request of {request.amount} was rejected: {request.rejection_reason}",
        severity=NotificationSeverity.WARNING,
    )
    return request, draft
