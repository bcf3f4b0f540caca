"""Admin deposit/withdrawal approval API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import require_admin, require_staff
from cvm_capital.db import get_db
from cvm_capital.models import AuditAction, ParticipantKind, RequestStatus, User
from cvm_capital.schemas.request import RequestReject, RequestResponse
from cvm_capital.services import approvals, directory, notifications
from cvm_capital.services.errors import CapitalError
from cvm_capital.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/requests")


@router.get("", response_model=list[RequestResponse])
async def list_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
    status: Optional[RequestStatus] = Query(None),
    owner_kind: Optional[ParticipantKind] = Query(None),
    owner_id: Optional[int] = Query(None),
):
    """Requests, newest first. Filter by ``status=pending`` for the review queue."""
    requests = await approvals.list_requests(
        db, status=status, owner_kind=owner_kind, owner_id=owner_id
    )
    names = await directory.display_names(db)
    return [
        RequestResponse.from_request(r, names.get((r.owner_kind, r.owner_id)))
        for r in requests
    ]


@router.post("/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    request: Request,
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Approve a request and write its deposit or withdrawal entry."""
    try:
        approval, entry, draft = await approvals.approve_request(
            db, request_id, user_id=current_user.id
        )
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.APPROVE_REQUEST,
        target_type="request",
        target_id=approval.id,
        action_metadata={
            "kind": approval.kind.value,
            "amount": str(approval.amount),
            "entry_id": entry.id,
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()
    response = RequestResponse.from_request(approval)
    await notifications.dispatch(db, [draft])

    return response


@router.post("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request: Request,
    request_id: int,
    data: RequestReject,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Reject a request with a reason. No ledger entry is written."""
    try:
        rejection, draft = await approvals.reject_request(
            db, request_id, data.reason, user_id=current_user.id
        )
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REJECT_REQUEST,
        target_type="request",
        target_id=rejection.id,
        action_metadata={
            "kind": rejection.kind.value,
            "amount": str(rejection.amount),
            "reason": rejection.rejection_reason,
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()
    response = RequestResponse.from_request(rejection)
    await notifications.dispatch(db, [draft])

    return response
