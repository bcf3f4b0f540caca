"""Participant deposit/withdrawal request API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import ParticipantIdentity, require_participant
from cvm_capital.db import get_db
from cvm_capital.schemas.request import RequestCreate, RequestResponse
from cvm_capital.services import approvals
from cvm_capital.services.errors import CapitalError

router = APIRouter(prefix="/requests")


@router.get("", response_model=list[RequestResponse])
async def list_my_requests(
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
):
    requests = await approvals.list_requests(
        db, owner_kind=identity.kind, owner_id=identity.id
    )
    return [RequestResponse.from_request(r) for r in requests]


@router.post("", response_model=RequestResponse, status_code=201)
async def submit_request(
    data: RequestCreate,
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
):
    """
    Ask for a deposit or a withdrawal.

    Only one pending request of each kind is allowed; withdrawals cannot
    exceed the current balance.
    """
    try:
        request = await approvals.submit_request(
            db,
            owner_kind=identity.kind,
            owner_id=identity.id,
            kind=data.kind,
            amount=data.amount,
            note=data.note,
        )
    except CapitalError as e:
        raise_http_error(e)

    await db.commit()
    await db.refresh(request)

    return RequestResponse.from_request(request)


@router.delete("/{request_id}")
async def cancel_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
):
    """Withdraw a request that has not been reviewed yet."""
    try:
        await approvals.cancel_request(db, identity.kind, identity.id, request_id)
    except CapitalError as e:
        raise_http_error(e)

    return {"success": True}
