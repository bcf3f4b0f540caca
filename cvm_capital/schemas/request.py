"""Deposit/withdrawal request schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from cvm_capital.models import RequestKind


class RequestCreate(BaseModel):
    kind: RequestKind
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    note: Optional[str] = Field(None, max_length=500)


class RequestReject(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class RequestResponse(BaseModel):
    id: int
    owner_id: int
    owner_kind: str
    owner_name: Optional[str] = None
    kind: str
    amount: Decimal
    status: str
    note: Optional[str] = None
    rejection_reason: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_request(cls, request, owner_name: Optional[str] = None) -> "RequestResponse":
        return cls(
            id=request.id,
            owner_id=request.owner_id,
            owner_kind=request.owner_kind.value,
            owner_name=owner_name,
            kind=request.kind.value,
            amount=request.amount,
            status=request.status.value,
            note=request.note,
            rejection_reason=request.rejection_reason,
            decided_at=request.decided_at,
            created_at=request.created_at,
        )
