"""Ledger entry and balance schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from cvm_capital.models import EntryKind


class LedgerEntryResponse(BaseModel):
    """A single ledger entry."""

    id: int
    owner_id: int
    owner_kind: str
    owner_name: Optional[str] = None
    kind: str
    amount: Decimal
    description: Optional[str] = None
    occurred_at: datetime
    period_id: Optional[int] = None
    request_id: Optional[int] = None

    @classmethod
    def from_entry(cls, entry, owner_name: Optional[str] = None) -> "LedgerEntryResponse":
        return cls(
            id=entry.id,
            owner_id=entry.owner_id,
            owner_kind=entry.owner_kind.value,
            owner_name=owner_name,
            kind=entry.kind.value,
            amount=entry.amount,
            description=entry.description,
            occurred_at=entry.occurred_at,
            period_id=entry.period_id,
            request_id=entry.request_id,
        )


class LedgerListResponse(BaseModel):
    items: List[LedgerEntryResponse]
    total: int
    page: int
    per_page: int
    pages: int


class LedgerEntryUpdate(BaseModel):
    """Administrator correction of an entry."""

    amount: Optional[Decimal] = Field(None, gt=0)
    kind: Optional[EntryKind] = None
    description: Optional[str] = Field(None, max_length=500)


class BalanceResponse(BaseModel):
    """Balance with its breakdown by entry kind."""

    deposits: Decimal
    withdrawals: Decimal
    profit: Decimal
    balance: Decimal


class CapitalResponse(BaseModel):
    """Total invested capital. ``total_capital`` is never negative."""

    total_capital: Decimal
    raw_total_capital: Decimal
    participants: int
