"""
Ledger store operations.

Entries are appended by deposits/withdrawals (approved requests) and by
distribution commits. Administrators may correct or delete single
entries; nothing else mutates the ledger.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import EntryKind, LedgerEntry, ParticipantKind
from cvm_capital.services.errors import NotFoundError, ValidationError
from cvm_capital.utils.money import to_money

logger = logging.getLogger(__name__)


def _validate_amount(amount: Decimal) -> Decimal:
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    rounded = to_money(amount)
    if rounded <= 0:
        raise ValidationError("Amount must be at least 0.01")
    return rounded


async def append_entry(
    db: AsyncSession,
    owner_id: int,
    owner_kind: ParticipantKind,
    kind: EntryKind,
    amount: Decimal,
    description: Optional[str] = None,
    period_id: Optional[int] = None,
    request_id: Optional[int] = None,
    occurred_at: Optional[datetime] = None,
) -> LedgerEntry:
    """
    Append one entry. ``amount`` must be positive; direction comes from ``kind``.

    The entry is flushed but not committed.
    """
    entry = LedgerEntry(
        owner_id=owner_id,
        owner_kind=owner_kind,
        kind=kind,
        amount=_validate_amount(amount),
        description=description,
        period_id=period_id,
        request_id=request_id,
    )
    if occurred_at is not None:
        entry.occurred_at = occurred_at
    db.add(entry)
    await db.flush()
    return entry


async def get_entry(db: AsyncSession, entry_id: int) -> LedgerEntry:
    entry = await db.get(LedgerEntry, entry_id)
    if entry is None:
        raise NotFoundError(f"Ledger entry {entry_id} not found")
    return entry


async def list_entries(
    db: AsyncSession,
    owner_id: int,
    owner_kind: ParticipantKind,
    kind: Optional[EntryKind] = None,
) -> List[LedgerEntry]:
    """Entries of one owner, newest first."""
    query = select(LedgerEntry).where(
        LedgerEntry.owner_id == owner_id,
        LedgerEntry.owner_kind == owner_kind,
    )
    if kind is not None:
        query = query.where(LedgerEntry.kind == kind)
    query = query.order_by(LedgerEntry.occurred_at.desc(), LedgerEntry.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_entry(
    db: AsyncSession,
    entry_id: int,
    amount: Optional[Decimal] = None,
    kind: Optional[EntryKind] = None,
    description: Optional[str] = None,
) -> LedgerEntry:
    """Corrective edit by an administrator. Flushed, not committed."""
    entry = await get_entry(db, entry_id)

    if entry.period_id is not None and kind is not None and kind != EntryKind.PROFIT:
        raise ValidationError("Entries produced by a distribution must stay profit entries")

    if amount is not None:
        entry.amount = _validate_amount(amount)
    if kind is not None:
        entry.kind = kind
    if description is not None:
        entry.description = description

    await db.flush()
    logger.info(f"Ledger entry {entry_id} corrected")
    return entry


async def delete_entry(db: AsyncSession, entry_id: int) -> None:
    entry = await get_entry(db, entry_id)
    await db.delete(entry)
    await db.flush()
    logger.info(f"Ledger entry {entry_id} deleted")


async def delete_period_entries(db: AsyncSession, period_id: int) -> int:
    """Remove the profit entries a period produced. Returns how many."""
    result = await db.execute(
        delete(LedgerEntry).where(
            LedgerEntry.period_id == period_id,
            LedgerEntry.kind == EntryKind.PROFIT,
        )
    )
    return result.rowcount or 0
