"""
Balance calculator.

A balance is never stored: it is the fold of the owner's ledger entries,
deposits and profit adding, withdrawals subtracting.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import EntryKind, LedgerEntry, Partner, ParticipantKind

OwnerKey = Tuple[ParticipantKind, int]

ZERO = Decimal("0")


@dataclass
class BalanceBreakdown:
    """Per-kind totals of one owner's ledger."""

    deposits: Decimal = ZERO
    withdrawals: Decimal = ZERO
    profit: Decimal = ZERO

    @property
    def balance(self) -> Decimal:
        return self.deposits + self.profit - self.withdrawals

    def add(self, kind: EntryKind, amount: Decimal) -> None:
        if kind == EntryKind.DEPOSIT:
            self.deposits += amount
        elif kind == EntryKind.WITHDRAWAL:
            self.withdrawals += amount
        elif kind == EntryKind.PROFIT:
            self.profit += amount
        else:
            raise ValueError(f"Unknown entry kind: {kind}")


@dataclass
class CapitalSummary:
    """
    Aggregate balance over a set of owners.

    ``total`` is clamped at zero for display; ``raw_total`` keeps the sign
    for diagnostics.
    """

    raw_total: Decimal
    balances: Dict[OwnerKey, Decimal] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return max(self.raw_total, ZERO)


def signed_amount(kind: EntryKind, amount: Decimal) -> Decimal:
    """Signed contribution of one entry to a balance."""
    if kind == EntryKind.WITHDRAWAL:
        return -amount
    return amount


def fold_balance(entries: Iterable) -> Decimal:
    """Balance of a sequence of entries (anything with ``kind`` and ``amount``)."""
    return sum((signed_amount(e.kind, e.amount) for e in entries), ZERO)


def fold_breakdown(entries: Iterable) -> BalanceBreakdown:
    breakdown = BalanceBreakdown()
    for entry in entries:
        breakdown.add(entry.kind, entry.amount)
    return breakdown


async def get_breakdown(
    db: AsyncSession,
    owner_id: int,
    owner_kind: ParticipantKind,
) -> BalanceBreakdown:
    """Deposit, withdrawal and profit totals for one owner."""
    result = await db.execute(
        select(LedgerEntry.kind, LedgerEntry.amount).where(
            LedgerEntry.owner_id == owner_id,
            LedgerEntry.owner_kind == owner_kind,
        )
    )
    return fold_breakdown(result.all())


async def compute_balance(
    db: AsyncSession,
    owner_id: int,
    owner_kind: ParticipantKind,
) -> Decimal:
    """
    Current balance of one investor or partner.

    An owner with no entries has a balance of zero. The result may be
    negative if withdrawals exceed deposits and profit.
    """
    breakdown = await get_breakdown(db, owner_id, owner_kind)
    return breakdown.balance


async def compute_balances(
    db: AsyncSession,
    owner_kind: Optional[ParticipantKind] = None,
) -> Dict[OwnerKey, Decimal]:
    """Balances of every owner that has at least one entry."""
    query = select(
        LedgerEntry.owner_kind,
        LedgerEntry.owner_id,
        LedgerEntry.kind,
        LedgerEntry.amount,
    )
    if owner_kind is not None:
        query = query.where(LedgerEntry.owner_kind == owner_kind)

    result = await db.execute(query)
    balances: Dict[OwnerKey, Decimal] = defaultdict(lambda: ZERO)
    for row in result.all():
        balances[(row.owner_kind, row.owner_id)] += signed_amount(row.kind, row.amount)
    return dict(balances)


async def compute_total_invested_capital(
    db: AsyncSession,
    include_inactive_partners: bool = False,
) -> CapitalSummary:
    """
    Sum of balances across investors and partners.

    By default inactive partners are left out, which is the capital base
    a distribution runs on. Their entries are not touched.
    """
    balances = await compute_balances(db)

    if not include_inactive_partners:
        result = await db.execute(select(Partner.id).where(Partner.is_active.is_(False)))
        inactive = {(ParticipantKind.PARTNER, partner_id) for partner_id in result.scalars().all()}
        balances = {key: value for key, value in balances.items() if key not in inactive}

    raw_total = sum(balances.values(), ZERO)
    return CapitalSummary(raw_total=raw_total, balances=balances)
