"""
Monthly profit distribution engine.

For a pending period and a profit percentage:

1. gross profit = invested capital x percentage
2. the gross profit is split into a proportional pool and an exclusive
   pool using the current (or an ad-hoc) profit configuration
3. the proportional pool is shared by every investor and active partner
   in proportion to their balance
4. the exclusive pool is shared evenly by the active partners

``preview_distribution`` only computes. ``commit_distribution`` computes,
writes one profit entry per credited participant and marks the period
processed, all in one transaction, then notifies the participants.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import (
    AccountingPeriod,
    EntryKind,
    NotificationSeverity,
    ParticipantKind,
)
from cvm_capital.services import balance, directory, ledger, notifications, periods
from cvm_capital.services.errors import (
    AlreadyProcessedError,
    NoCapitalWarning,
    PartialWriteError,
    UnallocatedPoolWarning,
    ValidationError,
)
from cvm_capital.services.profit_config import ProfitSplit, get_current_config, validate_split
from cvm_capital.utils.money import (
    ZERO,
    fits_percent_precision,
    percent_of,
    split_by_weights,
    split_evenly,
    to_money,
)

logger = logging.getLogger(__name__)

SHARE_PRECISION = Decimal("0.000001")
MAX_PROFIT_PERCENTAGE = Decimal("100")


@dataclass
class Allocation:
    """What one participant receives from a distribution."""

    owner_kind: ParticipantKind
    owner_id: int
    name: str
    balance: Decimal
    capital_share: Decimal = ZERO
    proportional_amount: Decimal = ZERO
    exclusive_amount: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.proportional_amount + self.exclusive_amount


@dataclass
class DistributionPreview:
    """Full computation of a distribution, before or after it is written."""

    period_id: int
    period_label: str
    profit_percentage: Decimal
    split: ProfitSplit
    configuration_id: Optional[int]
    raw_total_capital: Decimal
    total_capital: Decimal
    gross_profit: Decimal
    proportional_pool: Decimal
    exclusive_pool: Decimal
    active_partner_count: int
    allocations: List[Allocation] = field(default_factory=list)
    warnings: List[UserWarning] = field(default_factory=list)

    @property
    def allocated_total(self) -> Decimal:
        return sum((a.total for a in self.allocations), ZERO)

    @property
    def unallocated(self) -> Decimal:
        return self.gross_profit - self.allocated_total

    @property
    def exclusive_per_partner(self) -> Decimal:
        if not self.active_partner_count:
            return ZERO
        return to_money(self.exclusive_pool / self.active_partner_count)

    def allocation_for(self, owner_kind: ParticipantKind, owner_id: int) -> Optional[Allocation]:
        for allocation in self.allocations:
            if allocation.owner_kind == owner_kind and allocation.owner_id == owner_id:
                return allocation
        return None


@dataclass
class DistributionResult:
    """A committed distribution."""

    preview: DistributionPreview
    entry_ids: List[int]
    processed_at: datetime
    processed_by_user_id: Optional[int]
    notifications_sent: int = 0

    @property
    def entries_written(self) -> int:
        return len(self.entry_ids)


@dataclass
class Candidate:
    """An investor or active partner with its current balance."""

    owner_kind: ParticipantKind
    owner_id: int
    name: str
    balance: Decimal
    is_partner: bool


def validate_profit_percentage(profit_percentage: Decimal) -> Decimal:
    if profit_percentage is None:
        raise ValidationError("Profit percentage is required")
    profit_percentage = Decimal(profit_percentage)
    if profit_percentage <= 0:
        raise ValidationError("Profit percentage must be greater than zero")
    if profit_percentage > MAX_PROFIT_PERCENTAGE:
        raise ValidationError(f"Profit percentage cannot exceed {MAX_PROFIT_PERCENTAGE}")
    if not fits_percent_precision(profit_percentage):
        raise ValidationError("Profit percentage can have at most 4 decimal places")
    return profit_percentage


def compute_allocations(
    candidates: Sequence[Candidate],
    profit_percentage: Decimal,
    split: ProfitSplit,
) -> Tuple[Dict[str, Decimal], List[Allocation], List[UserWarning]]:
    """
    Pure distribution arithmetic over already-resolved participants.

    Returns the pool totals, one allocation per candidate and any
    warnings raised along the way.
    """
    found_warnings: List[UserWarning] = []

    raw_total = sum((c.balance for c in candidates), ZERO)
    total_capital = max(raw_total, ZERO)
    gross_profit = percent_of(total_capital, profit_percentage)
    exclusive_pool = percent_of(gross_profit, split.exclusive_percentage)
    proportional_pool = gross_profit - exclusive_pool

    allocations = {
        (c.owner_kind, c.owner_id): Allocation(
            owner_kind=c.owner_kind,
            owner_id=c.owner_id,
            name=c.name,
            balance=c.balance,
        )
        for c in candidates
    }

    # Proportional pool: by capital, non-positive balances excluded
    weights = {(c.owner_kind, c.owner_id): c.balance for c in candidates if c.balance > 0}
    capital_base = sum(weights.values(), ZERO)
    if total_capital <= 0 or capital_base <= 0:
        found_warnings.append(
            NoCapitalWarning("Total invested capital is zero; no proportional profit allocated")
        )
    else:
        for key, weight in weights.items():
            allocations[key].capital_share = (weight / capital_base).quantize(SHARE_PRECISION)
        for key, amount in split_by_weights(proportional_pool, weights).items():
            allocations[key].proportional_amount = amount

    # Exclusive pool: evenly among active partners
    partner_keys = [(c.owner_kind, c.owner_id) for c in candidates if c.is_partner]
    if exclusive_pool > 0 and not partner_keys:
        found_warnings.append(
            UnallocatedPoolWarning(
                f"Exclusive pool of {exclusive_pool} has no active partner to receive it"
            )
        )
    for key, amount in split_evenly(exclusive_pool, partner_keys).items():
        allocations[key].exclusive_amount = amount

    totals = {
        "raw_total_capital": raw_total,
        "total_capital": total_capital,
        "gross_profit": gross_profit,
        "proportional_pool": proportional_pool,
        "exclusive_pool": exclusive_pool,
    }
    return totals, list(allocations.values()), found_warnings


async def _resolve_split(
    db: AsyncSession,
    split_override: Optional[ProfitSplit],
) -> Tuple[ProfitSplit, Optional[int]]:
    if split_override is not None:
        split = validate_split(
            split_override.proportional_percentage,
            split_override.exclusive_percentage,
        )
        return split, None

    config = await get_current_config(db)
    if config is None:
        raise ValidationError("No profit configuration saved; save one or pass a split override")
    split = validate_split(config.proportional_percentage, config.exclusive_percentage)
    return split, config.id


async def _load_candidates(db: AsyncSession) -> List[Candidate]:
    balances = await balance.compute_balances(db)
    participants = await directory.list_active_participants(db)
    return [
        Candidate(
            owner_kind=p.kind,
            owner_id=p.id,
            name=p.display_name,
            balance=balances.get((p.kind, p.id), ZERO),
            is_partner=p.kind == ParticipantKind.PARTNER,
        )
        for p in participants
    ]


async def _build_preview(
    db: AsyncSession,
    period: AccountingPeriod,
    profit_percentage: Decimal,
    split: ProfitSplit,
    configuration_id: Optional[int],
) -> DistributionPreview:
    candidates = await _load_candidates(db)
    totals, allocations, found_warnings = compute_allocations(
        candidates, profit_percentage, split
    )

    preview = DistributionPreview(
        period_id=period.id,
        period_label=period.label,
        profit_percentage=profit_percentage,
        split=split,
        configuration_id=configuration_id,
        active_partner_count=sum(1 for c in candidates if c.is_partner),
        allocations=allocations,
        warnings=found_warnings,
        **totals,
    )
    for warning in found_warnings:
        logger.warning(f"Period {period.id}: {warning}")
    return preview


async def preview_distribution(
    db: AsyncSession,
    period_id: int,
    profit_percentage: Decimal,
    split_override: Optional[ProfitSplit] = None,
) -> DistributionPreview:
    """
    Compute a distribution without writing anything.

    Raises NotFoundError, AlreadyProcessedError, ValidationError or
    InvalidSplitError. A zero capital base is reported as a
    NoCapitalWarning in ``preview.warnings``, not raised.
    """
    period = await periods.get_period(db, period_id)
    if period.processed:
        raise AlreadyProcessedError(f"Period '{period.label}' has already been processed")

    profit_percentage = validate_profit_percentage(profit_percentage)
    split, configuration_id = await _resolve_split(db, split_override)

    return await _build_preview(db, period, profit_percentage, split, configuration_id)


def _entry_description(period: AccountingPeriod, allocation: Allocation) -> str:
    parts = []
    if allocation.proportional_amount > 0:
        parts.append(f"proportional {allocation.proportional_amount}")
    if allocation.exclusive_amount > 0:
        parts.append(f"exclusive {allocation.exclusive_amount}")
    return (
        f"Profit distribution #{period.sequence_number} {period.label} "
        f"({period.start_date.isoformat()} to {period.end_date.isoformat()}): "
        + ", ".join(parts)
    )


def _credit_notifications(preview: DistributionPreview) -> List[notifications.NotificationDraft]:
    return [
        notifications.NotificationDraft(
            owner_id=a.owner_id,
            owner_kind=a.owner_kind,
            title="Monthly profit credited",
            message=f"{a.total} was credited to your account for {preview.period_label}.",
            severity=NotificationSeverity.SUCCESS,
        )
        for a in preview.allocations
        if a.total > 0
    ]


async def commit_distribution(
    db: AsyncSession,
    period_id: int,
    profit_percentage: Decimal,
    split_override: Optional[ProfitSplit] = None,
    user_id: Optional[int] = None,
    notify: bool = True,
) -> DistributionResult:
    """
    Compute and persist a distribution, then mark the period processed.

    The period is claimed with a conditional UPDATE as the first write of
    the transaction, so two concurrent commits cannot both succeed: the
    loser sees zero rows updated and gets AlreadyProcessedError. Entries
    and period audit fields are committed together; on a database error
    everything is rolled back and PartialWriteError is raised.
    Losing the claim also rolls back the caller's session, expiring any
    objects loaded in it.

    Commit is refused when the exclusive pool is positive and no partner
    is active, rather than leaving profit computed but unrecorded.
    """
    period = await periods.get_period(db, period_id)
    if period.processed:
        raise AlreadyProcessedError(f"Period '{period.label}' has already been processed")

    profit_percentage = validate_profit_percentage(profit_percentage)
    split, configuration_id = await _resolve_split(db, split_override)
    label = period.label
    processed_at = datetime.now(timezone.utc)

    try:
        claim = await db.execute(
            update(AccountingPeriod)
            .where(
                AccountingPeriod.id == period_id,
                AccountingPeriod.processed.is_(False),
            )
            .values(
                processed=True,
                processed_at=processed_at,
                processed_by_user_id=user_id,
            )
            .execution_options(synchronize_session=False)
        )
        if claim.rowcount != 1:
            await db.rollback()
            raise AlreadyProcessedError(f"Period '{label}' has already been processed")

        preview = await _build_preview(db, period, profit_percentage, split, configuration_id)

        if any(isinstance(w, UnallocatedPoolWarning) for w in preview.warnings):
            await db.rollback()
            raise ValidationError(
                "The exclusive pool cannot be distributed because there are no active partners. "
                "Activate a partner or set the exclusive percentage to 0."
            )

        entry_ids: List[int] = []
        for allocation in preview.allocations:
            if allocation.total <= 0:
                continue
            entry = await ledger.append_entry(
                db,
                owner_id=allocation.owner_id,
                owner_kind=allocation.owner_kind,
                kind=EntryKind.PROFIT,
                amount=allocation.total,
                description=_entry_description(period, allocation),
                period_id=period_id,
            )
            entry_ids.append(entry.id)

        period.processed = True
        period.processed_at = processed_at
        period.processed_by_user_id = user_id
        period.profit_percentage = profit_percentage
        period.gross_profit_amount = preview.gross_profit
        period.total_capital = preview.total_capital
        period.proportional_percentage = split.proportional_percentage
        period.exclusive_percentage = split.exclusive_percentage
        period.profit_configuration_id = configuration_id

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Distribution for period {period_id} rolled back: {e}")
        raise PartialWriteError(
            f"Distribution for '{label}' failed and was rolled back; the period is unchanged"
        ) from e

    logger.info(
        f"Period {period_id} '{label}' processed: capital={preview.total_capital} "
        f"gross={preview.gross_profit} proportional={preview.proportional_pool} "
        f"exclusive={preview.exclusive_pool} entries={len(entry_ids)}"
    )

    result = DistributionResult(
        preview=preview,
        entry_ids=entry_ids,
        processed_at=processed_at,
        processed_by_user_id=user_id,
    )

    if notify:
        result.notifications_sent = await notifications.dispatch(
            db, _credit_notifications(preview)
        )

    return result
