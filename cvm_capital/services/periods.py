"""
Period manager.

Periods are numbered, non-overlapping date ranges. Exactly one may be
pending at a time: a new period can only be opened once the current one
has been distributed. That rule is what serializes distribution runs.
"""

import calendar
import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import AccountingPeriod
from cvm_capital.services import ledger
from cvm_capital.services.errors import (
    AlreadyProcessedError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

PENDING_PERIOD_MESSAGE = (
    "There is already a pending period. Process the current period first."
)


def month_range(month: int, year: int) -> Tuple[date, date, str]:
    """First day, last day and default label of a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day), f"{MONTH_NAMES[month - 1]} {year}"


async def list_periods(db: AsyncSession) -> List[AccountingPeriod]:
    result = await db.execute(
        select(AccountingPeriod).order_by(AccountingPeriod.sequence_number)
    )
    return list(result.scalars().all())


async def get_period(db: AsyncSession, period_id: int) -> AccountingPeriod:
    period = await db.get(AccountingPeriod, period_id)
    if period is None:
        raise NotFoundError(f"Period {period_id} not found")
    return period


async def get_pending_period(db: AsyncSession) -> Optional[AccountingPeriod]:
    result = await db.execute(
        select(AccountingPeriod).where(AccountingPeriod.processed.is_(False))
    )
    return result.scalars().first()


async def get_current_period(db: AsyncSession) -> Optional[AccountingPeriod]:
    """The pending period, else the most recent processed one, else None."""
    pending = await get_pending_period(db)
    if pending is not None:
        return pending
    result = await db.execute(
        select(AccountingPeriod)
        .order_by(AccountingPeriod.sequence_number.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def next_available_sequence_number(db: AsyncSession) -> Optional[int]:
    """
    Lowest unused sequence number, or None while a period is pending.

    None tells the caller that period creation is blocked.
    """
    if await get_pending_period(db) is not None:
        return None

    result = await db.execute(select(AccountingPeriod.sequence_number))
    used = set(result.scalars().all())
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


async def _validate_period_fields(
    db: AsyncSession,
    sequence_number: int,
    label: str,
    start_date: date,
    end_date: date,
    exclude_id: Optional[int] = None,
) -> None:
    if sequence_number is None or sequence_number < 1:
        raise ValidationError("Sequence number must be a positive integer")
    if not label or not label.strip():
        raise ValidationError("Label is required")
    if end_date < start_date:
        raise ValidationError("End date cannot be before start date")

    others = select(AccountingPeriod)
    if exclude_id is not None:
        others = others.where(AccountingPeriod.id != exclude_id)

    duplicate = await db.execute(
        others.where(AccountingPeriod.sequence_number == sequence_number)
    )
    if duplicate.scalars().first() is not None:
        raise ValidationError(f"Sequence number {sequence_number} is already used")

    overlapping = await db.execute(
        others.where(
            AccountingPeriod.start_date <= end_date,
            AccountingPeriod.end_date >= start_date,
        )
    )
    clash = overlapping.scalars().first()
    if clash is not None:
        raise ValidationError(
            f"Dates overlap with period #{clash.sequence_number} ({clash.label})"
        )


async def _flush_or_reject(db: AsyncSession) -> None:
    # Constraint violations here mean a concurrent admin won the race
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Period write rejected by constraint: {e.orig}")
        raise ValidationError(
            "Period conflicts with an existing period or a pending period already exists"
        ) from e


async def create_period(
    db: AsyncSession,
    sequence_number: int,
    label: str,
    start_date: date,
    end_date: date,
    user_id: Optional[int] = None,
) -> AccountingPeriod:
    """
    Open a new pending period. Flushed, not committed.

    Raises ValidationError if a period is still pending, the dates are
    reversed or overlap another period, or the number is taken.
    """
    if await get_pending_period(db) is not None:
        raise ValidationError(PENDING_PERIOD_MESSAGE)

    await _validate_period_fields(db, sequence_number, label, start_date, end_date)

    period = AccountingPeriod(
        sequence_number=sequence_number,
        label=label.strip(),
        start_date=start_date,
        end_date=end_date,
        processed=False,
        created_by_user_id=user_id,
    )
    db.add(period)
    await _flush_or_reject(db)

    logger.info(f"Period #{sequence_number} '{period.label}' created ({start_date} to {end_date})")
    return period


async def update_period(
    db: AsyncSession,
    period_id: int,
    sequence_number: Optional[int] = None,
    label: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> AccountingPeriod:
    """Correct a pending period. Processed periods cannot change."""
    period = await get_period(db, period_id)
    if period.processed:
        raise AlreadyProcessedError(
            f"Period '{period.label}' has already been processed and cannot be edited"
        )

    new_sequence = sequence_number if sequence_number is not None else period.sequence_number
    new_label = label if label is not None else period.label
    new_start = start_date or period.start_date
    new_end = end_date or period.end_date

    await _validate_period_fields(
        db, new_sequence, new_label, new_start, new_end, exclude_id=period.id
    )

    period.sequence_number = new_sequence
    period.label = new_label.strip()
    period.start_date = new_start
    period.end_date = new_end
    await _flush_or_reject(db)

    logger.info(f"Period {period_id} updated")
    return period


async def delete_period(db: AsyncSession, period_id: int) -> int:
    """
    Delete a period and every profit entry it produced.

    Both happen in one transaction which this function commits; on any
    database error nothing is removed. Returns the number of ledger
    entries deleted.
    """
    period = await get_period(db, period_id)
    label = period.label

    try:
        removed = await ledger.delete_period_entries(db, period_id)
        await db.delete(period)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Rolled back deletion of period {period_id}: {e}")
        raise PartialWriteError(
            f"Could not delete period '{label}'; no data was removed"
        ) from e

    logger.info(f"Period {period_id} '{label}' deleted with {removed} profit entries")
    return removed
