"""
Profit split configuration store.

The split between the proportional pool and the partners' exclusive pool
is kept as an append-only history; the newest row is current.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import ProfitConfiguration
from cvm_capital.services.errors import InvalidSplitError
from cvm_capital.utils.money import fits_percent_precision

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
SPLIT_TOLERANCE = Decimal("0.0001")


@dataclass(frozen=True)
class ProfitSplit:
    """A proportional/exclusive split, in percent of gross profit."""

    proportional_percentage: Decimal
    exclusive_percentage: Decimal


def validate_split(proportional: Decimal, exclusive: Decimal) -> ProfitSplit:
    """
    Check a split and return it as a ProfitSplit.

    Raises InvalidSplitError when either side is negative, the two do not
    add up to 100, or either has more than four decimal places.
    """
    if proportional is None or exclusive is None:
        raise InvalidSplitError("Both percentages are required")

    proportional = Decimal(proportional)
    exclusive = Decimal(exclusive)

    if proportional < 0 or exclusive < 0:
        raise InvalidSplitError("Percentages cannot be negative")

    total = proportional + exclusive
    if abs(total - HUNDRED) > SPLIT_TOLERANCE:
        raise InvalidSplitError(
            f"Percentages must add up to exactly 100 (got {total.normalize():f})"
        )

    if not (fits_percent_precision(proportional) and fits_percent_precision(exclusive)):
        raise InvalidSplitError("Percentages can have at most 4 decimal places")

    return ProfitSplit(proportional_percentage=proportional, exclusive_percentage=exclusive)


async def get_current_config(db: AsyncSession) -> Optional[ProfitConfiguration]:
    """Most recent configuration, or None if none was ever saved."""
    result = await db.execute(
        select(ProfitConfiguration)
        .order_by(ProfitConfiguration.created_at.desc(), ProfitConfiguration.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def save_config(
    db: AsyncSession,
    proportional: Decimal,
    exclusive: Decimal,
    description: Optional[str] = None,
    user_id: Optional[int] = None,
) -> ProfitConfiguration:
    """Validate and append a new configuration; it becomes current. Flushed, not committed."""
    split = validate_split(proportional, exclusive)

    config = ProfitConfiguration(
        proportional_percentage=split.proportional_percentage,
        exclusive_percentage=split.exclusive_percentage,
        description=description,
        created_by_user_id=user_id,
    )
    db.add(config)
    await db.flush()

    logger.info(
        f"Profit configuration #{config.id} saved: "
        f"proportional={split.proportional_percentage}% exclusive={split.exclusive_percentage}%"
    )
    return config


async def list_config_history(db: AsyncSession, limit: int = 50) -> List[ProfitConfiguration]:
    result = await db.execute(
        select(ProfitConfiguration)
        .order_by(ProfitConfiguration.created_at.desc(), ProfitConfiguration.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
