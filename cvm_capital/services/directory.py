"""
Participant directory: lookups over investors and partners.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import (
    ApprovalRequest,
    Investor,
    LedgerEntry,
    Notification,
    Partner,
    ParticipantKind,
)
from cvm_capital.services.errors import NotFoundError, PartialWriteError

logger = logging.getLogger(__name__)

Participant = Union[Investor, Partner]

MODEL_BY_KIND = {
    ParticipantKind.INVESTOR: Investor,
    ParticipantKind.PARTNER: Partner,
}


def _owned_by(model, owner_kind: ParticipantKind, owner_id: int):
    return (model.owner_kind == owner_kind) & (model.owner_id == owner_id)


async def get_participant(
    db: AsyncSession,
    owner_kind: ParticipantKind,
    owner_id: int,
) -> Participant:
    """Fetch one investor or partner, raising NotFoundError if missing."""
    participant = await db.get(MODEL_BY_KIND[owner_kind], owner_id)
    if participant is None:
        raise NotFoundError(f"{owner_kind.value.capitalize()} {owner_id} not found")
    return participant


async def list_participants(
    db: AsyncSession,
    owner_kind: ParticipantKind,
    active_only: bool = False,
) -> List[Participant]:
    """
    List investors or partners ordered by id.

    ``active_only`` filters partners by their flag; investors are always
    active.
    """
    model = MODEL_BY_KIND[owner_kind]
    query = select(model).order_by(model.id)
    if active_only and owner_kind == ParticipantKind.PARTNER:
        query = query.where(Partner.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_active_participants(
    db: AsyncSession,
    owner_kind: Optional[ParticipantKind] = None,
) -> List[Participant]:
    """Every participant eligible for a distribution, investors first."""
    kinds = [owner_kind] if owner_kind else [ParticipantKind.INVESTOR, ParticipantKind.PARTNER]
    participants: List[Participant] = []
    for kind in kinds:
        participants.extend(await list_participants(db, kind, active_only=True))
    return participants


async def display_names(db: AsyncSession) -> Dict[Tuple[ParticipantKind, int], str]:
    """Display name of every participant, keyed by (kind, id)."""
    names = {}
    for kind in ParticipantKind:
        for participant in await list_participants(db, kind):
            names[(kind, participant.id)] = participant.display_name
    return names


async def set_partner_active(db: AsyncSession, partner_id: int, is_active: bool) -> Partner:
    partner = await get_participant(db, ParticipantKind.PARTNER, partner_id)
    partner.is_active = is_active
    await db.flush()
    logger.info(f"Partner {partner_id} {'activated' if is_active else 'deactivated'}")
    return partner


async def delete_participant(
    db: AsyncSession,
    owner_kind: ParticipantKind,
    owner_id: int,
) -> int:
    """
    Delete a participant together with its entries, requests and notifications.

    Runs as one transaction and commits it. Returns the number of ledger
    entries removed.
    """
    participant = await get_participant(db, owner_kind, owner_id)

    try:
        result = await db.execute(
            delete(LedgerEntry).where(_owned_by(LedgerEntry, owner_kind, owner_id))
        )
        removed_entries = result.rowcount or 0
        await db.execute(
            delete(ApprovalRequest).where(_owned_by(ApprovalRequest, owner_kind, owner_id))
        )
        await db.execute(
            delete(Notification).where(_owned_by(Notification, owner_kind, owner_id))
        )
        await db.delete(participant)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Rolled back deletion of {owner_kind.value} {owner_id}: {e}")
        raise PartialWriteError(
            f"Could not delete {owner_kind.value} {owner_id}; no data was removed"
        ) from e

    logger.info(
        f"Deleted {owner_kind.value} {owner_id} and {removed_entries} ledger entries"
    )
    return removed_entries
