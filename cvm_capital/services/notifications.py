"""
Notification sink.

Notifications are best-effort: they are written after the business
transaction has committed, and a failure here is logged, never raised.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.models import Notification, NotificationSeverity, ParticipantKind
from cvm_capital.services.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationDraft:
    owner_id: int
    owner_kind: ParticipantKind
    title: str
    message: str
    severity: NotificationSeverity = NotificationSeverity.INFO


async def notify(
    db: AsyncSession,
    owner_id: int,
    owner_kind: ParticipantKind,
    title: str,
    message: str,
    severity: NotificationSeverity = NotificationSeverity.INFO,
) -> bool:
    """Queue a single notification. Returns False if it could not be stored."""
    sent = await dispatch(
        db, [NotificationDraft(owner_id, owner_kind, title, message, severity)]
    )
    return sent == 1


async def dispatch(db: AsyncSession, drafts: Iterable[NotificationDraft]) -> int:
    """
    Store notifications in their own transaction.

    Must be called after the caller's transaction has been committed.
    Returns how many were stored (0 on failure).
    """
    drafts = list(drafts)
    if not drafts:
        return 0

    try:
        for draft in drafts:
            db.add(
                Notification(
                    owner_id=draft.owner_id,
                    owner_kind=draft.owner_kind,
                    title=draft.title,
                    message=draft.message,
                    severity=draft.severity,
                )
            )
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.warning(f"Failed to queue {len(drafts)} notifications: {e}")
        return 0

    logger.debug(f"Queued {len(drafts)} notifications")
    return len(drafts)


async def list_notifications(
    db: AsyncSession,
    owner_id: int,
    owner_kind: ParticipantKind,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = select(Notification).where(
        Notification.owner_id == owner_id,
        Notification.owner_kind == owner_kind,
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def mark_read(
    db: AsyncSession,
    owner_id: int,
    owner_kind: ParticipantKind,
    notification_id: int,
) -> Notification:
    notification = await db.get(Notification, notification_id)
    if (
        notification is None
        or notification.owner_id != owner_id
        or notification.owner_kind != owner_kind
    ):
        raise NotFoundError(f"Notification {notification_id} not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.now(timezone.utc)
        await db.flush()
    return notification


async def mark_all_read(db: AsyncSession, owner_id: int, owner_kind: ParticipantKind) -> int:
    result = await db.execute(
        update(Notification)
        .where(
            Notification.owner_id == owner_id,
            Notification.owner_kind == owner_kind,
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
