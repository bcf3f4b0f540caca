"""Participant notifications API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import ParticipantIdentity, require_participant
from cvm_capital.db import get_db
from cvm_capital.models import Notification
from cvm_capital.schemas.notification import NotificationListResponse, NotificationResponse
from cvm_capital.services import notifications
from cvm_capital.services.errors import CapitalError

router = APIRouter(prefix="/notifications")


@router.get("", response_model=NotificationListResponse)
async def list_my_notifications(
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
):
    items = await notifications.list_notifications(
        db, identity.id, identity.kind, unread_only=unread_only, limit=limit
    )
    unread = await db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(
            Notification.owner_id == identity.id,
            Notification.owner_kind == identity.kind,
            Notification.is_read.is_(False),
        )
    )
    return NotificationListResponse(
        items=[NotificationResponse.from_notification(n) for n in items],
        unread=unread or 0,
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
):
    try:
        notification = await notifications.mark_read(
            db, identity.id, identity.kind, notification_id
        )
    except CapitalError as e:
        raise_http_error(e)
    return NotificationResponse.from_notification(notification)


@router.post("/read-all")
async def mark_all_notifications_read(
    db: AsyncSession = Depends(get_db),
    identity: ParticipantIdentity = Depends(require_participant),
):
    updated = await notifications.mark_all_read(db, identity.id, identity.kind)
    return {"success": True, "updated": updated}
