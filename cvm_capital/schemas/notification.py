"""Participant notification schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    severity: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_notification(cls, notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            severity=notification.severity.value,
            is_read=notification.is_read,
            read_at=notification.read_at,
            created_at=notification.created_at,
        )


class NotificationListResponse(BaseModel):
    items: List[NotificationResponse]
    unread: int
