"""
In-app notifications for investors and partners.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from cvm_capital.models.base import Base
from cvm_capital.models.participant import ParticipantKind


class NotificationSeverity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(Base):
    """Message shown in the participant's notification bell."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_owner", "owner_kind", "owner_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    owner_kind: Mapped[ParticipantKind] = mapped_column(
        SQLAlchemyEnum(
            ParticipantKind,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    severity: Mapped[NotificationSeverity] = mapped_column(
        SQLAlchemyEnum(
            NotificationSeverity,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=NotificationSeverity.INFO,
        nullable=False,
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, owner={self.owner_kind}:{self.owner_id})>"
