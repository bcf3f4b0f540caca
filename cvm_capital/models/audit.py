"""
AuditLog model for tracking administrator actions.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cvm_capital.models.base import Base

if TYPE_CHECKING:
    from cvm_capital.models.user import User


class AuditAction(str, Enum):
    """Types of auditable actions."""
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE_PERIOD = "create_period"
    UPDATE_PERIOD = "update_period"
    DELETE_PERIOD = "delete_period"
    COMMIT_DISTRIBUTION = "commit_distribution"
    SAVE_PROFIT_CONFIG = "save_profit_config"
    APPROVE_REQUEST = "approve_request"
    REJECT_REQUEST = "reject_request"
    UPDATE_ENTRY = "update_entry"
    DELETE_ENTRY = "delete_entry"
    UPDATE_PARTNER = "update_partner"
    DELETE_PARTICIPANT = "delete_participant"


class AuditLog(Base):
    """
    Audit log of every administrative mutation.

    Rows are written in the same transaction as the change they describe.
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[AuditAction] = mapped_column(
        SQLAlchemyEnum(
            AuditAction,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    target_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Type of entity affected (period, request, entry, etc)",
    )
    target_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="ID of the affected entity",
    )
    action_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Additional context about the action",
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),
        nullable=True,
        comment="IPv4 or IPv6 address",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="audit_logs",
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, user_id={self.user_id}, action={self.action})>"
