"""
Deposit / withdrawal requests awaiting administrator approval.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, Text, text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from cvm_capital.models.base import Base, TimestampMixin
from cvm_capital.models.participant import ParticipantKind


class RequestKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalRequest(Base, TimestampMixin):
    """
    A participant's request to deposit or withdraw.

    Approval creates exactly one ledger entry; rejection creates none and
    records the reason. Only one pending request per owner and kind.
    """

    __tablename__ = "approval_requests"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_approval_requests_amount_positive"),
        Index(
            "uq_approval_requests_single_pending",
            "owner_kind",
            "owner_id",
            "kind",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    owner_kind: Mapped[ParticipantKind] = mapped_column(
        SQLAlchemyEnum(
            ParticipantKind,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    kind: Mapped[RequestKind] = mapped_column(
        SQLAlchemyEnum(
            RequestKind,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )
    status: Mapped[RequestStatus] = mapped_column(
        SQLAlchemyEnum(
            RequestStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=RequestStatus.PENDING,
        nullable=False,
        index=True,
    )
    note: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    decided_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    decided_by_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ApprovalRequest(id={self.id}, kind={self.kind}, status={self.status})>"
