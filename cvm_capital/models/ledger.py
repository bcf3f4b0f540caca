"""
Ledger model - the append-only record every balance is derived from.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, Text, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cvm_capital.models.base import Base, TimestampMixin
from cvm_capital.models.participant import ParticipantKind

if TYPE_CHECKING:
    from cvm_capital.models.period import AccountingPeriod


class EntryKind(str, Enum):
    """Direction of a ledger entry. Amounts are always positive."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    PROFIT = "profit"


class LedgerEntry(Base, TimestampMixin):
    """
    One monetary fact for one investor or partner.

    The sign is implied by ``kind``: deposits and profit add to the
    balance, withdrawals subtract. Profit entries written by a
    distribution carry the period they belong to so the period can be
    undone by deleting it.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),
        Index("ix_ledger_entries_owner", "owner_kind", "owner_id"),
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
    kind: Mapped[EntryKind] = mapped_column(
        SQLAlchemyEnum(
            EntryKind,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    period_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("accounting_periods.id"),
        nullable=True,
        index=True,
        comment="Distribution period that produced this profit entry",
    )
    request_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("approval_requests.id", ondelete="SET NULL"),
        nullable=True,
        comment="Approved request that produced this entry",
    )

    period: Mapped[Optional["AccountingPeriod"]] = relationship(
        "AccountingPeriod",
        back_populates="entries",
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry(id={self.id}, owner={self.owner_kind.value}:{self.owner_id}, "
            f"kind={self.kind.value}, amount={self.amount})>"
        )
