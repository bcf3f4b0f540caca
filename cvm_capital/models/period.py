"""
Accounting period ("month") model.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cvm_capital.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cvm_capital.models.ledger import LedgerEntry
    from cvm_capital.models.user import User


class AccountingPeriod(Base, TimestampMixin):
    """
    A numbered, dated accounting period that profit is distributed for.

    At most one period may be pending (``processed = false``) at any
    time; the partial unique index below keeps concurrent admin sessions
    from opening a second one. ``processed`` only ever goes from false
    to true. Audit fields are filled by the distribution commit.
    """

    __tablename__ = "accounting_periods"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_accounting_periods_date_order"),
        Index(
            "uq_accounting_periods_single_pending",
            "processed",
            unique=True,
            postgresql_where=text("NOT processed"),
            sqlite_where=text("NOT processed"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    sequence_number: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
    )
    label: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    processed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    processed_by_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_by_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Distribution audit
    profit_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 4),
        nullable=True,
    )
    gross_profit_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    total_capital: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
        comment="Invested capital the gross profit was computed from",
    )
    proportional_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 4),
        nullable=True,
    )
    exclusive_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 4),
        nullable=True,
    )
    profit_configuration_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profit_configurations.id"),
        nullable=True,
        comment="Configuration in effect; NULL when the split was overridden",
    )

    entries: Mapped[List["LedgerEntry"]] = relationship(
        "LedgerEntry",
        back_populates="period",
        passive_deletes=True,
    )
    processed_by: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[processed_by_user_id],
    )

    def __repr__(self) -> str:
        return (
            f"<AccountingPeriod(id={self.id}, seq={self.sequence_number}, "
            f"label='{self.label}', processed={self.processed})>"
        )
