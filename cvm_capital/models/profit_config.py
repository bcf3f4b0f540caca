"""
Profit split configuration history.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from cvm_capital.models.base import Base


class ProfitConfiguration(Base):
    """
    One saved proportional/exclusive split.

    Rows are append-only: saving creates a new row and the most recent
    row is the current configuration. Processed periods point at the row
    they ran with.
    """

    __tablename__ = "profit_configurations"
    __table_args__ = (
        CheckConstraint(
            "proportional_percentage >= 0 AND exclusive_percentage >= 0",
            name="ck_profit_configurations_non_negative",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    proportional_percentage: Mapped[Decimal] = mapped_column(
        Numeric(7, 4),
        nullable=False,
        comment="Share of gross profit split by capital across all participants",
    )
    exclusive_percentage: Mapped[Decimal] = mapped_column(
        Numeric(7, 4),
        nullable=False,
        comment="Share of gross profit split evenly among active partners",
    )
    description: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    created_by_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<ProfitConfiguration(id={self.id}, proportional={self.proportional_percentage}, "
            f"exclusive={self.exclusive_percentage})>"
        )
