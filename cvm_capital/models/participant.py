"""
Investors and partners - the two kinds of account that own ledger entries.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from cvm_capital.models.base import Base, TimestampMixin


class ParticipantKind(str, Enum):
    """Owner kind stamped on ledger entries, requests and notifications."""
    INVESTOR = "investor"
    PARTNER = "partner"


class PartnerType(str, Enum):
    PARTNER = "partner"
    OPERATOR_PARTNER = "operator_partner"


class Investor(Base, TimestampMixin):
    """
    Investor account.

    Investors are always eligible for the proportional pool; they have
    no active flag.
    """

    __tablename__ = "investors"

    kind = ParticipantKind.INVESTOR

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"<Investor(id={self.id}, email='{self.email}')>"


class Partner(Base, TimestampMixin):
    """
    Partner (co-investor) account.

    Active partners share the exclusive pool evenly and take part in the
    proportional pool by their capital. Inactive partners are left out of
    both, but their ledger history is kept.
    """

    __tablename__ = "partners"

    kind = ParticipantKind.PARTNER

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    partner_type: Mapped[PartnerType] = mapped_column(
        SQLAlchemyEnum(
            PartnerType,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=PartnerType.PARTNER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    @property
    def display_name(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<Partner(id={self.id}, username='{self.username}', active={self.is_active})>"
