"""Investor and partner schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ParticipantResponse(BaseModel):
    """Investor or partner with its derived balance."""

    kind: str
    id: int
    name: str
    email: Optional[str] = None
    username: Optional[str] = None
    partner_type: Optional[str] = None
    is_active: bool
    balance: Decimal
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_participant(cls, participant, balance: Decimal) -> "ParticipantResponse":
        partner_type = getattr(participant, "partner_type", None)
        return cls(
            kind=participant.kind.value,
            id=participant.id,
            name=participant.display_name,
            email=participant.email,
            username=getattr(participant, "username", None),
            partner_type=partner_type.value if partner_type else None,
            is_active=participant.is_active,
            balance=balance,
            last_login=participant.last_login,
            created_at=participant.created_at,
        )


class PartnerUpdate(BaseModel):
    is_active: bool


class ParticipantDeleteResponse(BaseModel):
    success: bool
    deleted_entries: int
