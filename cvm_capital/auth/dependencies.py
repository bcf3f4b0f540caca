"""
FastAPI dependencies for authentication.

Resolves the caller from the JWT cookie into an explicit identity that
route handlers pass on to the services.
"""

from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.auth.jwt import PARTICIPANT_ROLES, get_token_from_cookie, verify_token
from cvm_capital.db import get_db
from cvm_capital.models import Investor, Partner, ParticipantKind, User, UserRole


@dataclass
class ParticipantIdentity:
    """Logged-in investor or partner."""

    kind: ParticipantKind
    account: Union[Investor, Partner]

    @property
    def id(self) -> int:
        return self.account.id


def _payload_or_401(request: Request) -> dict:
    token = get_token_from_cookie(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    payload = verify_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return payload


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Staff user from the JWT cookie if present.

    Returns None instead of raising. Participant tokens yield None.
    """
    token = get_token_from_cookie(request)
    payload = verify_token(token) if token else None
    if not payload or payload["role"] in PARTICIPANT_ROLES:
        return None

    user = await db.get(User, payload["subject_id"])
    if not user or not user.is_active:
        return None
    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Current staff user.

    Raises 401 if not authenticated, 403 for participant tokens or
    disabled accounts.
    """
    payload = _payload_or_401(request)
    if payload["role"] in PARTICIPANT_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required",
        )

    user = await db.get(User, payload["subject_id"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


async def require_staff(
    current_user: User = Depends(get_current_user),
) -> User:
    """Admin or moderator. Use for read-only admin views."""
    if current_user.role not in (UserRole.ADMIN, UserRole.MODERATOR):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    return current_user


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """Administrator only. Use for every mutation."""
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return current_user


async def require_participant(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ParticipantIdentity:
    """
    Logged-in investor or partner.

    Deactivated partners are refused.
    """
    payload = _payload_or_401(request)
    if payload["role"] not in PARTICIPANT_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Investor or partner access required",
        )

    kind = ParticipantKind(payload["role"])
    model = Investor if kind == ParticipantKind.INVESTOR else Partner
    account = await db.get(model, payload["subject_id"])
    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
        )
    if not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    return ParticipantIdentity(kind=kind, account=account)
