"""
Authentication API endpoints.

Administrators and partners sign in with a username, investors with
their email address.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.auth.dependencies import get_current_user_optional
from cvm_capital.auth.jwt import COOKIE_NAME, create_access_token
from cvm_capital.config import settings
from cvm_capital.db import get_db
from cvm_capital.models import AuditAction, Investor, Partner, ParticipantKind, User
from cvm_capital.schemas.auth import LoginRequest, LoginResponse
from cvm_capital.utils.audit import get_client_ip, log_action
from cvm_capital.utils.password import verify_password

router = APIRouter(prefix="/auth", tags=["Authentication"])

INVALID_CREDENTIALS = "Invalid username or password"


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_expire_hours * 3600,
    )


def _check_password(account, password: str) -> None:
    if account is None or not verify_password(password, account.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )


async def _login_staff(request: Request, db: AsyncSession, credentials: LoginRequest):
    result = await db.execute(
        select(User).where(User.username == credentials.username)
    )
    user = result.scalar_one_or_none()
    _check_password(user, credentials.password)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    user.last_active_at = datetime.now(timezone.utc)
    await log_action(
        db=db,
        user_id=user.id,
        action=AuditAction.LOGIN,
        ip_address=get_client_ip(request),
    )
    token = create_access_token(user.id, user.role.value)
    return token, user.role.value, user.display_name


async def _login_investor(db: AsyncSession, credentials: LoginRequest):
    result = await db.execute(
        select(Investor).where(func.lower(Investor.email) == credentials.username.strip().lower())
    )
    investor = result.scalar_one_or_none()
    _check_password(investor, credentials.password)

    investor.last_login = datetime.now(timezone.utc)
    token = create_access_token(investor.id, ParticipantKind.INVESTOR.value)
    return token, ParticipantKind.INVESTOR.value, investor.display_name


async def _login_partner(db: AsyncSession, credentials: LoginRequest):
    result = await db.execute(
        select(Partner).where(Partner.username == credentials.username)
    )
    partner = result.scalar_one_or_none()
    _check_password(partner, credentials.password)

    if not partner.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Partner account is inactive",
        )

    partner.last_login = datetime.now(timezone.utc)
    token = create_access_token(partner.id, ParticipantKind.PARTNER.value)
    return token, ParticipantKind.PARTNER.value, partner.display_name


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate and set the JWT cookie.

    ``account_type`` selects the account table: admin, investor or partner.
    """
    if credentials.account_type == "investor":
        token, role, display_name = await _login_investor(db, credentials)
    elif credentials.account_type == "partner":
        token, role, display_name = await _login_partner(db, credentials)
    else:
        token, role, display_name = await _login_staff(request, db, credentials)

    _set_auth_cookie(response, token)

    return LoginResponse(
        success=True,
        message="Login successful",
        role=role,
        display_name=display_name,
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user_optional),
):
    """
    Clear JWT cookie and log out.
    """
    if current_user:
        await log_action(
            db=db,
            user_id=current_user.id,
            action=AuditAction.LOGOUT,
            ip_address=get_client_ip(request),
        )

    response.delete_cookie(
        key=COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return {"success": True, "message": "Logged out"}
