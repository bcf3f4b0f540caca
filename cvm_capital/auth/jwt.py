"""
JWT token management.

Tokens are stored in httpOnly cookies. The payload names the account
(``sub``) and its role: admin, moderator, investor or partner.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from cvm_capital.config import settings

ALGORITHM = "HS256"
TOKEN_TYPE = "access"
COOKIE_NAME = "access_token"

STAFF_ROLES = ("admin", "moderator")
PARTICIPANT_ROLES = ("investor", "partner")


def create_access_token(
    subject_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        subject_id: Database ID of the user, investor or partner
        role: One of admin/moderator/investor/partner
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)

    payload = {
        "sub": str(subject_id),
        "role": role,
        "exp": expire,
        "type": TOKEN_TYPE,
        "iat": datetime.now(timezone.utc),
    }

    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode a JWT token.

    Returns:
        Dict with 'subject_id' and 'role', or None if the token is
        invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
        )

        if payload.get("type") != TOKEN_TYPE:
            return None

        subject_id = payload.get("sub")
        role = payload.get("role")

        if not subject_id or role not in STAFF_ROLES + PARTICIPANT_ROLES:
            return None

        return {
            "subject_id": int(subject_id),
            "role": role,
        }

    except (JWTError, ValueError):
        return None


def get_token_from_cookie(request) -> Optional[str]:
    """Extract JWT token from the httpOnly cookie."""
    return request.cookies.get(COOKIE_NAME)
