"""
Password hashing for staff, investor and partner logins.

Investors and partners may exist without a password (accounts created
for bookkeeping only); such accounts can never log in.
"""

from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt ignores everything past 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash a new password with bcrypt.

    Raises ValueError for passwords longer than 72 bytes, which bcrypt
    would otherwise truncate without notice.
    """
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a login attempt; an account without a stored hash never matches."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)
