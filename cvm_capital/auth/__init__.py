"""Authentication module."""

from cvm_capital.auth.dependencies import (
    ParticipantIdentity,
    get_current_user,
    require_admin,
    require_participant,
    require_staff,
)
from cvm_capital.auth.jwt import create_access_token, verify_token

__all__ = [
    "create_access_token",
    "verify_token",
    "get_current_user",
    "require_admin",
    "require_staff",
    "require_participant",
    "ParticipantIdentity",
]
