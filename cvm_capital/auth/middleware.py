"""
Authentication middleware for role-based route protection.
"""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cvm_capital.auth.jwt import PARTICIPANT_ROLES, STAFF_ROLES, get_token_from_cookie, verify_token

logger = logging.getLogger(__name__)


def _json_error(detail: str, status_code: int) -> Response:
    return Response(
        content=f'{{"detail": "{detail}"}}',
        status_code=status_code,
        media_type="application/json",
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware that enforces role-based access control.

    - /api/admin/* routes require a staff token (admin or moderator)
    - /api/panel/* routes require an investor or partner token

    Finer checks (admin vs moderator, account still active) happen in
    the route dependencies.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        path = request.url.path

        is_admin_route = path.startswith("/api/admin")
        is_panel_route = path.startswith("/api/panel")
        if not (is_admin_route or is_panel_route):
            return await call_next(request)

        token = get_token_from_cookie(request)
        payload = verify_token(token) if token else None

        if not payload:
            return _json_error("Not authenticated", 401)

        role = payload.get("role")

        if is_admin_route and role not in STAFF_ROLES:
            logger.debug(f"Rejected {role} token on {path}")
            return _json_error("Staff access required", 403)

        if is_panel_route and role not in PARTICIPANT_ROLES:
            return _json_error("Investor or partner access required", 403)

        return await call_next(request)
