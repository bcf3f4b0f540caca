"""API router aggregation."""

from fastapi import APIRouter

from cvm_capital.api.admin import admin_router
from cvm_capital.api.auth import router as auth_router
from cvm_capital.api.health import router as health_router
from cvm_capital.api.panel import panel_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(admin_router)
api_router.include_router(panel_router)

__all__ = ["api_router"]
