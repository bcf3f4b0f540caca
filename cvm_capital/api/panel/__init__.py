"""Participant panel API router aggregation."""

from fastapi import APIRouter

from cvm_capital.api.panel.account import router as account_router
from cvm_capital.api.panel.notifications import router as notifications_router
from cvm_capital.api.panel.requests import router as requests_router

panel_router = APIRouter(prefix="/panel", tags=["Panel"])

panel_router.include_router(account_router)
panel_router.include_router(requests_router)
panel_router.include_router(notifications_router)

__all__ = ["panel_router"]
