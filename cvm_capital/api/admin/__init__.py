"""Admin API router aggregation."""

from fastapi import APIRouter

from cvm_capital.api.admin.approvals import router as approvals_router
from cvm_capital.api.admin.audit import router as audit_router
from cvm_capital.api.admin.dashboard import router as dashboard_router
from cvm_capital.api.admin.distribution import router as distribution_router
from cvm_capital.api.admin.ledger import router as ledger_router
from cvm_capital.api.admin.participants import router as participants_router
from cvm_capital.api.admin.periods import router as periods_router
from cvm_capital.api.admin.profit_config import router as profit_config_router

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(dashboard_router)
admin_router.include_router(periods_router)
admin_router.include_router(distribution_router)
admin_router.include_router(profit_config_router)
admin_router.include_router(approvals_router)
admin_router.include_router(ledger_router)
admin_router.include_router(participants_router)
admin_router.include_router(audit_router)

__all__ = ["admin_router"]
