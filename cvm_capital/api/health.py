"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.db import get_db

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check.

    Returns 200 if the service is running.
    """
    return {"status": "healthy", "service": "cvm-capital"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness check with database connectivity.
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return {
            "status": "not_ready",
            "database": f"error: {e}",
        }

    return {
        "status": "ready",
        "database": "connected",
    }
