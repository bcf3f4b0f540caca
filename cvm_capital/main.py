"""
CVM Capital - investor and partner capital management.

Main FastAPI application with:
- Role-based authentication (admin/moderator, investor/partner)
- Admin API: periods, profit distribution, approvals, ledger
- Participant panel API: balance, history, requests, notifications
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital import __version__
from cvm_capital.api import api_router
from cvm_capital.auth.middleware import AuthMiddleware
from cvm_capital.config import settings
from cvm_capital.db import get_db_context
from cvm_capital.models import User, UserRole
from cvm_capital.services import profit_config
from cvm_capital.utils.password import hash_password

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def ensure_initial_data(db: AsyncSession) -> None:
    """
    Create the administrator account and the first profit configuration
    if the database has neither.
    """
    result = await db.execute(
        select(User).where(User.role == UserRole.ADMIN).limit(1)
    )
    admin = result.scalar_one_or_none()

    if not admin:
        logger.info("Creating administrator account...")
        db.add(
            User(
                username=settings.admin_username,
                password_hash=hash_password(settings.admin_password),
                role=UserRole.ADMIN,
                display_name="Administrator",
                is_active=True,
            )
        )
        logger.info(f"Administrator account created: {settings.admin_username}")

    if await profit_config.get_current_config(db) is None:
        await profit_config.save_config(
            db,
            proportional=settings.default_proportional_percentage,
            exclusive=settings.default_exclusive_percentage,
            description="Initial configuration",
        )

    await db.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Creates the administrator account if not exists
    - Saves the default profit split if none exists
    """
    logger.info("Starting CVM Capital...")

    async with get_db_context() as db:
        await ensure_initial_data(db)

    logger.info("CVM Capital started successfully!")

    yield

    logger.info("Shutting down CVM Capital...")


# Create FastAPI application
app = FastAPI(
    title="CVM Capital",
    description="Investor and partner capital management",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# Add authentication middleware
app.add_middleware(AuthMiddleware)

# Include routers
app.include_router(api_router)  # /api/* endpoints


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cvm_capital.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
