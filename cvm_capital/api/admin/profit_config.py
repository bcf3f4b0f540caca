"""Admin profit split configuration API endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import require_admin, require_staff
from cvm_capital.db import get_db
from cvm_capital.models import AuditAction, User
from cvm_capital.schemas.profit_config import (
    ProfitConfigHistoryResponse,
    ProfitConfigResponse,
    ProfitConfigSave,
)
from cvm_capital.services import profit_config
from cvm_capital.services.errors import CapitalError, NotFoundError
from cvm_capital.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/profit-config")


@router.get("", response_model=ProfitConfigResponse)
async def get_current_config(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """The split new distributions will use."""
    config = await profit_config.get_current_config(db)
    if config is None:
        raise_http_error(NotFoundError("No profit configuration has been saved"))
    return ProfitConfigResponse.model_validate(config)


@router.get("/history", response_model=ProfitConfigHistoryResponse)
async def get_config_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
    limit: int = Query(50, ge=1, le=200),
):
    history = await profit_config.list_config_history(db, limit=limit)
    return ProfitConfigHistoryResponse(
        current=ProfitConfigResponse.model_validate(history[0]) if history else None,
        history=[ProfitConfigResponse.model_validate(c) for c in history],
    )


@router.post("", response_model=ProfitConfigResponse, status_code=201)
async def save_config(
    request: Request,
    data: ProfitConfigSave,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Save a new split. Earlier configurations are kept as history."""
    try:
        config = await profit_config.save_config(
            db,
            proportional=data.proportional_percentage,
            exclusive=data.exclusive_percentage,
            description=data.description,
            user_id=current_user.id,
        )
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.SAVE_PROFIT_CONFIG,
        target_type="profit_configuration",
        target_id=config.id,
        action_metadata={
            "proportional_percentage": str(config.proportional_percentage),
            "exclusive_percentage": str(config.exclusive_percentage),
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(config)

    return ProfitConfigResponse.model_validate(config)
