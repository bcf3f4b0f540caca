"""Admin profit distribution API endpoints."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import require_admin, require_staff
from cvm_capital.db import get_db
from cvm_capital.models import AuditAction, User
from cvm_capital.schemas.distribution import (
    DistributionPreviewResponse,
    DistributionRequest,
    DistributionResultResponse,
)
from cvm_capital.services import distribution
from cvm_capital.services.errors import CapitalError
from cvm_capital.utils.audit import get_client_ip, log_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/distribution")


def _split_override(data: DistributionRequest):
    return data.split_override.to_split() if data.split_override else None


@router.post("/preview", response_model=DistributionPreviewResponse)
async def preview_distribution(
    data: DistributionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Compute what each participant would receive. Writes nothing."""
    try:
        preview = await distribution.preview_distribution(
            db,
            period_id=data.period_id,
            profit_percentage=data.profit_percentage,
            split_override=_split_override(data),
        )
    except CapitalError as e:
        raise_http_error(e)

    return DistributionPreviewResponse.from_preview(preview)


@router.post("/commit", response_model=DistributionResultResponse)
async def commit_distribution(
    request: Request,
    data: DistributionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Distribute the period's profit and mark it processed.

    The audit record is written in the same transaction as the entries.
    """
    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.COMMIT_DISTRIBUTION,
        target_type="period",
        target_id=data.period_id,
        action_metadata={
            "profit_percentage": str(data.profit_percentage),
            "split_override": (
                {
                    "proportional_percentage": str(data.split_override.proportional_percentage),
                    "exclusive_percentage": str(data.split_override.exclusive_percentage),
                }
                if data.split_override
                else None
            ),
        },
        ip_address=get_client_ip(request),
    )

    try:
        result = await distribution.commit_distribution(
            db,
            period_id=data.period_id,
            profit_percentage=data.profit_percentage,
            split_override=_split_override(data),
            user_id=current_user.id,
        )
    except CapitalError as e:
        raise_http_error(e)

    logger.info(
        f"User {current_user.username} distributed {result.preview.gross_profit} "
        f"for period {data.period_id}"
    )
    return DistributionResultResponse.from_result(result)
