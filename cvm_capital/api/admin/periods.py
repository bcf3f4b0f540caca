"""Admin accounting period API endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cvm_capital.api.errors import raise_http_error
from cvm_capital.auth.dependencies import require_admin, require_staff
from cvm_capital.db import get_db
from cvm_capital.models import AuditAction, User
from cvm_capital.schemas.period import (
    NextSequenceResponse,
    PeriodCreate,
    PeriodDeleteResponse,
    PeriodListResponse,
    PeriodResponse,
    PeriodUpdate,
)
from cvm_capital.services import periods
from cvm_capital.services.errors import CapitalError, NotFoundError, ValidationError
from cvm_capital.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/periods")


@router.get("", response_model=PeriodListResponse)
async def list_periods(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """All periods by sequence number, with the number the next one would get."""
    items = await periods.list_periods(db)
    next_number = await periods.next_available_sequence_number(db)
    return PeriodListResponse(
        items=[PeriodResponse.model_validate(p) for p in items],
        next_sequence_number=next_number,
        can_create=next_number is not None,
    )


@router.get("/current", response_model=PeriodResponse)
async def get_current_period(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """The pending period, or the latest processed one."""
    period = await periods.get_current_period(db)
    if period is None:
        raise_http_error(NotFoundError("No accounting period has been created yet"))
    return PeriodResponse.model_validate(period)


@router.get("/next-sequence", response_model=NextSequenceResponse)
async def get_next_sequence(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    next_number = await periods.next_available_sequence_number(db)
    return NextSequenceResponse(
        next_sequence_number=next_number,
        can_create=next_number is not None,
    )


@router.get("/{period_id}", response_model=PeriodResponse)
async def get_period(
    period_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    try:
        period = await periods.get_period(db, period_id)
    except CapitalError as e:
        raise_http_error(e)
    return PeriodResponse.model_validate(period)


@router.post("", response_model=PeriodResponse, status_code=201)
async def create_period(
    request: Request,
    data: PeriodCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Open a new pending period.

    A calendar month fills in the dates and default label; the sequence
    number defaults to the lowest free one.
    """
    try:
        start_date, end_date, label = data.start_date, data.end_date, data.label
        if start_date is None or end_date is None:
            start_date, end_date, month_label = periods.month_range(data.month, data.year)
            label = label or month_label

        sequence_number = data.sequence_number
        if sequence_number is None:
            sequence_number = await periods.next_available_sequence_number(db)
            if sequence_number is None:
                raise ValidationError(periods.PENDING_PERIOD_MESSAGE)

        period = await periods.create_period(
            db,
            sequence_number=sequence_number,
            label=label,
            start_date=start_date,
            end_date=end_date,
            user_id=current_user.id,
        )
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.CREATE_PERIOD,
        target_type="period",
        target_id=period.id,
        action_metadata={
            "sequence_number": period.sequence_number,
            "label": period.label,
            "start_date": period.start_date.isoformat(),
            "end_date": period.end_date.isoformat(),
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(period)

    return PeriodResponse.model_validate(period)


@router.patch("/{period_id}", response_model=PeriodResponse)
async def update_period(
    request: Request,
    period_id: int,
    data: PeriodUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Correct a pending period."""
    changes = data.model_dump(exclude_unset=True)
    try:
        period = await periods.update_period(db, period_id, **changes)
    except CapitalError as e:
        raise_http_error(e)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_PERIOD,
        target_type="period",
        target_id=period.id,
        action_metadata={key: str(value) for key, value in changes.items()},
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(period)

    return PeriodResponse.model_validate(period)


@router.delete("/{period_id}", response_model=PeriodDeleteResponse)
async def delete_period(
    request: Request,
    period_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Delete a period together with the profit entries it produced."""
    try:
        period = await periods.get_period(db, period_id)
        await log_action(
            db=db,
            user_id=current_user.id,
            action=AuditAction.DELETE_PERIOD,
            target_type="period",
            target_id=period_id,
            action_metadata={
                "sequence_number": period.sequence_number,
                "label": period.label,
                "processed": period.processed,
            },
            ip_address=get_client_ip(request),
        )
        removed = await periods.delete_period(db, period_id)
    except CapitalError as e:
        raise_http_error(e)

    return PeriodDeleteResponse(success=True, deleted_entries=removed)
