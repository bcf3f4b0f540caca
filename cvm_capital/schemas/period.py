"""Accounting period schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class PeriodCreate(BaseModel):
    """
    Open a new period.

    Give either explicit ``start_date``/``end_date`` or a calendar
    ``month``/``year``; the label defaults to the month name.
    """

    sequence_number: Optional[int] = Field(None, ge=1)
    label: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000, le=2100)

    @model_validator(mode="after")
    def check_range_source(self):
        has_dates = self.start_date is not None and self.end_date is not None
        has_month = self.month is not None and self.year is not None
        if not has_dates and not has_month:
            raise ValueError("Provide start_date and end_date, or month and year")
        return self


class PeriodUpdate(BaseModel):
    """Correct a pending period."""

    sequence_number: Optional[int] = Field(None, ge=1)
    label: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PeriodResponse(BaseModel):
    """Accounting period with its distribution audit fields."""

    id: int
    sequence_number: int
    label: str
    start_date: date
    end_date: date
    processed: bool
    processed_at: Optional[datetime] = None
    processed_by_user_id: Optional[int] = None
    profit_percentage: Optional[Decimal] = None
    gross_profit_amount: Optional[Decimal] = None
    total_capital: Optional[Decimal] = None
    proportional_percentage: Optional[Decimal] = None
    exclusive_percentage: Optional[Decimal] = None
    profit_configuration_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PeriodListResponse(BaseModel):
    items: List[PeriodResponse]
    next_sequence_number: Optional[int]
    can_create: bool


class NextSequenceResponse(BaseModel):
    """``next_sequence_number`` is null while a period is pending."""

    next_sequence_number: Optional[int]
    can_create: bool


class PeriodDeleteResponse(BaseModel):
    success: bool
    deleted_entries: int
