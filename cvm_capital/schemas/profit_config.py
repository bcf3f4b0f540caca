"""Profit split configuration schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class ProfitConfigSave(BaseModel):
    """New proportional/exclusive split. Must add up to 100."""

    proportional_percentage: Decimal = Field(..., ge=0, le=100, decimal_places=4)
    exclusive_percentage: Decimal = Field(..., ge=0, le=100, decimal_places=4)
    description: Optional[str] = Field(None, max_length=255)


class ProfitConfigResponse(BaseModel):
    id: int
    proportional_percentage: Decimal
    exclusive_percentage: Decimal
    description: Optional[str] = None
    created_by_user_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfitConfigHistoryResponse(BaseModel):
    current: Optional[ProfitConfigResponse]
    history: List[ProfitConfigResponse]
