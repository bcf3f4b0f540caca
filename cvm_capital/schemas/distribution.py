"""Profit distribution schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from cvm_capital.services.distribution import DistributionPreview, DistributionResult
from cvm_capital.services.profit_config import ProfitSplit


class SplitOverride(BaseModel):
    """Ad-hoc split used instead of the saved configuration."""

    proportional_percentage: Decimal = Field(..., ge=0, le=100, decimal_places=4)
    exclusive_percentage: Decimal = Field(..., ge=0, le=100, decimal_places=4)

    def to_split(self) -> ProfitSplit:
        return ProfitSplit(
            proportional_percentage=self.proportional_percentage,
            exclusive_percentage=self.exclusive_percentage,
        )


class DistributionRequest(BaseModel):
    period_id: int
    profit_percentage: Decimal = Field(..., gt=0, le=100, decimal_places=4)
    split_override: Optional[SplitOverride] = None


class AllocationResponse(BaseModel):
    owner_kind: str
    owner_id: int
    name: str
    balance: Decimal
    capital_share: Decimal
    proportional_amount: Decimal
    exclusive_amount: Decimal
    total: Decimal


class DistributionPreviewResponse(BaseModel):
    period_id: int
    period_label: str
    profit_percentage: Decimal
    proportional_percentage: Decimal
    exclusive_percentage: Decimal
    configuration_id: Optional[int]
    total_capital: Decimal
    raw_total_capital: Decimal
    gross_profit: Decimal
    proportional_pool: Decimal
    exclusive_pool: Decimal
    active_partner_count: int
    exclusive_per_partner: Decimal
    allocated_total: Decimal
    unallocated: Decimal
    allocations: List[AllocationResponse]
    warnings: List[str]

    @classmethod
    def from_preview(cls, preview: DistributionPreview) -> "DistributionPreviewResponse":
        return cls(
            period_id=preview.period_id,
            period_label=preview.period_label,
            profit_percentage=preview.profit_percentage,
            proportional_percentage=preview.split.proportional_percentage,
            exclusive_percentage=preview.split.exclusive_percentage,
            configuration_id=preview.configuration_id,
            total_capital=preview.total_capital,
            raw_total_capital=preview.raw_total_capital,
            gross_profit=preview.gross_profit,
            proportional_pool=preview.proportional_pool,
            exclusive_pool=preview.exclusive_pool,
            active_partner_count=preview.active_partner_count,
            exclusive_per_partner=preview.exclusive_per_partner,
            allocated_total=preview.allocated_total,
            unallocated=preview.unallocated,
            allocations=[
                AllocationResponse(
                    owner_kind=a.owner_kind.value,
                    owner_id=a.owner_id,
                    name=a.name,
                    balance=a.balance,
                    capital_share=a.capital_share,
                    proportional_amount=a.proportional_amount,
                    exclusive_amount=a.exclusive_amount,
                    total=a.total,
                )
                for a in preview.allocations
            ],
            warnings=[f"{type(w).__name__}: {w}" for w in preview.warnings],
        )


class DistributionResultResponse(BaseModel):
    success: bool = True
    message: str
    processed_at: datetime
    entries_written: int
    notifications_sent: int
    distribution: DistributionPreviewResponse

    @classmethod
    def from_result(cls, result: DistributionResult) -> "DistributionResultResponse":
        preview = result.preview
        return cls(
            message=(
                f"Distributed {preview.allocated_total} of {preview.gross_profit} "
                f"for {preview.period_label} to {result.entries_written} accounts"
            ),
            processed_at=result.processed_at,
            entries_written=result.entries_written,
            notifications_sent=result.notifications_sent,
            distribution=DistributionPreviewResponse.from_preview(preview),
        )
