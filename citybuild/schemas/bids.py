from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from citybuild.models.enums import BidStatus
from citybuild.schemas.primitives import CamelModel, Money, NonNegInt, Percent, Rating, UtcDatetime


class Bid(CamelModel):
    id: str = Field(..., min_length=1)
    project_id: str
    subcontractor_id: str
    amount: Money
    timeline: str
    description: str
    status: BidStatus = BidStatus.pending
    submitted_at: UtcDatetime

    # cost breakdown captured by the submission form (all optional)
    trade_specialization: Optional[str] = None
    labor_cost: Optional[Money] = None
    material_cost: Optional[Money] = None
    equipment_cost: Optional[Money] = None
    contingency_percent: Optional[Percent] = None
    warranty_months: Optional[NonNegInt] = None
    start_date: Optional[date] = None
    completion_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class ContractorSnapshot(CamelModel):
    """
    Denormalized contractor view embedded in a bid for review.
    Not persisted on its own.
    """

    id: str
    name: str
    rating: Rating = 0
    completed_projects: NonNegInt = 0
    on_time_rate: Percent = 0
    specializations: List[str] = Field(default_factory=list)


class BidWithContractor(Bid):
    contractor: ContractorSnapshot


class BidCreate(CamelModel):
    project_id: str = Field(..., min_length=1)
    subcontractor_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, description="Bid amount; must be greater than 0")
    timeline: str
    description: str

    trade_specialization: Optional[str] = None
    labor_cost: Optional[Money] = None
    material_cost: Optional[Money] = None
    equipment_cost: Optional[Money] = None
    contingency_percent: Optional[Percent] = None
    warranty_months: Optional[NonNegInt] = 12
    start_date: Optional[date] = None
    completion_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("timeline", "description")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def _completion_after_start(self):
        if self.start_date and self.completion_date:
            if self.completion_date <= self.start_date:
                raise ValueError("Completion date must be after start date.")
        return self


class BidUpdate(CamelModel):
    amount: Optional[Money] = None
    timeline: Optional[str] = None
    description: Optional[str] = None
    status: Optional[BidStatus] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class BidRejectRequest(CamelModel):
    feedback: Optional[str] = Field(default=None, max_length=2000)


class ClarificationRequest(CamelModel):
    message: str = Field(..., min_length=1, max_length=2000)


class BidStatistics(CamelModel):
    count: int = 0
    lowest: float = 0
    highest: float = 0
    average_amount: float = 0
    average_rating: float = 0


class BidCostBreakdown(CamelModel):
    subtotal: float
    contingency_amount: float
    total: float


class BidReviewResponse(CamelModel):
    project_id: str
    sort_by: str
    bids: List[BidWithContractor]
    statistics: BidStatistics
