"""Production plan domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from src.core.common import utc_now


class PlanStatus(str, Enum):
    """Production plan lifecycle. Values are wire contracts."""

    PLANNED = "Planned"
    IN_PROGRESS = "In_Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class DetailStatus(str, Enum):
    """Production plan line lifecycle. Values are wire contracts."""

    PENDING = "Pending"
    IN_PROGRESS = "In_Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ProductionPlanDetail(BaseModel):
    """One product line of a production plan."""

    id: int | None = None
    plan_id: int | None = None
    product_id: int
    planned_quantity: float = Field(..., gt=0)
    actual_quantity: float = Field(default=0.0, ge=0)
    status: DetailStatus = DetailStatus.PENDING
    completed_at: datetime | None = None

    @model_validator(mode="after")
    def check_actual(self) -> "ProductionPlanDetail":
        if self.actual_quantity > self.planned_quantity:
            raise ValueError("actual_quantity cannot exceed planned_quantity")
        return self

    @property
    def is_closed(self) -> bool:
        return self.status in (DetailStatus.COMPLETED, DetailStatus.CANCELLED)


class ProductionPlan(BaseModel):
    """A dated plan listing what the kitchen should produce."""

    id: int | None = None
    plan_code: str = Field(..., min_length=1)
    plan_date: datetime = Field(default_factory=utc_now)
    note: str | None = None
    status: PlanStatus = PlanStatus.PLANNED
    details: list[ProductionPlanDetail] = Field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def detail_for(self, product_id: int) -> ProductionPlanDetail | None:
        for detail in self.details:
            if detail.product_id == product_id:
                return detail
        return None

    @property
    def open_details(self) -> list[ProductionPlanDetail]:
        """Details that are neither Completed nor Cancelled."""
        return [d for d in self.details if not d.is_closed]

    @property
    def is_ready_to_complete(self) -> bool:
        return not self.open_details
