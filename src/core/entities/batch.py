"""Finished-goods batch entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.common import ensure_utc, utc_now


class BatchStatus(str, Enum):
    """Finished-goods batch status. Values are wire contracts."""

    ACTIVE = "Active"
    SOLD_OUT = "SoldOut"
    EXPIRED = "Expired"
    RECALLED = "Recalled"


class IngredientUsage(BaseModel):
    """Traceability record: how much of an ingredient batch went into a batch."""

    ingredient_batch_id: int
    quantity_used: float = Field(..., gt=0)
    batch_code: str | None = None  # filled on trace reads
    ingredient_id: int | None = None


class ProductBatch(BaseModel):
    """A finished-goods batch created by completing a production plan line."""

    id: int | None = None
    batch_code: str = Field(..., min_length=1)
    production_plan_id: int
    product_id: int
    manufacture_date: datetime
    expiry_date: datetime
    initial_quantity: float = Field(..., ge=0)
    current_quantity: float = Field(..., ge=0)
    status: BatchStatus = BatchStatus.ACTIVE
    ingredient_batches_used: list[IngredientUsage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("batch_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("manufacture_date", "expiry_date")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_dates_and_quantities(self) -> "ProductBatch":
        if self.expiry_date <= self.manufacture_date:
            raise ValueError("expiry_date must be after manufacture_date")
        if self.current_quantity > self.initial_quantity:
            raise ValueError("current_quantity cannot exceed initial_quantity")
        return self

    @property
    def fefo_key(self) -> tuple[datetime, datetime, str]:
        return (self.expiry_date, self.manufacture_date, self.batch_code)

    def is_expired(self, now: datetime) -> bool:
        return self.expiry_date < now

    def effective_status(self, now: datetime) -> BatchStatus:
        """Stored status with expiry applied at read time."""
        if self.status == BatchStatus.ACTIVE and self.is_expired(now):
            return BatchStatus.EXPIRED
        return self.status

    def is_available(self, now: datetime) -> bool:
        return self.effective_status(now) == BatchStatus.ACTIVE and self.current_quantity > 0
