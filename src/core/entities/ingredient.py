"""Raw ingredient domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.common import ensure_utc, utc_now


class MovementType(str, Enum):
    """Direction of an ingredient stock movement."""

    IN = "in"
    OUT = "out"


class Ingredient(BaseModel):
    """
    A raw material used in production (flour, salted egg, ...).

    On-hand quantity is deliberately absent: it is always summed from the
    ingredient's active batches at read time.
    """

    id: int | None = None
    name: str = Field(..., min_length=1)
    unit: str = Field(..., min_length=1)
    cost_price: float = Field(default=0.0, ge=0)
    warning_threshold: float = Field(default=10.0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("unit")
    @classmethod
    def normalize_unit(cls, v: str) -> str:
        return v.strip().lower()


class IngredientBatch(BaseModel):
    """A received lot of one ingredient, consumed first-expired-first-out."""

    id: int | None = None
    ingredient_id: int
    batch_code: str = Field(..., min_length=1)
    supplier_ref: str | None = None
    price: float = Field(default=0.0, ge=0)
    received_date: datetime = Field(default_factory=utc_now)
    expiry_date: datetime
    initial_quantity: float = Field(..., ge=0)
    current_quantity: float = Field(..., ge=0)
    is_active: bool = True
    emptied_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("batch_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("received_date", "expiry_date", "emptied_at", "created_at")
    @classmethod
    def to_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_quantities(self) -> "IngredientBatch":
        if self.current_quantity > self.initial_quantity:
            raise ValueError("current_quantity cannot exceed initial_quantity")
        return self

    @property
    def is_empty(self) -> bool:
        return self.current_quantity <= 0

    @property
    def consumed_quantity(self) -> float:
        return self.initial_quantity - self.current_quantity

    @property
    def fefo_key(self) -> tuple[datetime, datetime, str]:
        return (self.expiry_date, self.received_date, self.batch_code)

    def is_expired(self, now: datetime) -> bool:
        return self.expiry_date < now

    def is_available(self, now: datetime) -> bool:
        """Active, not expired and not empty."""
        return self.is_active and not self.is_empty and not self.is_expired(now)


class IngredientMovement(BaseModel):
    """Journal entry for a receipt or a consumption of one batch."""

    id: int | None = None
    ingredient_id: int
    ingredient_batch_id: int
    movement_type: MovementType
    quantity: float = Field(..., gt=0)
    reference: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
