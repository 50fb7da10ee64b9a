"""Finished product and store reference entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from src.core.common import utc_now


class RecipeLine(BaseModel):
    """Quantity of one ingredient needed per unit of product."""

    ingredient_id: int
    quantity: float = Field(..., gt=0)


class Product(BaseModel):
    """A finished good produced by the kitchen and ordered by stores."""

    id: int | None = None
    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    price: float = Field(default=0.0, ge=0)
    unit: str = "piece"
    shelf_life_days: int = Field(..., gt=0)
    recipe: list[RecipeLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v: str) -> str:
        return v.strip().upper()


class StoreStatus(str, Enum):
    """Operating status of a store."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    MAINTENANCE = "Maintenance"


class Store(BaseModel):
    """A physical store that orders from the central kitchen."""

    id: int | None = None
    store_name: str = Field(..., min_length=1)
    store_code: str = Field(..., min_length=1)
    address: str = ""
    phone: str | None = None
    status: StoreStatus = StoreStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("store_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class StoreInventoryLine(BaseModel):
    """Quantity of one finished-goods batch held at a store."""

    id: int | None = None
    store_id: int
    product_id: int
    product_batch_id: int
    quantity: float = Field(..., ge=0)
    expiry_date: datetime | None = None  # joined from the batch on read
    last_updated: datetime = Field(default_factory=utc_now)
