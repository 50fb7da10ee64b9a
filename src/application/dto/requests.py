"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
Loosely typed client references are normalized here, so services only
ever receive integer ids.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from src.core.entities.order import OrderStatus
from src.core.entities.product import StoreStatus
from src.core.entities.production import PlanStatus


def normalize_entity_ref(value: Any) -> Any:
    """Accept ``12``, ``"12"`` or ``{"id": 12, "name": ...}`` as a reference."""
    if isinstance(value, bool):
        raise ValueError("reference must be an id, not a boolean")
    if isinstance(value, Mapping):
        if "id" not in value:
            raise ValueError("reference object must carry an 'id'")
        return normalize_entity_ref(value["id"])
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError(f"reference '{value}' is not a numeric id")
        return int(text)
    return value


EntityRef = Annotated[int, BeforeValidator(normalize_entity_ref), Field(gt=0)]


# Catalog
class RecipeLineRequest(BaseModel):
    ingredient_id: EntityRef = Field(..., description="Ingredient reference")
    quantity: float = Field(..., gt=0, description="Quantity per unit of product")


class CreateProductRequest(BaseModel):
    """Request to create a product with its recipe."""

    name: str = Field(..., min_length=1, examples=["Moon Cake"])
    sku: str = Field(..., min_length=1, examples=["MOONCAKE"])
    price: float = Field(default=0.0, ge=0)
    unit: str = Field(default="piece")
    shelf_life_days: int = Field(..., gt=0)
    recipe: list[RecipeLineRequest] = Field(default_factory=list)


class CreateStoreRequest(BaseModel):
    store_name: str = Field(..., min_length=1)
    store_code: str = Field(..., min_length=1, examples=["ST-001"])
    address: str = Field(default="")
    phone: str | None = None
    status: StoreStatus = StoreStatus.ACTIVE


# Ingredients
class CreateIngredientRequest(BaseModel):
    name: str = Field(..., min_length=1, examples=["Flour"])
    unit: str = Field(..., min_length=1, examples=["kg"])
    cost_price: float = Field(default=0.0, ge=0)
    warning_threshold: float | None = Field(
        default=None, ge=0, description="Low-stock threshold (default from settings)"
    )


class ReceiveBatchRequest(BaseModel):
    """Request to record a received ingredient batch."""

    batch_code: str = Field(..., min_length=1, examples=["FLOUR-2026-001"])
    quantity: float = Field(..., gt=0, description="Received quantity")
    expiry_date: datetime
    supplier_ref: str | None = None
    price: float = Field(default=0.0, ge=0)
    received_date: datetime | None = Field(
        default=None, description="Defaults to now"
    )


class ConsumeIngredientRequest(BaseModel):
    quantity: float = Field(..., gt=0)
    reference: str | None = Field(default=None, max_length=100)


# Production
class PlanDetailRequest(BaseModel):
    product_id: EntityRef
    planned_quantity: float = Field(..., gt=0)


class CreatePlanRequest(BaseModel):
    """Request to create a production plan."""

    plan_code: str = Field(..., min_length=1, examples=["PLAN-20260129-001"])
    plan_date: datetime | None = None
    note: str | None = Field(default=None, max_length=500)
    details: list[PlanDetailRequest] = Field(default_factory=list)


class UpdatePlanStatusRequest(BaseModel):
    status: PlanStatus = Field(..., description="Target plan status")


class CompleteItemRequest(BaseModel):
    """Complete one plan line with the quantity actually produced."""

    product_id: EntityRef
    actual_quantity: float = Field(..., description="Quantity produced")


class PlanItemRequest(BaseModel):
    product_id: EntityRef


# Orders
class OrderItemRequest(BaseModel):
    product_id: EntityRef
    quantity: float = Field(..., description="Requested quantity; zero lines are dropped")


class CreateOrderRequest(BaseModel):
    """Store replenishment order."""

    store_id: EntityRef
    items: list[OrderItemRequest] = Field(default_factory=list)
    requested_delivery_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus = Field(..., description="Target order status")
    reason: str | None = Field(
        default=None, max_length=500, description="Cancellation reason"
    )
