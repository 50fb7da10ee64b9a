"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
Most are validated straight from core entities (``from_attributes``);
batch responses need the clock to report effective status.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.core.common import utc_now
from src.core.entities import (
    DetailStatus,
    MovementType,
    OrderStatus,
    PlanStatus,
    ProductBatch,
    StoreStatus,
)


class _FromEntity(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Catalog
class RecipeLineResponse(_FromEntity):
    ingredient_id: int
    quantity: float


class ProductResponse(_FromEntity):
    id: int
    name: str
    sku: str
    price: float
    unit: str
    shelf_life_days: int
    recipe: list[RecipeLineResponse]
    created_at: datetime


class StoreResponse(_FromEntity):
    id: int
    store_name: str
    store_code: str
    address: str
    phone: str | None
    status: StoreStatus
    created_at: datetime


# Ingredients
class IngredientResponse(_FromEntity):
    id: int
    name: str
    unit: str
    cost_price: float
    warning_threshold: float
    created_at: datetime
    updated_at: datetime


class IngredientBatchResponse(_FromEntity):
    id: int
    ingredient_id: int
    batch_code: str
    supplier_ref: str | None
    price: float
    received_date: datetime
    expiry_date: datetime
    initial_quantity: float
    current_quantity: float
    is_active: bool
    is_empty: bool
    emptied_at: datetime | None


class OnHandResponse(BaseModel):
    """Available stock of an ingredient, batches in FEFO order."""

    ingredient: IngredientResponse
    total_quantity: float = Field(..., description="Sum over available batches")
    is_low_stock: bool
    batches: list[IngredientBatchResponse]


class BatchDrawResponse(BaseModel):
    batch_id: int
    batch_code: str
    quantity: float = Field(..., description="Quantity taken from the batch")
    remaining: float = Field(..., description="Batch quantity left after the draw")


class ConsumeResponse(BaseModel):
    ingredient_id: int
    quantity: float
    draws: list[BatchDrawResponse]


class MovementResponse(_FromEntity):
    id: int
    ingredient_id: int
    ingredient_batch_id: int
    movement_type: MovementType
    quantity: float
    reference: str | None
    created_at: datetime


# Production
class PlanDetailResponse(_FromEntity):
    id: int
    product_id: int
    planned_quantity: float
    actual_quantity: float
    status: DetailStatus
    completed_at: datetime | None


class PlanResponse(_FromEntity):
    id: int
    plan_code: str
    plan_date: datetime
    note: str | None
    status: PlanStatus
    details: list[PlanDetailResponse]
    started_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime
    updated_at: datetime


class IngredientUsageResponse(_FromEntity):
    ingredient_batch_id: int
    quantity_used: float
    batch_code: str | None = None
    ingredient_id: int | None = None


class ProductBatchResponse(BaseModel):
    """Finished-goods batch with status evaluated at response time."""

    id: int
    batch_code: str
    production_plan_id: int
    product_id: int
    manufacture_date: datetime
    expiry_date: datetime
    initial_quantity: float
    current_quantity: float
    status: str = Field(..., description="Effective status: Active past expiry reads Expired")
    stored_status: str
    is_expired: bool
    ingredient_batches_used: list[IngredientUsageResponse] = Field(default_factory=list)

    @classmethod
    def from_batch(cls, batch: ProductBatch, now: datetime | None = None) -> "ProductBatchResponse":
        now = now or utc_now()
        return cls(
            id=batch.id,  # type: ignore[arg-type]
            batch_code=batch.batch_code,
            production_plan_id=batch.production_plan_id,
            product_id=batch.product_id,
            manufacture_date=batch.manufacture_date,
            expiry_date=batch.expiry_date,
            initial_quantity=batch.initial_quantity,
            current_quantity=batch.current_quantity,
            status=batch.effective_status(now).value,
            stored_status=batch.status.value,
            is_expired=batch.is_expired(now),
            ingredient_batches_used=[
                IngredientUsageResponse.model_validate(u) for u in batch.ingredient_batches_used
            ],
        )


class CompletionResponse(BaseModel):
    plan: PlanResponse
    detail: PlanDetailResponse
    batch: ProductBatchResponse


class BatchTraceResponse(BaseModel):
    batch: ProductBatchResponse
    plan_code: str | None
    ingredients: list[IngredientUsageResponse]


# Orders
class OrderItemResponse(_FromEntity):
    id: int
    product_id: int
    quantity: float
    unit_price: float
    subtotal: float


class OrderResponse(_FromEntity):
    id: int
    order_code: str
    store_id: int
    status: OrderStatus
    requested_delivery_date: datetime
    items: list[OrderItemResponse]
    total_amount: float = Field(..., description="Sum of item subtotals")
    notes: str | None
    cancellation_reason: str | None
    approved_at: datetime | None
    shipped_at: datetime | None
    received_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime
    updated_at: datetime


class AllocationResponse(_FromEntity):
    id: int
    order_id: int
    product_id: int
    product_batch_id: int
    quantity: float
    created_at: datetime


# Inventory views
class IngredientStockResponse(BaseModel):
    ingredient_id: int
    name: str
    unit: str
    total_quantity: float
    warning_threshold: float
    batch_count: int
    is_low_stock: bool


class StoreProductStockResponse(_FromEntity):
    product_id: int
    total_quantity: float
    batch_count: int
    earliest_expiry: datetime | None
    is_expiring_soon: bool


class ProductStockResponse(_FromEntity):
    product_id: int
    total_quantity: float
    batch_count: int


class ProductDemandResponse(_FromEntity):
    product_id: int
    total_quantity: float
    order_count: int
    order_codes: list[str]


class HealthResponse(BaseModel):
    status: str = Field(..., description="healthy | degraded | unhealthy")
    version: str
    environment: str
    database: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: Any = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=utc_now)
