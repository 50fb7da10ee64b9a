"""Store replenishment order entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field, model_validator

from src.core.common import utc_now


class OrderStatus(str, Enum):
    """Order lifecycle. Values are wire contracts."""

    PENDING = "Pending"
    APPROVED = "Approved"
    SHIPPED = "Shipped"
    RECEIVED = "Received"
    CANCELLED = "Cancelled"


class OrderItem(BaseModel):
    """A product line on an order, priced at order time."""

    id: int | None = None
    order_id: int | None = None
    product_id: int
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    subtotal: float = 0.0

    @model_validator(mode="after")
    def compute_subtotal(self) -> "OrderItem":
        """Subtotal always follows quantity and unit price."""
        self.subtotal = round(self.quantity * self.unit_price, 2)
        return self


class Order(BaseModel):
    """A store's replenishment order to the central kitchen."""

    id: int | None = None
    order_code: str
    store_id: int
    status: OrderStatus = OrderStatus.PENDING
    requested_delivery_date: datetime
    items: list[OrderItem] = Field(default_factory=list)
    notes: str | None = Field(default=None, max_length=500)
    cancellation_reason: str | None = Field(default=None, max_length=500)
    approved_at: datetime | None = None
    shipped_at: datetime | None = None
    received_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_amount(self) -> float:
        """Sum of item subtotals. Never stored on its own."""
        return sum(item.subtotal for item in self.items)


class OrderAllocation(BaseModel):
    """Quantity of a finished-goods batch shipped against an order."""

    id: int | None = None
    order_id: int
    product_id: int
    product_batch_id: int
    quantity: float = Field(..., gt=0)
    created_at: datetime = Field(default_factory=utc_now)
