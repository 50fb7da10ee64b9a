"""
Store order endpoints.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_orders
from src.application.dto.requests import CreateOrderRequest, UpdateOrderStatusRequest
from src.application.dto.responses import AllocationResponse, ErrorResponse, OrderResponse
from src.core.entities import OrderStatus
from src.core.services import OrderFulfillmentService, OrderLine

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def create_order(
    request: CreateOrderRequest,
    orders: OrderFulfillmentService = Depends(get_orders),
) -> OrderResponse:
    """Create a Pending order priced at current product prices."""
    order = await orders.create(
        store_id=request.store_id,
        items=[OrderLine(i.product_id, i.quantity) for i in request.items],
        requested_delivery_date=request.requested_delivery_date,
        notes=request.notes,
    )
    return OrderResponse.model_validate(order)


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    store_id: int | None = Query(default=None, gt=0),
    status: OrderStatus | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    orders: OrderFulfillmentService = Depends(get_orders),
) -> list[OrderResponse]:
    result = await orders.list_orders(
        store_id=store_id, status=status, limit=limit, offset=offset
    )
    return [OrderResponse.model_validate(o) for o in result]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: int,
    orders: OrderFulfillmentService = Depends(get_orders),
) -> OrderResponse:
    return OrderResponse.model_validate(await orders.get(order_id))


@router.put(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_order_status(
    order_id: int,
    request: UpdateOrderStatusRequest,
    orders: OrderFulfillmentService = Depends(get_orders),
) -> OrderResponse:
    """
    Approve, ship, receive or cancel an order.

    Shipping allocates finished goods earliest expiry first and fails as a
    whole when any item is short. Receiving credits the store inventory.
    """
    order = await orders.update_status(order_id, request.status, reason=request.reason)
    return OrderResponse.model_validate(order)


@router.get(
    "/{order_id}/allocations",
    response_model=list[AllocationResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_allocations(
    order_id: int,
    orders: OrderFulfillmentService = Depends(get_orders),
) -> list[AllocationResponse]:
    """Batches drawn when the order shipped."""
    return [AllocationResponse.model_validate(a) for a in await orders.allocations(order_id)]
