"""
Inventory and demand views.

Every figure is recomputed from batches at request time.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_inventory
from src.application.dto.responses import (
    ErrorResponse,
    IngredientBatchResponse,
    IngredientStockResponse,
    ProductBatchResponse,
    ProductDemandResponse,
    ProductStockResponse,
    StoreProductStockResponse,
)
from src.core.common import utc_now
from src.core.services import IngredientStock, InventoryViewService

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


def _stock_response(stock: IngredientStock) -> IngredientStockResponse:
    return IngredientStockResponse(
        ingredient_id=stock.ingredient.id,  # type: ignore[arg-type]
        name=stock.ingredient.name,
        unit=stock.ingredient.unit,
        total_quantity=stock.total_quantity,
        warning_threshold=stock.ingredient.warning_threshold,
        batch_count=stock.batch_count,
        is_low_stock=stock.is_low_stock,
    )


@router.get(
    "/store/{store_id}",
    response_model=list[StoreProductStockResponse],
    responses={404: {"model": ErrorResponse}},
)
async def store_inventory(
    store_id: int,
    view: InventoryViewService = Depends(get_inventory),
) -> list[StoreProductStockResponse]:
    """What a store holds, per product, with the nearest expiry."""
    lines = await view.store_inventory(store_id)
    return [StoreProductStockResponse.model_validate(line) for line in lines]


@router.get("/ingredients", response_model=list[IngredientStockResponse])
async def ingredient_stock(
    view: InventoryViewService = Depends(get_inventory),
) -> list[IngredientStockResponse]:
    return [_stock_response(s) for s in await view.ingredient_stock()]


@router.get("/low-stock", response_model=list[IngredientStockResponse])
async def low_stock(
    view: InventoryViewService = Depends(get_inventory),
) -> list[IngredientStockResponse]:
    """Ingredients whose available quantity is under their warning threshold."""
    return [_stock_response(s) for s in await view.low_stock_ingredients()]


@router.get(
    "/expiring",
    response_model=list[ProductBatchResponse],
    responses={400: {"model": ErrorResponse}},
)
async def expiring_batches(
    days: int | None = Query(default=None, ge=0),
    view: InventoryViewService = Depends(get_inventory),
) -> list[ProductBatchResponse]:
    """Finished-goods batches expiring within ``days`` (default from settings)."""
    now = utc_now()
    batches = await view.expiring_batches(within_days=days)
    return [ProductBatchResponse.from_batch(b, now) for b in batches]


@router.get("/expiring-ingredients", response_model=list[IngredientBatchResponse])
async def expiring_ingredient_batches(
    days: int | None = Query(default=None, ge=0),
    view: InventoryViewService = Depends(get_inventory),
) -> list[IngredientBatchResponse]:
    batches = await view.expiring_ingredient_batches(within_days=days)
    return [IngredientBatchResponse.model_validate(b) for b in batches]


@router.get("/products", response_model=list[ProductStockResponse])
async def product_stock(
    product_id: int | None = Query(default=None, gt=0),
    view: InventoryViewService = Depends(get_inventory),
) -> list[ProductStockResponse]:
    """Allocatable finished goods held at the kitchen."""
    return [ProductStockResponse.model_validate(s) for s in await view.product_stock(product_id)]


@router.get(
    "/demand",
    response_model=list[ProductDemandResponse],
    responses={400: {"model": ErrorResponse}},
)
async def daily_demand(
    start: datetime | None = None,
    end: datetime | None = None,
    view: InventoryViewService = Depends(get_inventory),
) -> list[ProductDemandResponse]:
    """Quantity requested by open orders, largest first."""
    demand = await view.daily_demand(start=start, end=end)
    return [ProductDemandResponse.model_validate(d) for d in demand]
