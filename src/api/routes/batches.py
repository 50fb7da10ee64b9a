"""
Finished-goods batch endpoints.

Statuses are reported as of the request: an Active batch past its
expiry date reads Expired.
"""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_batches
from src.application.dto.responses import (
    BatchTraceResponse,
    ErrorResponse,
    IngredientUsageResponse,
    ProductBatchResponse,
)
from src.core.common import utc_now
from src.core.entities import BatchStatus
from src.core.services import BatchRegistryService

router = APIRouter(prefix="/api/batches", tags=["batches"])


@router.get("/active", response_model=list[ProductBatchResponse])
async def list_active(
    product_id: int = Query(..., gt=0),
    registry: BatchRegistryService = Depends(get_batches),
) -> list[ProductBatchResponse]:
    """Allocatable batches of a product, earliest expiry first."""
    now = utc_now()
    batches = await registry.list_active(product_id)
    return [ProductBatchResponse.from_batch(b, now) for b in batches]


@router.get("", response_model=list[ProductBatchResponse])
async def list_batches(
    product_id: int | None = Query(default=None, gt=0),
    status: BatchStatus | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    registry: BatchRegistryService = Depends(get_batches),
) -> list[ProductBatchResponse]:
    now = utc_now()
    batches = await registry.list_batches(
        product_id=product_id, status=status, limit=limit, offset=offset
    )
    return [ProductBatchResponse.from_batch(b, now) for b in batches]


@router.get(
    "/{batch_id}",
    response_model=ProductBatchResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_batch(
    batch_id: int,
    registry: BatchRegistryService = Depends(get_batches),
) -> ProductBatchResponse:
    return ProductBatchResponse.from_batch(await registry.get_batch(batch_id))


@router.get(
    "/{batch_id}/trace",
    response_model=BatchTraceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def trace_batch(
    batch_id: int,
    registry: BatchRegistryService = Depends(get_batches),
) -> BatchTraceResponse:
    """Ingredient batches consumed to produce this batch."""
    trace = await registry.trace(batch_id)
    return BatchTraceResponse(
        batch=ProductBatchResponse.from_batch(trace.batch),
        plan_code=trace.plan_code,
        ingredients=[IngredientUsageResponse.model_validate(u) for u in trace.ingredients],
    )


@router.post(
    "/{batch_id}/recall",
    response_model=ProductBatchResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def recall_batch(
    batch_id: int,
    registry: BatchRegistryService = Depends(get_batches),
) -> ProductBatchResponse:
    return ProductBatchResponse.from_batch(await registry.recall(batch_id))
