"""
Ingredient ledger endpoints.

Receipts, FEFO consumption and on-hand queries for raw ingredients.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_ledger
from src.application.dto.requests import (
    ConsumeIngredientRequest,
    CreateIngredientRequest,
    ReceiveBatchRequest,
)
from src.application.dto.responses import (
    BatchDrawResponse,
    ConsumeResponse,
    ErrorResponse,
    IngredientBatchResponse,
    IngredientResponse,
    MovementResponse,
    OnHandResponse,
)
from src.core.services import IngredientLedgerService

router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])


@router.post(
    "",
    response_model=IngredientResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_ingredient(
    request: CreateIngredientRequest,
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> IngredientResponse:
    ingredient = await ledger.create_ingredient(
        name=request.name,
        unit=request.unit,
        cost_price=request.cost_price,
        warning_threshold=request.warning_threshold,
    )
    return IngredientResponse.model_validate(ingredient)


@router.get("", response_model=list[IngredientResponse])
async def list_ingredients(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> list[IngredientResponse]:
    ingredients = await ledger.list_ingredients(limit=limit, offset=offset)
    return [IngredientResponse.model_validate(i) for i in ingredients]


@router.get(
    "/{ingredient_id}",
    response_model=IngredientResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_ingredient(
    ingredient_id: int,
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> IngredientResponse:
    return IngredientResponse.model_validate(await ledger.get_ingredient(ingredient_id))


@router.get(
    "/{ingredient_id}/on-hand",
    response_model=OnHandResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_on_hand(
    ingredient_id: int,
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> OnHandResponse:
    """Usable quantity: active, unexpired, non-empty batches in FEFO order."""
    on_hand = await ledger.get_on_hand(ingredient_id)
    return OnHandResponse(
        ingredient=IngredientResponse.model_validate(on_hand.ingredient),
        total_quantity=on_hand.total_quantity,
        is_low_stock=on_hand.is_low_stock,
        batches=[IngredientBatchResponse.model_validate(b) for b in on_hand.batches],
    )


@router.post(
    "/{ingredient_id}/batches",
    response_model=IngredientBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def receive_batch(
    ingredient_id: int,
    request: ReceiveBatchRequest,
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> IngredientBatchResponse:
    """Record a supplier delivery as a new batch."""
    batch = await ledger.receive_batch(
        ingredient_id=ingredient_id,
        batch_code=request.batch_code,
        quantity=request.quantity,
        expiry_date=request.expiry_date,
        supplier_ref=request.supplier_ref,
        price=request.price,
        received_date=request.received_date,
    )
    return IngredientBatchResponse.model_validate(batch)


@router.get(
    "/{ingredient_id}/batches",
    response_model=list[IngredientBatchResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_batches(
    ingredient_id: int,
    include_inactive: bool = False,
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> list[IngredientBatchResponse]:
    batches = await ledger.list_batches(ingredient_id, include_inactive=include_inactive)
    return [IngredientBatchResponse.model_validate(b) for b in batches]


@router.post(
    "/{ingredient_id}/consume",
    response_model=ConsumeResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def consume(
    ingredient_id: int,
    request: ConsumeIngredientRequest,
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> ConsumeResponse:
    """Consume stock earliest-expiry first. All or nothing."""
    draws = await ledger.reserve_and_consume(
        ingredient_id, request.quantity, reference=request.reference
    )
    return ConsumeResponse(
        ingredient_id=ingredient_id,
        quantity=request.quantity,
        draws=[
            BatchDrawResponse(
                batch_id=d.batch_id,
                batch_code=d.batch.batch_code,
                quantity=d.quantity,
                remaining=d.remaining,
            )
            for d in draws
        ],
    )


@router.post(
    "/batches/{batch_id}/deactivate",
    response_model=IngredientBatchResponse,
    responses={404: {"model": ErrorResponse}},
)
async def deactivate_batch(
    batch_id: int,
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> IngredientBatchResponse:
    return IngredientBatchResponse.model_validate(await ledger.deactivate_batch(batch_id))


@router.get(
    "/{ingredient_id}/movements",
    response_model=list[MovementResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_movements(
    ingredient_id: int,
    limit: int = Query(default=100, ge=1, le=1000),
    ledger: IngredientLedgerService = Depends(get_ledger),
) -> list[MovementResponse]:
    movements = await ledger.list_movements(ingredient_id, limit=limit)
    return [MovementResponse.model_validate(m) for m in movements]
