"""
Production plan endpoints.

Plan lifecycle plus per-item start, completion and cancellation.
Completing an item consumes ingredients and creates the finished batch.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_production
from src.application.dto.requests import (
    CompleteItemRequest,
    CreatePlanRequest,
    PlanItemRequest,
    UpdatePlanStatusRequest,
)
from src.application.dto.responses import (
    CompletionResponse,
    ErrorResponse,
    PlanDetailResponse,
    PlanResponse,
    ProductBatchResponse,
)
from src.core.entities import PlanStatus
from src.core.services import PlanLine, ProductionEngineService

router = APIRouter(prefix="/api/production-plans", tags=["production"])


@router.post(
    "",
    response_model=PlanResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_plan(
    request: CreatePlanRequest,
    engine: ProductionEngineService = Depends(get_production),
) -> PlanResponse:
    """Create a Planned production plan."""
    plan = await engine.create_plan(
        plan_code=request.plan_code,
        details=[PlanLine(d.product_id, d.planned_quantity) for d in request.details],
        plan_date=request.plan_date,
        note=request.note,
    )
    return PlanResponse.model_validate(plan)


@router.get("", response_model=list[PlanResponse])
async def list_plans(
    status: PlanStatus | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    engine: ProductionEngineService = Depends(get_production),
) -> list[PlanResponse]:
    plans = await engine.list_plans(status=status, limit=limit, offset=offset)
    return [PlanResponse.model_validate(p) for p in plans]


@router.get(
    "/{plan_id}",
    response_model=PlanResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_plan(
    plan_id: int,
    engine: ProductionEngineService = Depends(get_production),
) -> PlanResponse:
    return PlanResponse.model_validate(await engine.get_plan(plan_id))


@router.patch(
    "/{plan_id}/status",
    response_model=PlanResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_plan_status(
    plan_id: int,
    request: UpdatePlanStatusRequest,
    engine: ProductionEngineService = Depends(get_production),
) -> PlanResponse:
    """
    Move the plan along Planned -> In_Progress -> Completed.

    Completing requires every item to be Completed or Cancelled.
    Cancelling also cancels the items still open.
    """
    plan = await engine.update_status(plan_id, request.status)
    return PlanResponse.model_validate(plan)


@router.post(
    "/{plan_id}/complete-item",
    response_model=CompletionResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def complete_item(
    plan_id: int,
    request: CompleteItemRequest,
    engine: ProductionEngineService = Depends(get_production),
) -> CompletionResponse:
    """Produce one item: consume its recipe FEFO and register the batch."""
    result = await engine.complete_item(plan_id, request.product_id, request.actual_quantity)
    return CompletionResponse(
        plan=PlanResponse.model_validate(result.plan),
        detail=PlanDetailResponse.model_validate(result.detail),
        batch=ProductBatchResponse.from_batch(result.batch),
    )


@router.post(
    "/{plan_id}/start-item",
    response_model=PlanDetailResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def start_item(
    plan_id: int,
    request: PlanItemRequest,
    engine: ProductionEngineService = Depends(get_production),
) -> PlanDetailResponse:
    detail = await engine.start_item(plan_id, request.product_id)
    return PlanDetailResponse.model_validate(detail)


@router.post(
    "/{plan_id}/cancel-item",
    response_model=PlanDetailResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def cancel_item(
    plan_id: int,
    request: PlanItemRequest,
    engine: ProductionEngineService = Depends(get_production),
) -> PlanDetailResponse:
    detail = await engine.cancel_item(plan_id, request.product_id)
    return PlanDetailResponse.model_validate(detail)
