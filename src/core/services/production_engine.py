"""
Production fulfillment engine.

Drives production plans through their lifecycle and turns a completed plan
line into a finished-goods batch, consuming the recipe's ingredients in the
same transaction.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import NamedTuple

from src.config import get_logger, get_settings
from src.core.common import Clock, ensure_utc, round_quantity, utc_now
from src.core.entities.batch import IngredientUsage, ProductBatch
from src.core.entities.production import (
    DetailStatus,
    PlanStatus,
    ProductionPlan,
    ProductionPlanDetail,
)
from src.core.exceptions import (
    DuplicateError,
    IncompletePlanError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    QuantityExceedsPlanError,
    ValidationError,
)
from src.core.interfaces.batch_store import IBatchStore
from src.core.interfaces.unit_of_work import IUnitOfWork, KitchenRepositories
from src.core.services.ingredient_ledger import consume_ingredient
from src.core.state_machine import DETAIL_LIFECYCLE, PLAN_LIFECYCLE

logger = get_logger(__name__)


class PlanLine(NamedTuple):
    """Requested product and quantity for a new plan."""

    product_id: int
    quantity: float


@dataclass
class CompletionResult:
    """Outcome of completing one plan line."""

    plan: ProductionPlan
    detail: ProductionPlanDetail
    batch: ProductBatch


async def next_batch_code(
    batches: IBatchStore, prefix: str, produced_at: datetime, sku: str
) -> str:
    """``PREFIX-YYYYMMDD-SKU``, suffixed ``-1``, ``-2``... when already taken."""
    base = f"{prefix}-{produced_at:%Y%m%d}-{sku}".upper()
    code = base
    suffix = 0
    while await batches.get_batch_by_code(code) is not None:
        suffix += 1
        code = f"{base}-{suffix}"
    return code


class ProductionEngineService:
    """Production plan lifecycle and line completion."""

    def __init__(self, uow: IUnitOfWork, clock: Clock = utc_now):
        self._uow = uow
        self._clock = clock

    async def create_plan(
        self,
        plan_code: str,
        details: list[PlanLine],
        plan_date: datetime | None = None,
        note: str | None = None,
    ) -> ProductionPlan:
        """
        Create a Planned plan. Lines for the same product are merged.

        Raises:
            ValidationError: no lines, blank code or a non-positive quantity.
            DuplicateError: plan code already used.
            NotFoundError: a product does not exist.
        """
        code = (plan_code or "").strip()
        if not code:
            raise ValidationError("plan_code", "is required")
        if not details:
            raise ValidationError("details", "plan must contain at least one item")

        merged: dict[int, float] = {}
        for line in details:
            if line.quantity <= 0:
                raise ValidationError(
                    "planned_quantity", "must be greater than zero", line.quantity
                )
            merged[line.product_id] = round_quantity(
                merged.get(line.product_id, 0.0) + line.quantity
            )

        async with self._uow.begin() as repos:
            if await repos.production.get_plan_by_code(code) is not None:
                raise DuplicateError("ProductionPlan", "plan_code", code)
            for product_id in merged:
                if await repos.catalog.get_product(product_id) is None:
                    raise NotFoundError("Product", product_id)

            plan = await repos.production.create_plan(
                ProductionPlan(
                    plan_code=code,
                    plan_date=ensure_utc(plan_date) if plan_date else self._clock(),
                    note=note,
                    details=[
                        ProductionPlanDetail(product_id=pid, planned_quantity=qty)
                        for pid, qty in merged.items()
                    ],
                )
            )
        return plan

    async def get_plan(self, plan_id: int) -> ProductionPlan:
        async with self._uow.read() as repos:
            plan = await repos.production.get_plan(plan_id)
        if plan is None:
            raise NotFoundError("ProductionPlan", plan_id)
        return plan

    async def list_plans(
        self,
        status: PlanStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ProductionPlan]:
        async with self._uow.read() as repos:
            return await repos.production.list_plans(status=status, limit=limit, offset=offset)

    async def update_status(self, plan_id: int, target: PlanStatus) -> ProductionPlan:
        """
        Move a plan along its lifecycle.

        Completing requires every line to be Completed or Cancelled.
        Cancelling also cancels the lines still open.
        """
        now = self._clock()
        async with self._uow.begin() as repos:
            plan = await self._require_plan(repos, plan_id)
            PLAN_LIFECYCLE.ensure_transition(plan.status, target)

            if target == PlanStatus.COMPLETED and not plan.is_ready_to_complete:
                raise IncompletePlanError(
                    plan_id, [d.product_id for d in plan.open_details]
                )

            if not await repos.production.update_plan_status(
                plan_id, plan.status, target, now
            ):
                raise InvalidTransitionError("ProductionPlan", plan.status.value, target.value)

            cancelled_lines = 0
            if target == PlanStatus.CANCELLED:
                cancelled_lines = await repos.production.cancel_open_details(plan_id)

            updated = await self._require_plan(repos, plan_id)

        logger.info(
            "plan_status_changed",
            plan_id=plan_id,
            from_status=plan.status.value,
            to_status=target.value,
            cancelled_lines=cancelled_lines,
        )
        return updated

    async def start_item(self, plan_id: int, product_id: int) -> ProductionPlanDetail:
        """Mark a Pending line In_Progress."""
        return await self._move_item(plan_id, product_id, DetailStatus.IN_PROGRESS)

    async def cancel_item(self, plan_id: int, product_id: int) -> ProductionPlanDetail:
        """Drop a line that will not be produced."""
        return await self._move_item(plan_id, product_id, DetailStatus.CANCELLED)

    async def complete_item(
        self, plan_id: int, product_id: int, actual_quantity: float
    ) -> CompletionResult:
        """
        Produce ``actual_quantity`` of a plan line.

        Consumes ``recipe quantity x actual_quantity`` of every ingredient
        FEFO, creates the finished-goods batch with the exact draws as its
        traceability, then marks the line Completed. Any failure rolls all
        of it back.

        Raises:
            NotFoundError: plan, line or product missing.
            InvalidStateError: plan not In_Progress, line already closed,
                or product has no recipe.
            QuantityExceedsPlanError: quantity not positive or above plan.
            InsufficientStockError: an ingredient runs short.
        """
        now = self._clock()
        settings = get_settings().kitchen
        actual = round_quantity(actual_quantity)

        async with self._uow.begin() as repos:
            plan = await self._require_plan(repos, plan_id)
            detail = plan.detail_for(product_id)
            if detail is None:
                raise NotFoundError("ProductionPlanDetail", product_id, field="product_id")

            if plan.status != PlanStatus.IN_PROGRESS:
                raise InvalidStateError(
                    "ProductionPlan",
                    "items can only be completed while the plan is In_Progress",
                    current=plan.status.value,
                )
            if not DETAIL_LIFECYCLE.can_transition(detail.status, DetailStatus.COMPLETED):
                raise InvalidStateError(
                    "ProductionPlanDetail",
                    f"item for product {product_id} is already {detail.status.value}",
                    current=detail.status.value,
                )
            if actual <= 0 or actual > detail.planned_quantity:
                raise QuantityExceedsPlanError(product_id, actual, detail.planned_quantity)

            product = await repos.catalog.get_product(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            if not product.recipe:
                raise InvalidStateError(
                    "Product", f"product {product.sku} has no recipe", current=None
                )

            usages: list[IngredientUsage] = []
            for line in product.recipe:
                needed = round_quantity(line.quantity * actual)
                draws = await consume_ingredient(
                    repos, line.ingredient_id, needed, now, reference=plan.plan_code
                )
                usages.extend(
                    IngredientUsage(
                        ingredient_batch_id=d.batch_id,
                        quantity_used=d.quantity,
                        batch_code=d.batch.batch_code,
                        ingredient_id=line.ingredient_id,
                    )
                    for d in draws
                )

            batch_code = await next_batch_code(
                repos.batches, settings.batch_code_prefix, now, product.sku
            )
            batch = await repos.batches.create_batch(
                ProductBatch(
                    batch_code=batch_code,
                    production_plan_id=plan_id,
                    product_id=product_id,
                    manufacture_date=now,
                    expiry_date=now + timedelta(days=product.shelf_life_days),
                    initial_quantity=actual,
                    current_quantity=actual,
                    ingredient_batches_used=usages,
                )
            )

            # Conditional on the prior status: a concurrent retry finds no row
            if not await repos.production.update_detail_status(
                detail.id,  # type: ignore[arg-type]
                detail.status,
                DetailStatus.COMPLETED,
                now,
                actual_quantity=actual,
            ):
                raise InvalidStateError(
                    "ProductionPlanDetail",
                    f"item for product {product_id} was completed concurrently",
                    current=detail.status.value,
                )

            updated = await self._require_plan(repos, plan_id)

        logger.info(
            "plan_item_completed",
            plan_id=plan_id,
            product_id=product_id,
            actual_quantity=actual,
            batch_code=batch.batch_code,
            ingredient_batches=len(usages),
        )
        return CompletionResult(
            plan=updated,
            detail=updated.detail_for(product_id),  # type: ignore[arg-type]
            batch=batch,
        )

    async def _move_item(
        self, plan_id: int, product_id: int, target: DetailStatus
    ) -> ProductionPlanDetail:
        now = self._clock()
        async with self._uow.begin() as repos:
            plan = await self._require_plan(repos, plan_id)
            detail = plan.detail_for(product_id)
            if detail is None:
                raise NotFoundError("ProductionPlanDetail", product_id, field="product_id")
            if PLAN_LIFECYCLE.is_terminal(plan.status):
                raise InvalidStateError(
                    "ProductionPlan",
                    "items cannot change once the plan is closed",
                    current=plan.status.value,
                )
            DETAIL_LIFECYCLE.ensure_transition(detail.status, target)
            if not await repos.production.update_detail_status(
                detail.id, detail.status, target, now  # type: ignore[arg-type]
            ):
                raise InvalidTransitionError(
                    "ProductionPlanDetail", detail.status.value, target.value
                )
            updated = await self._require_plan(repos, plan_id)

        logger.info(
            "plan_item_status_changed",
            plan_id=plan_id,
            product_id=product_id,
            to_status=target.value,
        )
        return updated.detail_for(product_id)  # type: ignore[return-value]

    @staticmethod
    async def _require_plan(repos: KitchenRepositories, plan_id: int) -> ProductionPlan:
        plan = await repos.production.get_plan(plan_id)
        if plan is None:
            raise NotFoundError("ProductionPlan", plan_id)
        return plan
