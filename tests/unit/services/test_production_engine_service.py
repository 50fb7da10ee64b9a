"""Tests for ProductionEngineService."""

import pytest

from src.core.entities import BatchStatus, DetailStatus, PlanStatus
from src.core.exceptions import (
    DuplicateError,
    IncompletePlanError,
    InsufficientStockError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    QuantityExceedsPlanError,
    ValidationError,
)
from src.core.services import PlanLine


@pytest.fixture
async def kitchen(seed):
    """Flour with 50kg on hand and a moon cake needing 0.5kg each."""
    flour = await seed.ingredient("Flour")
    await seed.receive(flour.id, "FL-A", 20, expires_in_days=3)
    await seed.receive(flour.id, "FL-B", 30, expires_in_days=8)
    cake = await seed.product("Moon Cake", "MOONCAKE", {flour.id: 0.5}, price=2.5, shelf_life_days=3)
    return flour, cake


async def _started_plan(engine, cake, planned=150, code="PLAN-001"):
    plan = await engine.create_plan(code, [PlanLine(cake.id, planned)])
    return await engine.update_status(plan.id, PlanStatus.IN_PROGRESS)


class TestCreatePlan:
    async def test_lines_for_same_product_are_merged(self, engine, kitchen):
        _, cake = kitchen
        plan = await engine.create_plan(
            " PLAN-001 ", [PlanLine(cake.id, 40), PlanLine(cake.id, 60)]
        )
        assert plan.plan_code == "PLAN-001"
        assert plan.status == PlanStatus.PLANNED
        assert [(d.product_id, d.planned_quantity) for d in plan.details] == [(cake.id, 100)]

    async def test_duplicate_code(self, engine, kitchen):
        _, cake = kitchen
        await engine.create_plan("PLAN-001", [PlanLine(cake.id, 10)])
        with pytest.raises(DuplicateError):
            await engine.create_plan("PLAN-001", [PlanLine(cake.id, 10)])

    async def test_rejects_empty_and_non_positive(self, engine, kitchen):
        _, cake = kitchen
        with pytest.raises(ValidationError):
            await engine.create_plan("PLAN-001", [])
        with pytest.raises(ValidationError):
            await engine.create_plan("PLAN-001", [PlanLine(cake.id, 0)])

    async def test_unknown_product(self, engine):
        with pytest.raises(NotFoundError):
            await engine.create_plan("PLAN-001", [PlanLine(42, 1)])


class TestCompleteItem:
    async def test_shortfall_rolls_back_then_smaller_run_succeeds(
        self, engine, ledger, registry, kitchen
    ):
        flour, cake = kitchen
        plan = await _started_plan(engine, cake)

        with pytest.raises(InsufficientStockError):
            await engine.complete_item(plan.id, cake.id, 120)

        assert (await ledger.get_on_hand(flour.id)).total_quantity == 50
        assert (await engine.get_plan(plan.id)).detail_for(cake.id).status == DetailStatus.PENDING
        assert await registry.list_active(cake.id) == []

        result = await engine.complete_item(plan.id, cake.id, 100)

        assert result.detail.status == DetailStatus.COMPLETED
        assert result.detail.actual_quantity == 100
        assert result.batch.status == BatchStatus.ACTIVE
        assert result.batch.current_quantity == 100
        assert result.batch.batch_code.endswith("-MOONCAKE")
        assert [(u.batch_code, u.quantity_used) for u in result.batch.ingredient_batches_used] == [
            ("FL-A", 20),
            ("FL-B", 30),
        ]
        assert (await ledger.get_on_hand(flour.id)).total_quantity == 0

    async def test_expiry_follows_shelf_life(self, engine, kitchen):
        _, cake = kitchen
        plan = await _started_plan(engine, cake)
        batch = (await engine.complete_item(plan.id, cake.id, 10)).batch
        assert (batch.expiry_date - batch.manufacture_date).days == 3

    async def test_requires_in_progress_plan(self, engine, kitchen):
        _, cake = kitchen
        plan = await engine.create_plan("PLAN-001", [PlanLine(cake.id, 10)])
        with pytest.raises(InvalidStateError):
            await engine.complete_item(plan.id, cake.id, 10)

    @pytest.mark.parametrize("quantity", [0, 10.5])
    async def test_quantity_bounds(self, engine, kitchen, quantity):
        _, cake = kitchen
        plan = await _started_plan(engine, cake, planned=10)
        with pytest.raises(QuantityExceedsPlanError):
            await engine.complete_item(plan.id, cake.id, quantity)

    async def test_completing_twice_is_rejected(self, engine, kitchen):
        _, cake = kitchen
        plan = await _started_plan(engine, cake)
        await engine.complete_item(plan.id, cake.id, 10)
        with pytest.raises(InvalidStateError):
            await engine.complete_item(plan.id, cake.id, 10)

    async def test_product_without_recipe(self, engine, seed):
        water = await seed.product("Water", "WATER", {})
        plan = await _started_plan(engine, water)
        with pytest.raises(InvalidStateError):
            await engine.complete_item(plan.id, water.id, 1)

    async def test_batch_codes_get_suffixes(self, engine, kitchen):
        _, cake = kitchen
        first = await _started_plan(engine, cake, planned=5, code="PLAN-001")
        second = await _started_plan(engine, cake, planned=5, code="PLAN-002")
        a = (await engine.complete_item(first.id, cake.id, 5)).batch
        b = (await engine.complete_item(second.id, cake.id, 5)).batch
        assert b.batch_code == f"{a.batch_code}-1"


class TestPlanLifecycle:
    async def test_cannot_complete_with_open_items(self, engine, kitchen):
        _, cake = kitchen
        plan = await _started_plan(engine, cake)
        with pytest.raises(IncompletePlanError) as exc_info:
            await engine.update_status(plan.id, PlanStatus.COMPLETED)
        assert exc_info.value.details["open_products"] == [cake.id]

    async def test_complete_after_every_item_closed(self, engine, kitchen):
        _, cake = kitchen
        plan = await _started_plan(engine, cake)
        await engine.complete_item(plan.id, cake.id, 10)

        done = await engine.update_status(plan.id, PlanStatus.COMPLETED)
        assert done.status == PlanStatus.COMPLETED
        assert done.completed_at is not None

    async def test_all_items_cancelled_allows_completion(self, engine, kitchen):
        _, cake = kitchen
        plan = await _started_plan(engine, cake)
        detail = await engine.cancel_item(plan.id, cake.id)
        assert detail.status == DetailStatus.CANCELLED
        assert (await engine.update_status(plan.id, PlanStatus.COMPLETED)).status == (
            PlanStatus.COMPLETED
        )

    async def test_cancel_plan_cancels_open_items(self, engine, kitchen):
        _, cake = kitchen
        plan = await _started_plan(engine, cake)
        await engine.start_item(plan.id, cake.id)

        cancelled = await engine.update_status(plan.id, PlanStatus.CANCELLED)
        assert cancelled.status == PlanStatus.CANCELLED
        assert cancelled.detail_for(cake.id).status == DetailStatus.CANCELLED

    async def test_closed_plan_items_are_frozen(self, engine, kitchen):
        _, cake = kitchen
        plan = await _started_plan(engine, cake)
        await engine.update_status(plan.id, PlanStatus.CANCELLED)
        with pytest.raises(InvalidStateError):
            await engine.start_item(plan.id, cake.id)

    async def test_rejected_transition(self, engine, kitchen):
        _, cake = kitchen
        plan = await engine.create_plan("PLAN-001", [PlanLine(cake.id, 10)])
        with pytest.raises(InvalidTransitionError):
            await engine.update_status(plan.id, PlanStatus.COMPLETED)

    async def test_list_by_status(self, engine, kitchen):
        _, cake = kitchen
        await _started_plan(engine, cake, code="PLAN-001")
        await engine.create_plan("PLAN-002", [PlanLine(cake.id, 1)])
        assert [p.plan_code for p in await engine.list_plans(PlanStatus.PLANNED)] == ["PLAN-002"]
