"""Tests for BatchRegistryService."""

from datetime import timedelta

import pytest

from src.core.common import utc_now
from src.core.entities import BatchStatus
from src.core.exceptions import InsufficientStockError, InvalidTransitionError, NotFoundError
from src.core.services import BatchRegistryService


@pytest.fixture
async def cake(seed):
    flour = await seed.ingredient("Flour")
    await seed.receive(flour.id, "FL-A", 500, expires_in_days=30)
    return await seed.product("Moon Cake", "MOONCAKE", {flour.id: 0.5}, shelf_life_days=3)


class TestAllocate:
    async def test_draws_fefo_and_sells_out(self, seed, registry, cake):
        first = await seed.produce(cake.id, 4)
        second = await seed.produce(cake.id, 10)

        draws = await registry.allocate(cake.id, 6)

        assert [(d.batch_id, d.quantity) for d in draws] == [(first.id, 4), (second.id, 2)]
        assert (await registry.get_batch(first.id)).status == BatchStatus.SOLD_OUT
        remaining = await registry.list_active(cake.id)
        assert [(b.id, b.current_quantity) for b in remaining] == [(second.id, 8)]

    async def test_shortfall_takes_nothing(self, seed, registry, cake):
        batch = await seed.produce(cake.id, 4)
        with pytest.raises(InsufficientStockError):
            await registry.allocate(cake.id, 5)
        assert (await registry.get_batch(batch.id)).current_quantity == 4


class TestRecall:
    async def test_recalled_batch_is_never_allocated(self, seed, registry, cake):
        batch = await seed.produce(cake.id, 4)
        recalled = await registry.recall(batch.id)

        assert recalled.status == BatchStatus.RECALLED
        assert await registry.list_active(cake.id) == []
        with pytest.raises(InsufficientStockError):
            await registry.allocate(cake.id, 1)

    async def test_recall_twice(self, seed, registry, cake):
        batch = await seed.produce(cake.id, 4)
        await registry.recall(batch.id)
        with pytest.raises(InvalidTransitionError):
            await registry.recall(batch.id)

    async def test_unknown_batch(self, registry):
        with pytest.raises(NotFoundError):
            await registry.recall(404)


class TestExpiry:
    async def test_expired_batch_reported_and_filtered(self, seed, uow, cake):
        batch = await seed.produce(cake.id, 4)
        later = BatchRegistryService(uow, clock=lambda: utc_now() + timedelta(days=4))

        assert await later.list_active(cake.id) == []
        expired = await later.list_batches(status=BatchStatus.EXPIRED)
        assert [b.id for b in expired] == [batch.id]
        assert await later.list_batches(status=BatchStatus.ACTIVE) == []
        with pytest.raises(InsufficientStockError):
            await later.allocate(cake.id, 1)


class TestTrace:
    async def test_trace_names_ingredient_batches_and_plan(self, seed, registry, cake):
        batch = await seed.produce(cake.id, 4)
        trace = await registry.trace(batch.id)

        assert trace.plan_code == "PLAN-T001"
        assert [(u.batch_code, u.quantity_used) for u in trace.ingredients] == [("FL-A", 2)]
