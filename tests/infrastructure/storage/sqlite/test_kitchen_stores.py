"""Tests for the SQLite kitchen stores."""

from datetime import UTC, datetime, timedelta

import aiosqlite
import pytest

from src.core.entities import (
    BatchStatus,
    DetailStatus,
    IngredientMovement,
    IngredientUsage,
    MovementType,
    Order,
    OrderAllocation,
    OrderItem,
    OrderStatus,
    PlanStatus,
    ProductBatch,
)

NOW = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)


async def _make_batch(repos, plan, product, flour_batch, code="BATCH-20260301-MOONCAKE", qty=10, days=3):
    return await repos.batches.create_batch(
        ProductBatch(
            batch_code=code,
            production_plan_id=plan.id,
            product_id=product.id,
            manufacture_date=NOW,
            expiry_date=NOW + timedelta(days=days),
            initial_quantity=qty,
            current_quantity=qty,
            ingredient_batches_used=[
                IngredientUsage(ingredient_batch_id=flour_batch.id, quantity_used=qty * 0.5)
            ],
        )
    )


class TestIngredientStore:
    async def test_lookup_by_name_and_code(self, repos, flour, flour_batches):
        assert (await repos.ingredients.get_ingredient_by_name(" Flour ")).id == flour.id
        batch = await repos.ingredients.get_batch_by_code("fl-early")
        assert batch is not None
        assert batch.initial_quantity == 100

    async def test_available_batches_in_fefo_order(self, repos, flour, flour_batches):
        batches = await repos.ingredients.list_available_batches(flour.id, NOW)
        assert [b.batch_code for b in batches] == ["FL-EARLY", "FL-MID", "FL-LATE"]

    async def test_available_excludes_expired_inactive_and_empty(self, repos, flour, flour_batches):
        late, early, mid = flour_batches
        await repos.ingredients.set_batch_active(mid.id, False)
        assert await repos.ingredients.decrement_batch(late.id, 200, NOW)

        later = NOW + timedelta(days=6)
        assert await repos.ingredients.list_available_batches(flour.id, later) == []
        assert [b.batch_code for b in await repos.ingredients.list_available_batches(flour.id, NOW)] == [
            "FL-EARLY"
        ]

    async def test_decrement_is_conditional(self, repos, flour_batches):
        early = flour_batches[1]
        assert not await repos.ingredients.decrement_batch(early.id, 100.5, NOW)
        assert await repos.ingredients.decrement_batch(early.id, 85, NOW)

        refreshed = await repos.ingredients.get_batch(early.id)
        assert refreshed.current_quantity == 15
        assert refreshed.emptied_at is None

    async def test_decrement_to_zero_stamps_emptied_at(self, repos, flour_batches):
        mid = flour_batches[2]
        assert await repos.ingredients.decrement_batch(mid.id, 50, NOW)

        refreshed = await repos.ingredients.get_batch(mid.id)
        assert refreshed.current_quantity == 0
        assert refreshed.is_empty
        assert refreshed.is_active
        assert refreshed.emptied_at == NOW

    async def test_inactive_batch_cannot_be_decremented(self, repos, flour_batches):
        early = flour_batches[1]
        await repos.ingredients.set_batch_active(early.id, False)
        assert not await repos.ingredients.decrement_batch(early.id, 1, NOW)

    async def test_list_batches_hides_inactive_by_default(self, repos, flour, flour_batches):
        await repos.ingredients.set_batch_active(flour_batches[0].id, False)
        assert len(await repos.ingredients.list_batches(flour.id)) == 2
        assert len(await repos.ingredients.list_batches(flour.id, include_inactive=True)) == 3

    async def test_movements_newest_first(self, repos, flour, flour_batches):
        early = flour_batches[1]
        for minutes, kind in [(0, MovementType.IN), (5, MovementType.OUT)]:
            await repos.ingredients.add_movement(
                IngredientMovement(
                    ingredient_id=flour.id,
                    ingredient_batch_id=early.id,
                    movement_type=kind,
                    quantity=10,
                    created_at=NOW + timedelta(minutes=minutes),
                )
            )
        movements = await repos.ingredients.list_movements(flour.id)
        assert [m.movement_type for m in movements] == [MovementType.OUT, MovementType.IN]

    async def test_expiring_window(self, repos, flour_batches):
        expiring = await repos.ingredients.list_expiring_batches(NOW, NOW + timedelta(days=7))
        assert [b.batch_code for b in expiring] == ["FL-EARLY"]


class TestCatalogStore:
    async def test_product_round_trips_recipe(self, repos, moon_cake, flour):
        loaded = await repos.catalog.get_product_by_sku("mooncake")
        assert loaded.id == moon_cake.id
        assert [(r.ingredient_id, r.quantity) for r in loaded.recipe] == [(flour.id, 0.5)]

    async def test_store_lookup(self, repos, store):
        assert (await repos.catalog.get_store_by_code("st-001")).id == store.id
        assert [s.store_code for s in await repos.catalog.list_stores()] == ["ST-001"]


class TestProductionStore:
    async def test_plan_round_trip(self, repos, plan, moon_cake):
        loaded = await repos.production.get_plan_by_code("PLAN-001")
        assert loaded.id == plan.id
        assert loaded.status == PlanStatus.PLANNED
        assert loaded.detail_for(moon_cake.id).planned_quantity == 100

    async def test_status_update_is_conditional(self, repos, plan):
        assert not await repos.production.update_plan_status(
            plan.id, PlanStatus.IN_PROGRESS, PlanStatus.COMPLETED, NOW
        )
        assert await repos.production.update_plan_status(
            plan.id, PlanStatus.PLANNED, PlanStatus.IN_PROGRESS, NOW
        )
        loaded = await repos.production.get_plan(plan.id)
        assert loaded.status == PlanStatus.IN_PROGRESS
        assert loaded.started_at == NOW

    async def test_detail_completion_records_actual(self, repos, plan, moon_cake):
        detail = plan.detail_for(moon_cake.id)
        assert await repos.production.update_detail_status(
            detail.id, DetailStatus.PENDING, DetailStatus.COMPLETED, NOW, actual_quantity=80
        )
        assert not await repos.production.update_detail_status(
            detail.id, DetailStatus.PENDING, DetailStatus.COMPLETED, NOW, actual_quantity=90
        )
        loaded = (await repos.production.get_plan(plan.id)).detail_for(moon_cake.id)
        assert loaded.actual_quantity == 80
        assert loaded.completed_at == NOW

    async def test_cancel_open_details(self, repos, plan):
        assert await repos.production.cancel_open_details(plan.id) == 1
        assert await repos.production.cancel_open_details(plan.id) == 0

    async def test_list_by_status(self, repos, plan):
        assert [p.id for p in await repos.production.list_plans(status=PlanStatus.PLANNED)] == [
            plan.id
        ]
        assert await repos.production.list_plans(status=PlanStatus.COMPLETED) == []


class TestBatchStore:
    async def test_create_records_usages(self, repos, plan, moon_cake, flour_batches):
        early = flour_batches[1]
        batch = await _make_batch(repos, plan, moon_cake, early)

        loaded = await repos.batches.get_batch(batch.id)
        assert loaded.status == BatchStatus.ACTIVE
        assert [(u.batch_code, u.quantity_used) for u in loaded.ingredient_batches_used] == [
            ("FL-EARLY", 5)
        ]

    async def test_decrement_to_zero_sells_out(self, repos, plan, moon_cake, flour_batches):
        batch = await _make_batch(repos, plan, moon_cake, flour_batches[1])

        assert not await repos.batches.decrement_batch(batch.id, 11, NOW)
        assert await repos.batches.decrement_batch(batch.id, 10, NOW)
        loaded = await repos.batches.get_batch(batch.id)
        assert loaded.current_quantity == 0
        assert loaded.status == BatchStatus.SOLD_OUT
        assert await repos.batches.list_available_batches(moon_cake.id, NOW) == []

    async def test_available_fefo_skips_recalled(self, repos, plan, moon_cake, flour_batches):
        later = await _make_batch(repos, plan, moon_cake, flour_batches[1], code="B-LATER", days=5)
        sooner = await _make_batch(repos, plan, moon_cake, flour_batches[1], code="B-SOONER", days=2)

        available = await repos.batches.list_available_batches(moon_cake.id, NOW)
        assert [b.id for b in available] == [sooner.id, later.id]

        assert await repos.batches.update_status(
            sooner.id, BatchStatus.ACTIVE, BatchStatus.RECALLED, NOW
        )
        assert not await repos.batches.decrement_batch(sooner.id, 1, NOW)
        available = await repos.batches.list_available_batches(moon_cake.id, NOW)
        assert [b.id for b in available] == [later.id]


class TestOrderStores:
    async def _order(self, repos, store, moon_cake) -> Order:
        return await repos.orders.create_order(
            Order(
                order_code="ORD-20260301-0001",
                store_id=store.id,
                requested_delivery_date=NOW,
                items=[OrderItem(product_id=moon_cake.id, quantity=4, unit_price=2.5)],
            )
        )

    async def test_order_round_trip(self, repos, store, moon_cake):
        order = await self._order(repos, store, moon_cake)
        loaded = await repos.orders.get_order_by_code("ORD-20260301-0001")
        assert loaded.id == order.id
        assert loaded.items[0].subtotal == 10
        assert loaded.total_amount == 10

    async def test_status_update_keeps_reason(self, repos, store, moon_cake):
        order = await self._order(repos, store, moon_cake)
        assert await repos.orders.update_status(
            order.id, OrderStatus.PENDING, OrderStatus.CANCELLED, NOW, reason="store closed"
        )
        assert not await repos.orders.update_status(
            order.id, OrderStatus.PENDING, OrderStatus.APPROVED, NOW
        )
        loaded = await repos.orders.get_order(order.id)
        assert loaded.status == OrderStatus.CANCELLED
        assert loaded.cancellation_reason == "store closed"
        assert loaded.cancelled_at == NOW

    async def test_list_filters(self, repos, store, moon_cake):
        await self._order(repos, store, moon_cake)
        assert len(await repos.orders.list_orders(store_id=store.id)) == 1
        assert await repos.orders.list_orders(statuses=[OrderStatus.SHIPPED]) == []

    async def test_credit_accumulates_per_batch(self, repos, store, plan, moon_cake, flour_batches):
        batch = await _make_batch(repos, plan, moon_cake, flour_batches[1])
        order = await self._order(repos, store, moon_cake)
        await repos.orders.add_allocations(
            [
                OrderAllocation(
                    order_id=order.id, product_id=moon_cake.id, product_batch_id=batch.id, quantity=4
                )
            ]
        )
        assert [a.quantity for a in await repos.orders.list_allocations(order.id)] == [4]

        await repos.store_inventory.credit(store.id, moon_cake.id, batch.id, 4, NOW)
        line = await repos.store_inventory.credit(store.id, moon_cake.id, batch.id, 1.5, NOW)
        assert line.quantity == 5.5
        assert line.expiry_date == batch.expiry_date

        lines = await repos.store_inventory.list_lines(store.id)
        assert len(lines) == 1


async def test_schema_rejects_negative_stock(conn, flour_batches):
    """The database refuses a decrement below zero even without the guard."""
    with pytest.raises(aiosqlite.IntegrityError):
        await conn.execute(
            "UPDATE ingredient_batches SET current_quantity = -1 WHERE id = ?",
            (flour_batches[0].id,),
        )
