"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import aiosqlite
import pytest

from src.core.entities import (
    Ingredient,
    IngredientBatch,
    Product,
    ProductionPlan,
    ProductionPlanDetail,
    RecipeLine,
    Store,
)
from src.core.interfaces.unit_of_work import KitchenRepositories
from src.infrastructure.storage.sqlite import bind_repositories

NOW = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
async def conn(kitchen_db: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """A raw connection to the migrated test database."""
    async with aiosqlite.connect(kitchen_db) as connection:
        await connection.execute("PRAGMA foreign_keys=ON")
        connection.row_factory = aiosqlite.Row
        yield connection


@pytest.fixture
def repos(conn: aiosqlite.Connection) -> KitchenRepositories:
    return bind_repositories(conn)


@pytest.fixture
async def flour(repos: KitchenRepositories) -> Ingredient:
    return await repos.ingredients.create_ingredient(Ingredient(name="Flour", unit="kg"))


@pytest.fixture
async def flour_batches(repos: KitchenRepositories, flour: Ingredient) -> list[IngredientBatch]:
    """Three batches received out of expiry order."""
    batches = []
    for code, quantity, days in [("FL-LATE", 200, 30), ("FL-EARLY", 100, 5), ("FL-MID", 50, 10)]:
        batches.append(
            await repos.ingredients.add_batch(
                IngredientBatch(
                    ingredient_id=flour.id,
                    batch_code=code,
                    received_date=NOW - timedelta(days=1),
                    expiry_date=NOW + timedelta(days=days),
                    initial_quantity=quantity,
                    current_quantity=quantity,
                )
            )
        )
    return batches


@pytest.fixture
async def moon_cake(repos: KitchenRepositories, flour: Ingredient) -> Product:
    return await repos.catalog.create_product(
        Product(
            name="Moon Cake",
            sku="MOONCAKE",
            price=2.5,
            shelf_life_days=3,
            recipe=[RecipeLine(ingredient_id=flour.id, quantity=0.5)],
        )
    )


@pytest.fixture
async def store(repos: KitchenRepositories) -> Store:
    return await repos.catalog.create_store(Store(store_name="Downtown", store_code="ST-001"))


@pytest.fixture
async def plan(repos: KitchenRepositories, moon_cake: Product) -> ProductionPlan:
    return await repos.production.create_plan(
        ProductionPlan(
            plan_code="PLAN-001",
            plan_date=NOW,
            details=[ProductionPlanDetail(product_id=moon_cake.id, planned_quantity=100)],
        )
    )
