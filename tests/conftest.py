"""Pytest configuration and fixtures.

Every test that touches storage gets its own migrated SQLite file. The
global settings, connection pool and service singletons are reset around
it so nothing leaks between tests.
"""

from collections.abc import AsyncGenerator
from datetime import timedelta
from pathlib import Path

import pytest

from src.application.services import reset_services
from src.config import reset_settings
from src.core.common import utc_now
from src.core.entities import PlanStatus, RecipeLine
from src.core.services import (
    BatchRegistryService,
    CatalogService,
    IngredientLedgerService,
    InventoryViewService,
    OrderFulfillmentService,
    PlanLine,
    ProductionEngineService,
)
from src.infrastructure.storage.sqlite import SQLiteUnitOfWork, close_pool
from src.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
async def kitchen_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Path, None]:
    """A migrated database file wired into the global settings."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORAGE_DB_NAME", "kitchen_test.db")
    reset_settings()
    reset_services()

    db_path = tmp_path / "kitchen_test.db"
    await initialize_database(db_path, create_backup_before=False)

    yield db_path

    await close_pool()
    reset_services()
    reset_settings()


@pytest.fixture
def uow(kitchen_db: Path) -> SQLiteUnitOfWork:
    return SQLiteUnitOfWork()


@pytest.fixture
def catalog(uow: SQLiteUnitOfWork) -> CatalogService:
    return CatalogService(uow)


@pytest.fixture
def ledger(uow: SQLiteUnitOfWork) -> IngredientLedgerService:
    return IngredientLedgerService(uow)


@pytest.fixture
def engine(uow: SQLiteUnitOfWork) -> ProductionEngineService:
    return ProductionEngineService(uow)


@pytest.fixture
def registry(uow: SQLiteUnitOfWork) -> BatchRegistryService:
    return BatchRegistryService(uow)


@pytest.fixture
def orders(uow: SQLiteUnitOfWork) -> OrderFulfillmentService:
    return OrderFulfillmentService(uow)


@pytest.fixture
def inventory(uow: SQLiteUnitOfWork) -> InventoryViewService:
    return InventoryViewService(uow)


class KitchenSeeder:
    """Shortcuts for building a realistic kitchen state through the services."""

    def __init__(
        self,
        catalog: CatalogService,
        ledger: IngredientLedgerService,
        engine: ProductionEngineService,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.engine = engine
        self._plans = 0

    async def ingredient(self, name: str = "Flour", unit: str = "kg", threshold: float = 10.0):
        return await self.ledger.create_ingredient(name, unit, warning_threshold=threshold)

    async def receive(self, ingredient_id: int, code: str, quantity: float, expires_in_days: int):
        return await self.ledger.receive_batch(
            ingredient_id,
            code,
            quantity,
            expiry_date=utc_now() + timedelta(days=expires_in_days),
        )

    async def product(
        self,
        name: str,
        sku: str,
        recipe: dict[int, float],
        price: float = 10.0,
        shelf_life_days: int = 5,
    ):
        return await self.catalog.create_product(
            name=name,
            sku=sku,
            shelf_life_days=shelf_life_days,
            price=price,
            recipe=[RecipeLine(ingredient_id=i, quantity=q) for i, q in recipe.items()],
        )

    async def store(self, code: str = "ST-001", name: str = "Downtown"):
        return await self.catalog.create_store(store_name=name, store_code=code)

    async def produce(self, product_id: int, quantity: float):
        """Run a one-line plan to completion and return the finished batch."""
        self._plans += 1
        plan = await self.engine.create_plan(
            f"PLAN-T{self._plans:03d}", [PlanLine(product_id, quantity)]
        )
        await self.engine.update_status(plan.id, PlanStatus.IN_PROGRESS)
        result = await self.engine.complete_item(plan.id, product_id, quantity)
        return result.batch


@pytest.fixture
def seed(
    catalog: CatalogService,
    ledger: IngredientLedgerService,
    engine: ProductionEngineService,
) -> KitchenSeeder:
    return KitchenSeeder(catalog, ledger, engine)
