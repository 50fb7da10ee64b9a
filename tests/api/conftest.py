"""Fixtures for API route tests.

Services are replaced with AsyncMocks through ``app.dependency_overrides``
so the routes, DTO mapping and error handlers are tested without a database.
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import (
    get_batches,
    get_catalog,
    get_inventory,
    get_ledger,
    get_orders,
    get_production,
)
from src.api.main import app
from src.core.services import (
    BatchRegistryService,
    CatalogService,
    IngredientLedgerService,
    InventoryViewService,
    OrderFulfillmentService,
    ProductionEngineService,
)


@pytest.fixture
def services() -> dict[str, AsyncMock]:
    return {
        "catalog": AsyncMock(spec=CatalogService),
        "ledger": AsyncMock(spec=IngredientLedgerService),
        "production": AsyncMock(spec=ProductionEngineService),
        "batches": AsyncMock(spec=BatchRegistryService),
        "orders": AsyncMock(spec=OrderFulfillmentService),
        "inventory": AsyncMock(spec=InventoryViewService),
    }


@pytest.fixture
async def client(services) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_catalog] = lambda: services["catalog"]
    app.dependency_overrides[get_ledger] = lambda: services["ledger"]
    app.dependency_overrides[get_production] = lambda: services["production"]
    app.dependency_overrides[get_batches] = lambda: services["batches"]
    app.dependency_overrides[get_orders] = lambda: services["orders"]
    app.dependency_overrides[get_inventory] = lambda: services["inventory"]

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
