"""
Dependency injection container for FastAPI.

Provides service instances to route handlers. Tests swap them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from src.application.services import (
    get_batch_registry_service,
    get_catalog_service,
    get_ingredient_ledger_service,
    get_inventory_view_service,
    get_order_fulfillment_service,
    get_production_engine_service,
)
from src.config import Settings, get_settings
from src.core.services import (
    BatchRegistryService,
    CatalogService,
    IngredientLedgerService,
    InventoryViewService,
    OrderFulfillmentService,
    ProductionEngineService,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies
def get_catalog() -> CatalogService:
    """Get catalog service."""
    return get_catalog_service()


def get_ledger() -> IngredientLedgerService:
    """Get ingredient ledger service."""
    return get_ingredient_ledger_service()


def get_production() -> ProductionEngineService:
    """Get production engine service."""
    return get_production_engine_service()


def get_batches() -> BatchRegistryService:
    """Get finished-goods batch registry."""
    return get_batch_registry_service()


def get_orders() -> OrderFulfillmentService:
    """Get order fulfillment service."""
    return get_order_fulfillment_service()


def get_inventory() -> InventoryViewService:
    """Get inventory aggregation view."""
    return get_inventory_view_service()
