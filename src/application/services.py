"""
Service factory functions for dependency injection.

This module wires the SQLite unit of work into core services.
API dependencies import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.core.services import (
    BatchRegistryService,
    CatalogService,
    IngredientLedgerService,
    InventoryViewService,
    OrderFulfillmentService,
    ProductionEngineService,
)

if TYPE_CHECKING:
    from src.core.interfaces import IUnitOfWork


# Singleton service instances
_catalog_service: CatalogService | None = None
_ingredient_ledger_service: IngredientLedgerService | None = None
_production_engine_service: ProductionEngineService | None = None
_batch_registry_service: BatchRegistryService | None = None
_order_fulfillment_service: OrderFulfillmentService | None = None
_inventory_view_service: InventoryViewService | None = None


def _default_unit_of_work() -> "IUnitOfWork":
    # Lazy import infrastructure to avoid circular imports
    from src.infrastructure.storage.sqlite import get_unit_of_work

    return get_unit_of_work()


def get_catalog_service(uow: "IUnitOfWork | None" = None) -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if uow is not None:
        return CatalogService(uow)
    if _catalog_service is None:
        _catalog_service = CatalogService(_default_unit_of_work())
    return _catalog_service


def get_ingredient_ledger_service(
    uow: "IUnitOfWork | None" = None,
) -> IngredientLedgerService:
    """
    Get or create IngredientLedgerService instance.

    Args:
        uow: Optional unit of work override (a fresh instance is returned)

    Returns:
        Configured IngredientLedgerService
    """
    global _ingredient_ledger_service
    if uow is not None:
        return IngredientLedgerService(uow)
    if _ingredient_ledger_service is None:
        _ingredient_ledger_service = IngredientLedgerService(_default_unit_of_work())
    return _ingredient_ledger_service


def get_production_engine_service(
    uow: "IUnitOfWork | None" = None,
) -> ProductionEngineService:
    """Get or create ProductionEngineService instance."""
    global _production_engine_service
    if uow is not None:
        return ProductionEngineService(uow)
    if _production_engine_service is None:
        _production_engine_service = ProductionEngineService(_default_unit_of_work())
    return _production_engine_service


def get_batch_registry_service(uow: "IUnitOfWork | None" = None) -> BatchRegistryService:
    """Get or create BatchRegistryService instance."""
    global _batch_registry_service
    if uow is not None:
        return BatchRegistryService(uow)
    if _batch_registry_service is None:
        _batch_registry_service = BatchRegistryService(_default_unit_of_work())
    return _batch_registry_service


def get_order_fulfillment_service(
    uow: "IUnitOfWork | None" = None,
) -> OrderFulfillmentService:
    """Get or create OrderFulfillmentService instance."""
    global _order_fulfillment_service
    if uow is not None:
        return OrderFulfillmentService(uow)
    if _order_fulfillment_service is None:
        _order_fulfillment_service = OrderFulfillmentService(_default_unit_of_work())
    return _order_fulfillment_service


def get_inventory_view_service(uow: "IUnitOfWork | None" = None) -> InventoryViewService:
    """Get or create InventoryViewService instance."""
    global _inventory_view_service
    if uow is not None:
        return InventoryViewService(uow)
    if _inventory_view_service is None:
        _inventory_view_service = InventoryViewService(_default_unit_of_work())
    return _inventory_view_service


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _catalog_service
    global _ingredient_ledger_service
    global _production_engine_service
    global _batch_registry_service
    global _order_fulfillment_service
    global _inventory_view_service

    _catalog_service = None
    _ingredient_ledger_service = None
    _production_engine_service = None
    _batch_registry_service = None
    _order_fulfillment_service = None
    _inventory_view_service = None


__all__ = [
    "get_catalog_service",
    "get_ingredient_ledger_service",
    "get_production_engine_service",
    "get_batch_registry_service",
    "get_order_fulfillment_service",
    "get_inventory_view_service",
    "reset_services",
]
