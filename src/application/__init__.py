"""
Application layer - DTOs and service factories.

This layer sits between the HTTP routes and the core:
1. Request/response DTOs define the API contracts
2. Factory functions wire the SQLite unit of work into core services
"""

from src.application.services import (
    get_batch_registry_service,
    get_catalog_service,
    get_ingredient_ledger_service,
    get_inventory_view_service,
    get_order_fulfillment_service,
    get_production_engine_service,
    reset_services,
)

__all__ = [
    "get_catalog_service",
    "get_ingredient_ledger_service",
    "get_production_engine_service",
    "get_batch_registry_service",
    "get_order_fulfillment_service",
    "get_inventory_view_service",
    "reset_services",
]
