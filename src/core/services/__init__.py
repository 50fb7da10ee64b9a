"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. The unit of work is injected via constructor.
"""

from src.core.services.batch_registry import BatchRegistryService, BatchTrace
from src.core.services.catalog import CatalogService
from src.core.services.ingredient_ledger import IngredientLedgerService, OnHand
from src.core.services.inventory_view import (
    IngredientStock,
    InventoryViewService,
    ProductDemand,
    ProductStock,
    StoreProductStock,
)
from src.core.services.order_fulfillment import OrderFulfillmentService, OrderLine
from src.core.services.production_engine import (
    CompletionResult,
    PlanLine,
    ProductionEngineService,
)

__all__ = [
    # Reference data
    "CatalogService",
    # Ingredient ledger
    "IngredientLedgerService",
    "OnHand",
    # Production
    "ProductionEngineService",
    "PlanLine",
    "CompletionResult",
    # Finished goods
    "BatchRegistryService",
    "BatchTrace",
    # Orders
    "OrderFulfillmentService",
    "OrderLine",
    # Aggregation
    "InventoryViewService",
    "IngredientStock",
    "StoreProductStock",
    "ProductStock",
    "ProductDemand",
]
