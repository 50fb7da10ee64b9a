"""Core domain entities."""

from src.core.entities.batch import BatchStatus, IngredientUsage, ProductBatch
from src.core.entities.ingredient import (
    Ingredient,
    IngredientBatch,
    IngredientMovement,
    MovementType,
)
from src.core.entities.order import Order, OrderAllocation, OrderItem, OrderStatus
from src.core.entities.product import (
    Product,
    RecipeLine,
    Store,
    StoreInventoryLine,
    StoreStatus,
)
from src.core.entities.production import (
    DetailStatus,
    PlanStatus,
    ProductionPlan,
    ProductionPlanDetail,
)

__all__ = [
    # Ingredients
    "Ingredient",
    "IngredientBatch",
    "IngredientMovement",
    "MovementType",
    # Catalog
    "Product",
    "RecipeLine",
    "Store",
    "StoreStatus",
    "StoreInventoryLine",
    # Production
    "ProductionPlan",
    "ProductionPlanDetail",
    "PlanStatus",
    "DetailStatus",
    # Finished goods
    "ProductBatch",
    "BatchStatus",
    "IngredientUsage",
    # Orders
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderAllocation",
]
