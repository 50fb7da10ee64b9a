"""API route modules."""

from src.api.routes.batches import router as batches_router
from src.api.routes.catalog import router as catalog_router
from src.api.routes.health import router as health_router
from src.api.routes.ingredients import router as ingredients_router
from src.api.routes.inventory import router as inventory_router
from src.api.routes.orders import router as orders_router
from src.api.routes.production import router as production_router

__all__ = [
    "health_router",
    "catalog_router",
    "ingredients_router",
    "production_router",
    "batches_router",
    "orders_router",
    "inventory_router",
]
