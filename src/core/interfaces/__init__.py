"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.batch_store import IBatchStore
from src.core.interfaces.catalog_store import ICatalogStore
from src.core.interfaces.ingredient_store import IIngredientStore
from src.core.interfaces.order_store import IOrderStore, IStoreInventoryStore
from src.core.interfaces.production_store import IProductionStore
from src.core.interfaces.unit_of_work import IUnitOfWork, KitchenRepositories

__all__ = [
    # Storage interfaces
    "IIngredientStore",
    "ICatalogStore",
    "IProductionStore",
    "IBatchStore",
    "IOrderStore",
    "IStoreInventoryStore",
    # Transactions
    "IUnitOfWork",
    "KitchenRepositories",
]
