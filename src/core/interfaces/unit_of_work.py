"""Unit of work: one storage transaction spanning every store."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from src.core.interfaces.batch_store import IBatchStore
from src.core.interfaces.catalog_store import ICatalogStore
from src.core.interfaces.ingredient_store import IIngredientStore
from src.core.interfaces.order_store import IOrderStore, IStoreInventoryStore
from src.core.interfaces.production_store import IProductionStore


@dataclass
class KitchenRepositories:
    """Stores bound to the same connection."""

    ingredients: IIngredientStore
    catalog: ICatalogStore
    production: IProductionStore
    batches: IBatchStore
    orders: IOrderStore
    store_inventory: IStoreInventoryStore


class IUnitOfWork(ABC):
    """Hands out repositories sharing one connection."""

    @abstractmethod
    def begin(self) -> AbstractAsyncContextManager[KitchenRepositories]:
        """
        Open a write transaction.

        Commits when the block exits normally, rolls back every write when
        it raises. Concurrent ``begin`` blocks are serialized.
        """
        pass

    @abstractmethod
    def read(self) -> AbstractAsyncContextManager[KitchenRepositories]:
        """Repositories for read-only work, no transaction held."""
        pass
