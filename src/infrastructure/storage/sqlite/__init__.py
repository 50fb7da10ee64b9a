"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.batch_store import SQLiteBatchStore
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.ingredient_store import SQLiteIngredientStore
from src.infrastructure.storage.sqlite.order_store import (
    SQLiteOrderStore,
    SQLiteStoreInventoryStore,
)
from src.infrastructure.storage.sqlite.production_store import SQLiteProductionStore
from src.infrastructure.storage.sqlite.unit_of_work import (
    SQLiteUnitOfWork,
    bind_repositories,
)

# Singleton instance
_unit_of_work: SQLiteUnitOfWork | None = None


def get_unit_of_work() -> SQLiteUnitOfWork:
    """Get singleton unit of work instance."""
    global _unit_of_work
    if _unit_of_work is None:
        _unit_of_work = SQLiteUnitOfWork()
    return _unit_of_work


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteIngredientStore",
    "SQLiteCatalogStore",
    "SQLiteProductionStore",
    "SQLiteBatchStore",
    "SQLiteOrderStore",
    "SQLiteStoreInventoryStore",
    # Unit of work
    "SQLiteUnitOfWork",
    "bind_repositories",
    "get_unit_of_work",
]
