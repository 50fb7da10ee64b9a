"""SQLite unit of work binding every kitchen store to one pooled connection."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from src.config import get_logger
from src.core.interfaces.unit_of_work import IUnitOfWork, KitchenRepositories
from src.infrastructure.storage.sqlite.batch_store import SQLiteBatchStore
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.ingredient_store import SQLiteIngredientStore
from src.infrastructure.storage.sqlite.order_store import (
    SQLiteOrderStore,
    SQLiteStoreInventoryStore,
)
from src.infrastructure.storage.sqlite.production_store import SQLiteProductionStore

logger = get_logger(__name__)


def bind_repositories(conn: aiosqlite.Connection) -> KitchenRepositories:
    """Build every store over the same connection."""
    return KitchenRepositories(
        ingredients=SQLiteIngredientStore(conn),
        catalog=SQLiteCatalogStore(conn),
        production=SQLiteProductionStore(conn),
        batches=SQLiteBatchStore(conn),
        orders=SQLiteOrderStore(conn),
        store_inventory=SQLiteStoreInventoryStore(conn),
    )


class SQLiteUnitOfWork(IUnitOfWork):
    """
    Transactions over the global connection pool.

    ``begin()`` opens ``BEGIN IMMEDIATE``: SQLite grants the reserved lock
    to one writer at a time, so availability checks made inside the block
    stay valid until commit.
    """

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[KitchenRepositories]:
        async with get_transaction(immediate=True) as conn:
            yield bind_repositories(conn)

    @asynccontextmanager
    async def read(self) -> AsyncIterator[KitchenRepositories]:
        async with get_connection() as conn:
            yield bind_repositories(conn)
