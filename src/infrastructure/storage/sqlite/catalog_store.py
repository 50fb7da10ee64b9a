"""SQLite implementation of product and store reference data."""

import aiosqlite

from src.config import get_logger
from src.core.common import utc_now
from src.core.entities.product import Product, RecipeLine, Store, StoreStatus
from src.core.interfaces.catalog_store import ICatalogStore
from src.infrastructure.storage.sqlite.serialization import from_db_required, to_db

logger = get_logger(__name__)


class SQLiteCatalogStore(ICatalogStore):
    """Products with their recipes, and stores."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create_product(self, product: Product) -> Product:
        product.created_at = utc_now()
        cursor = await self._conn.execute(
            """
            INSERT INTO products (name, sku, price, unit, shelf_life_days, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                product.name,
                product.sku,
                product.price,
                product.unit,
                product.shelf_life_days,
                to_db(product.created_at),
            ),
        )
        product.id = cursor.lastrowid
        await self._conn.executemany(
            "INSERT INTO recipe_lines (product_id, ingredient_id, quantity) VALUES (?, ?, ?)",
            [(product.id, line.ingredient_id, line.quantity) for line in product.recipe],
        )
        logger.info(
            "product_created",
            product_id=product.id,
            sku=product.sku,
            recipe_lines=len(product.recipe),
        )
        return product

    async def get_product(self, product_id: int) -> Product | None:
        cursor = await self._conn.execute(
            "SELECT * FROM products WHERE id = ?", (product_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._load_product(row)

    async def get_product_by_sku(self, sku: str) -> Product | None:
        cursor = await self._conn.execute(
            "SELECT * FROM products WHERE sku = ?", (sku.strip().upper(),)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._load_product(row)

    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        cursor = await self._conn.execute(
            "SELECT * FROM products ORDER BY name, id LIMIT ? OFFSET ?",
            (limit, offset),
        )
        rows = await cursor.fetchall()
        return [await self._load_product(row) for row in rows]

    async def create_store(self, store: Store) -> Store:
        store.created_at = utc_now()
        cursor = await self._conn.execute(
            """
            INSERT INTO stores (store_name, store_code, address, phone, status, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                store.store_name,
                store.store_code,
                store.address,
                store.phone,
                store.status.value,
                to_db(store.created_at),
            ),
        )
        store.id = cursor.lastrowid
        logger.info("store_created", store_id=store.id, store_code=store.store_code)
        return store

    async def get_store(self, store_id: int) -> Store | None:
        cursor = await self._conn.execute("SELECT * FROM stores WHERE id = ?", (store_id,))
        row = await cursor.fetchone()
        return self._row_to_store(row) if row else None

    async def get_store_by_code(self, store_code: str) -> Store | None:
        cursor = await self._conn.execute(
            "SELECT * FROM stores WHERE store_code = ?", (store_code.strip().upper(),)
        )
        row = await cursor.fetchone()
        return self._row_to_store(row) if row else None

    async def list_stores(self, limit: int = 100, offset: int = 0) -> list[Store]:
        cursor = await self._conn.execute(
            "SELECT * FROM stores ORDER BY store_name LIMIT ? OFFSET ?",
            (limit, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_store(row) for row in rows]

    async def _load_product(self, row: aiosqlite.Row) -> Product:
        cursor = await self._conn.execute(
            "SELECT ingredient_id, quantity FROM recipe_lines WHERE product_id = ? ORDER BY id",
            (row["id"],),
        )
        recipe = [
            RecipeLine(ingredient_id=r["ingredient_id"], quantity=float(r["quantity"]))
            for r in await cursor.fetchall()
        ]
        return Product(
            id=row["id"],
            name=row["name"],
            sku=row["sku"],
            price=float(row["price"]),
            unit=row["unit"],
            shelf_life_days=row["shelf_life_days"],
            recipe=recipe,
            created_at=from_db_required(row["created_at"], utc_now()),
        )

    @staticmethod
    def _row_to_store(row: aiosqlite.Row) -> Store:
        return Store(
            id=row["id"],
            store_name=row["store_name"],
            store_code=row["store_code"],
            address=row["address"] or "",
            phone=row["phone"],
            status=StoreStatus(row["status"]),
            created_at=from_db_required(row["created_at"], utc_now()),
        )
