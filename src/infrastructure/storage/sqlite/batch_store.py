"""SQLite implementation of finished-goods batch storage."""

from datetime import datetime

import aiosqlite

from src.config import get_logger, get_settings
from src.core.common import utc_now
from src.core.entities.batch import BatchStatus, IngredientUsage, ProductBatch
from src.core.interfaces.batch_store import IBatchStore
from src.infrastructure.storage.sqlite.serialization import from_db_required, to_db

logger = get_logger(__name__)

_FEFO_ORDER = "ORDER BY expiry_date ASC, manufacture_date ASC, batch_code ASC"


class SQLiteBatchStore(IBatchStore):
    """Finished-goods batches and their ingredient traceability."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create_batch(self, batch: ProductBatch) -> ProductBatch:
        now = utc_now()
        batch.created_at = now
        batch.updated_at = now
        cursor = await self._conn.execute(
            """
            INSERT INTO product_batches (
                batch_code, production_plan_id, product_id,
                manufacture_date, expiry_date,
                initial_quantity, current_quantity, status,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                batch.batch_code,
                batch.production_plan_id,
                batch.product_id,
                to_db(batch.manufacture_date),
                to_db(batch.expiry_date),
                batch.initial_quantity,
                batch.current_quantity,
                batch.status.value,
                to_db(batch.created_at),
                to_db(batch.updated_at),
            ),
        )
        batch.id = cursor.lastrowid
        await self._conn.executemany(
            """
            INSERT INTO product_batch_ingredients (
                product_batch_id, ingredient_batch_id, quantity_used
            ) VALUES (?, ?, ?)
            """,
            [
                (batch.id, usage.ingredient_batch_id, usage.quantity_used)
                for usage in batch.ingredient_batches_used
            ],
        )
        logger.info(
            "product_batch_created",
            batch_id=batch.id,
            batch_code=batch.batch_code,
            qty=batch.initial_quantity,
        )
        return batch

    async def get_batch(self, batch_id: int) -> ProductBatch | None:
        cursor = await self._conn.execute(
            "SELECT * FROM product_batches WHERE id = ?", (batch_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        batch = self._row_to_batch(row)
        batch.ingredient_batches_used = await self.get_usages(batch_id)
        return batch

    async def get_batch_by_code(self, batch_code: str) -> ProductBatch | None:
        cursor = await self._conn.execute(
            "SELECT * FROM product_batches WHERE batch_code = ?",
            (batch_code.strip().upper(),),
        )
        row = await cursor.fetchone()
        return self._row_to_batch(row) if row else None

    async def list_batches(
        self,
        product_id: int | None = None,
        status: BatchStatus | None = None,
        production_plan_id: int | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ProductBatch]:
        conditions = []
        params: list = []
        if product_id is not None:
            conditions.append("product_id = ?")
            params.append(product_id)
        if status is not None:
            conditions.append("status = ?")
            params.append(status.value)
        if production_plan_id is not None:
            conditions.append("production_plan_id = ?")
            params.append(production_plan_id)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        cursor = await self._conn.execute(
            f"SELECT * FROM product_batches {where} {_FEFO_ORDER} LIMIT ? OFFSET ?",
            (*params, limit if limit is not None else -1, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    async def list_available_batches(
        self, product_id: int, as_of: datetime
    ) -> list[ProductBatch]:
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM product_batches
            WHERE product_id = ?
              AND status = ?
              AND current_quantity > 0
              AND expiry_date >= ?
            {_FEFO_ORDER}
            """,
            (product_id, BatchStatus.ACTIVE.value, to_db(as_of)),
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    async def list_expiring_batches(
        self, as_of: datetime, until: datetime
    ) -> list[ProductBatch]:
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM product_batches
            WHERE status = ?
              AND current_quantity > 0
              AND expiry_date >= ?
              AND expiry_date <= ?
            {_FEFO_ORDER}
            """,
            (BatchStatus.ACTIVE.value, to_db(as_of), to_db(until)),
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    async def decrement_batch(
        self, batch_id: int, quantity: float, at: datetime
    ) -> bool:
        precision = get_settings().kitchen.quantity_precision
        cursor = await self._conn.execute(
            """
            UPDATE product_batches SET
                current_quantity = ROUND(current_quantity - ?, ?),
                status = CASE
                    WHEN ROUND(current_quantity - ?, ?) <= 0 THEN ?
                    ELSE status
                END,
                updated_at = ?
            WHERE id = ? AND status = ? AND current_quantity >= ?
            """,
            (
                quantity,
                precision,
                quantity,
                precision,
                BatchStatus.SOLD_OUT.value,
                to_db(at),
                batch_id,
                BatchStatus.ACTIVE.value,
                quantity,
            ),
        )
        return cursor.rowcount == 1

    async def update_status(
        self,
        batch_id: int,
        expected: BatchStatus,
        new: BatchStatus,
        at: datetime,
    ) -> bool:
        cursor = await self._conn.execute(
            "UPDATE product_batches SET status = ?, updated_at = ? WHERE id = ? AND status = ?",
            (new.value, to_db(at), batch_id, expected.value),
        )
        return cursor.rowcount == 1

    async def get_usages(self, batch_id: int) -> list[IngredientUsage]:
        cursor = await self._conn.execute(
            """
            SELECT pbi.ingredient_batch_id, pbi.quantity_used,
                   ib.batch_code, ib.ingredient_id
            FROM product_batch_ingredients pbi
            JOIN ingredient_batches ib ON ib.id = pbi.ingredient_batch_id
            WHERE pbi.product_batch_id = ?
            ORDER BY pbi.id
            """,
            (batch_id,),
        )
        rows = await cursor.fetchall()
        return [
            IngredientUsage(
                ingredient_batch_id=row["ingredient_batch_id"],
                quantity_used=float(row["quantity_used"]),
                batch_code=row["batch_code"],
                ingredient_id=row["ingredient_id"],
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_batch(row: aiosqlite.Row) -> ProductBatch:
        now = utc_now()
        return ProductBatch(
            id=row["id"],
            batch_code=row["batch_code"],
            production_plan_id=row["production_plan_id"],
            product_id=row["product_id"],
            manufacture_date=from_db_required(row["manufacture_date"], now),
            expiry_date=from_db_required(row["expiry_date"], now),
            initial_quantity=float(row["initial_quantity"]),
            current_quantity=float(row["current_quantity"]),
            status=BatchStatus(row["status"]),
            created_at=from_db_required(row["created_at"], now),
            updated_at=from_db_required(row["updated_at"], now),
        )
