"""SQLite implementation of ingredient stock storage."""

from datetime import datetime

import aiosqlite

from src.config import get_logger, get_settings
from src.core.common import utc_now
from src.core.entities.ingredient import (
    Ingredient,
    IngredientBatch,
    IngredientMovement,
    MovementType,
)
from src.core.interfaces.ingredient_store import IIngredientStore
from src.infrastructure.storage.sqlite.serialization import from_db, from_db_required, to_db

logger = get_logger(__name__)

_FEFO_ORDER = "ORDER BY expiry_date ASC, received_date ASC, batch_code ASC"


class SQLiteIngredientStore(IIngredientStore):
    """Ingredients, ingredient batches and the movement journal."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create_ingredient(self, ingredient: Ingredient) -> Ingredient:
        now = utc_now()
        ingredient.created_at = now
        ingredient.updated_at = now
        cursor = await self._conn.execute(
            """
            INSERT INTO ingredients (
                name, unit, cost_price, warning_threshold, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                ingredient.name,
                ingredient.unit,
                ingredient.cost_price,
                ingredient.warning_threshold,
                to_db(ingredient.created_at),
                to_db(ingredient.updated_at),
            ),
        )
        ingredient.id = cursor.lastrowid
        logger.info("ingredient_created", ingredient_id=ingredient.id, name=ingredient.name)
        return ingredient

    async def get_ingredient(self, ingredient_id: int) -> Ingredient | None:
        cursor = await self._conn.execute(
            "SELECT * FROM ingredients WHERE id = ?", (ingredient_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_ingredient(row) if row else None

    async def get_ingredient_by_name(self, name: str) -> Ingredient | None:
        cursor = await self._conn.execute(
            "SELECT * FROM ingredients WHERE name = ?", (name.strip(),)
        )
        row = await cursor.fetchone()
        return self._row_to_ingredient(row) if row else None

    async def list_ingredients(
        self, limit: int | None = None, offset: int = 0
    ) -> list[Ingredient]:
        cursor = await self._conn.execute(
            "SELECT * FROM ingredients ORDER BY name LIMIT ? OFFSET ?",
            (limit if limit is not None else -1, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_ingredient(row) for row in rows]

    async def add_batch(self, batch: IngredientBatch) -> IngredientBatch:
        batch.created_at = utc_now()
        cursor = await self._conn.execute(
            """
            INSERT INTO ingredient_batches (
                ingredient_id, batch_code, supplier_ref, price,
                received_date, expiry_date, initial_quantity, current_quantity,
                is_active, emptied_at, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                batch.ingredient_id,
                batch.batch_code,
                batch.supplier_ref,
                batch.price,
                to_db(batch.received_date),
                to_db(batch.expiry_date),
                batch.initial_quantity,
                batch.current_quantity,
                1 if batch.is_active else 0,
                to_db(batch.emptied_at),
                to_db(batch.created_at),
            ),
        )
        batch.id = cursor.lastrowid
        logger.info(
            "ingredient_batch_added",
            batch_id=batch.id,
            batch_code=batch.batch_code,
            qty=batch.initial_quantity,
        )
        return batch

    async def get_batch(self, batch_id: int) -> IngredientBatch | None:
        cursor = await self._conn.execute(
            "SELECT * FROM ingredient_batches WHERE id = ?", (batch_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_batch(row) if row else None

    async def get_batch_by_code(self, batch_code: str) -> IngredientBatch | None:
        cursor = await self._conn.execute(
            "SELECT * FROM ingredient_batches WHERE batch_code = ?",
            (batch_code.strip().upper(),),
        )
        row = await cursor.fetchone()
        return self._row_to_batch(row) if row else None

    async def list_batches(
        self, ingredient_id: int, include_inactive: bool = False
    ) -> list[IngredientBatch]:
        sql = "SELECT * FROM ingredient_batches WHERE ingredient_id = ?"
        if not include_inactive:
            sql += " AND is_active = 1"
        cursor = await self._conn.execute(f"{sql} {_FEFO_ORDER}", (ingredient_id,))
        rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    async def list_available_batches(
        self, ingredient_id: int, as_of: datetime
    ) -> list[IngredientBatch]:
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM ingredient_batches
            WHERE ingredient_id = ?
              AND is_active = 1
              AND current_quantity > 0
              AND expiry_date >= ?
            {_FEFO_ORDER}
            """,
            (ingredient_id, to_db(as_of)),
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    async def list_expiring_batches(
        self, as_of: datetime, until: datetime
    ) -> list[IngredientBatch]:
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM ingredient_batches
            WHERE is_active = 1
              AND current_quantity > 0
              AND expiry_date >= ?
              AND expiry_date <= ?
            {_FEFO_ORDER}
            """,
            (to_db(as_of), to_db(until)),
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    async def decrement_batch(
        self, batch_id: int, quantity: float, at: datetime
    ) -> bool:
        precision = get_settings().kitchen.quantity_precision
        cursor = await self._conn.execute(
            """
            UPDATE ingredient_batches SET
                current_quantity = ROUND(current_quantity - ?, ?),
                emptied_at = CASE
                    WHEN ROUND(current_quantity - ?, ?) <= 0 THEN ?
                    ELSE emptied_at
                END
            WHERE id = ? AND is_active = 1 AND current_quantity >= ?
            """,
            (quantity, precision, quantity, precision, to_db(at), batch_id, quantity),
        )
        return cursor.rowcount == 1

    async def set_batch_active(self, batch_id: int, is_active: bool) -> bool:
        cursor = await self._conn.execute(
            "UPDATE ingredient_batches SET is_active = ? WHERE id = ?",
            (1 if is_active else 0, batch_id),
        )
        return cursor.rowcount == 1

    async def add_movement(self, movement: IngredientMovement) -> IngredientMovement:
        cursor = await self._conn.execute(
            """
            INSERT INTO ingredient_movements (
                ingredient_id, ingredient_batch_id, movement_type,
                quantity, reference, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                movement.ingredient_id,
                movement.ingredient_batch_id,
                movement.movement_type.value,
                movement.quantity,
                movement.reference,
                to_db(movement.created_at),
            ),
        )
        movement.id = cursor.lastrowid
        return movement

    async def list_movements(
        self, ingredient_id: int, limit: int = 100
    ) -> list[IngredientMovement]:
        cursor = await self._conn.execute(
            """
            SELECT * FROM ingredient_movements
            WHERE ingredient_id = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (ingredient_id, limit),
        )
        rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    @staticmethod
    def _row_to_ingredient(row: aiosqlite.Row) -> Ingredient:
        now = utc_now()
        return Ingredient(
            id=row["id"],
            name=row["name"],
            unit=row["unit"],
            cost_price=float(row["cost_price"]),
            warning_threshold=float(row["warning_threshold"]),
            created_at=from_db_required(row["created_at"], now),
            updated_at=from_db_required(row["updated_at"], now),
        )

    @staticmethod
    def _row_to_batch(row: aiosqlite.Row) -> IngredientBatch:
        now = utc_now()
        return IngredientBatch(
            id=row["id"],
            ingredient_id=row["ingredient_id"],
            batch_code=row["batch_code"],
            supplier_ref=row["supplier_ref"],
            price=float(row["price"]),
            received_date=from_db_required(row["received_date"], now),
            expiry_date=from_db_required(row["expiry_date"], now),
            initial_quantity=float(row["initial_quantity"]),
            current_quantity=float(row["current_quantity"]),
            is_active=bool(row["is_active"]),
            emptied_at=from_db(row["emptied_at"]),
            created_at=from_db_required(row["created_at"], now),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> IngredientMovement:
        return IngredientMovement(
            id=row["id"],
            ingredient_id=row["ingredient_id"],
            ingredient_batch_id=row["ingredient_batch_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity=float(row["quantity"]),
            reference=row["reference"],
            created_at=from_db_required(row["created_at"], utc_now()),
        )
