"""SQLite implementation of order and store inventory storage."""

from datetime import datetime

import aiosqlite

from src.config import get_logger, get_settings
from src.core.common import utc_now
from src.core.entities.order import Order, OrderAllocation, OrderItem, OrderStatus
from src.core.entities.product import StoreInventoryLine
from src.core.interfaces.order_store import IOrderStore, IStoreInventoryStore
from src.infrastructure.storage.sqlite.serialization import from_db, from_db_required, to_db

logger = get_logger(__name__)

# Timestamp column stamped when an order enters a status
_ORDER_STAMPS = {
    OrderStatus.APPROVED: "approved_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.RECEIVED: "received_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


class SQLiteOrderStore(IOrderStore):
    """Orders, order items and shipment allocations."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create_order(self, order: Order) -> Order:
        now = utc_now()
        order.created_at = now
        order.updated_at = now
        cursor = await self._conn.execute(
            """
            INSERT INTO orders (
                order_code, store_id, status, requested_delivery_date,
                notes, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                order.order_code,
                order.store_id,
                order.status.value,
                to_db(order.requested_delivery_date),
                order.notes,
                to_db(order.created_at),
                to_db(order.updated_at),
            ),
        )
        order.id = cursor.lastrowid

        for line_no, item in enumerate(order.items, start=1):
            item.order_id = order.id
            cursor = await self._conn.execute(
                """
                INSERT INTO order_items (
                    order_id, line_no, product_id, quantity, unit_price, subtotal
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    order.id,
                    line_no,
                    item.product_id,
                    item.quantity,
                    item.unit_price,
                    item.subtotal,
                ),
            )
            item.id = cursor.lastrowid

        logger.info(
            "order_created",
            order_id=order.id,
            order_code=order.order_code,
            store_id=order.store_id,
            total=order.total_amount,
        )
        return order

    async def get_order(self, order_id: int) -> Order | None:
        cursor = await self._conn.execute("SELECT * FROM orders WHERE id = ?", (order_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._load_order(row)

    async def get_order_by_code(self, order_code: str) -> Order | None:
        cursor = await self._conn.execute(
            "SELECT * FROM orders WHERE order_code = ?", (order_code,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._load_order(row)

    async def list_orders(
        self,
        store_id: int | None = None,
        statuses: list[OrderStatus] | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        limit: int | None = 100,
        offset: int = 0,
    ) -> list[Order]:
        conditions = []
        params: list = []
        if store_id is not None:
            conditions.append("store_id = ?")
            params.append(store_id)
        if statuses:
            placeholders = ", ".join("?" for _ in statuses)
            conditions.append(f"status IN ({placeholders})")
            params.extend(s.value for s in statuses)
        if created_from is not None:
            conditions.append("created_at >= ?")
            params.append(to_db(created_from))
        if created_to is not None:
            conditions.append("created_at <= ?")
            params.append(to_db(created_to))
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM orders {where}
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit if limit is not None else -1, offset),
        )
        rows = await cursor.fetchall()
        return [await self._load_order(row) for row in rows]

    async def update_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
        at: datetime,
        reason: str | None = None,
    ) -> bool:
        stamp = _ORDER_STAMPS[new]
        cursor = await self._conn.execute(
            f"""
            UPDATE orders SET
                status = ?,
                {stamp} = ?,
                cancellation_reason = COALESCE(?, cancellation_reason),
                updated_at = ?
            WHERE id = ? AND status = ?
            """,
            (new.value, to_db(at), reason, to_db(at), order_id, expected.value),
        )
        return cursor.rowcount == 1

    async def add_allocations(
        self, allocations: list[OrderAllocation]
    ) -> list[OrderAllocation]:
        for allocation in allocations:
            cursor = await self._conn.execute(
                """
                INSERT INTO order_allocations (
                    order_id, product_id, product_batch_id, quantity, created_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    allocation.order_id,
                    allocation.product_id,
                    allocation.product_batch_id,
                    allocation.quantity,
                    to_db(allocation.created_at),
                ),
            )
            allocation.id = cursor.lastrowid
        return allocations

    async def list_allocations(self, order_id: int) -> list[OrderAllocation]:
        cursor = await self._conn.execute(
            "SELECT * FROM order_allocations WHERE order_id = ? ORDER BY id",
            (order_id,),
        )
        rows = await cursor.fetchall()
        return [
            OrderAllocation(
                id=row["id"],
                order_id=row["order_id"],
                product_id=row["product_id"],
                product_batch_id=row["product_batch_id"],
                quantity=float(row["quantity"]),
                created_at=from_db_required(row["created_at"], utc_now()),
            )
            for row in rows
        ]

    async def _load_order(self, row: aiosqlite.Row) -> Order:
        cursor = await self._conn.execute(
            "SELECT * FROM order_items WHERE order_id = ? ORDER BY line_no",
            (row["id"],),
        )
        items = [
            OrderItem(
                id=r["id"],
                order_id=r["order_id"],
                product_id=r["product_id"],
                quantity=float(r["quantity"]),
                unit_price=float(r["unit_price"]),
            )
            for r in await cursor.fetchall()
        ]
        now = utc_now()
        return Order(
            id=row["id"],
            order_code=row["order_code"],
            store_id=row["store_id"],
            status=OrderStatus(row["status"]),
            requested_delivery_date=from_db_required(row["requested_delivery_date"], now),
            items=items,
            notes=row["notes"],
            cancellation_reason=row["cancellation_reason"],
            approved_at=from_db(row["approved_at"]),
            shipped_at=from_db(row["shipped_at"]),
            received_at=from_db(row["received_at"]),
            cancelled_at=from_db(row["cancelled_at"]),
            created_at=from_db_required(row["created_at"], now),
            updated_at=from_db_required(row["updated_at"], now),
        )


class SQLiteStoreInventoryStore(IStoreInventoryStore):
    """Finished goods held at stores, one row per (store, batch)."""

    _SELECT = """
        SELECT si.*, pb.expiry_date AS expiry_date
        FROM store_inventory si
        JOIN product_batches pb ON pb.id = si.product_batch_id
    """

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def credit(
        self,
        store_id: int,
        product_id: int,
        product_batch_id: int,
        quantity: float,
        at: datetime,
    ) -> StoreInventoryLine:
        precision = get_settings().kitchen.quantity_precision
        await self._conn.execute(
            """
            INSERT INTO store_inventory (
                store_id, product_id, product_batch_id, quantity, last_updated
            ) VALUES (?, ?, ?, ROUND(?, ?), ?)
            ON CONFLICT (store_id, product_batch_id) DO UPDATE SET
                quantity = ROUND(quantity + excluded.quantity, ?),
                last_updated = excluded.last_updated
            """,
            (store_id, product_id, product_batch_id, quantity, precision, to_db(at), precision),
        )
        cursor = await self._conn.execute(
            f"{self._SELECT} WHERE si.store_id = ? AND si.product_batch_id = ?",
            (store_id, product_batch_id),
        )
        row = await cursor.fetchone()
        return self._row_to_line(row)

    async def list_lines(self, store_id: int) -> list[StoreInventoryLine]:
        cursor = await self._conn.execute(
            f"{self._SELECT} WHERE si.store_id = ? ORDER BY si.product_id, pb.expiry_date",
            (store_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_line(row) for row in rows]

    @staticmethod
    def _row_to_line(row: aiosqlite.Row) -> StoreInventoryLine:
        return StoreInventoryLine(
            id=row["id"],
            store_id=row["store_id"],
            product_id=row["product_id"],
            product_batch_id=row["product_batch_id"],
            quantity=float(row["quantity"]),
            expiry_date=from_db(row["expiry_date"]),
            last_updated=from_db_required(row["last_updated"], utc_now()),
        )
