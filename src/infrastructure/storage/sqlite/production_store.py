"""SQLite implementation of production plan storage."""

from datetime import datetime

import aiosqlite

from src.config import get_logger
from src.core.common import utc_now
from src.core.entities.production import (
    DetailStatus,
    PlanStatus,
    ProductionPlan,
    ProductionPlanDetail,
)
from src.core.interfaces.production_store import IProductionStore
from src.infrastructure.storage.sqlite.serialization import from_db, from_db_required, to_db

logger = get_logger(__name__)

# Timestamp column stamped when a plan enters a status
_PLAN_STAMPS = {
    PlanStatus.IN_PROGRESS: "started_at",
    PlanStatus.COMPLETED: "completed_at",
    PlanStatus.CANCELLED: "cancelled_at",
}


class SQLiteProductionStore(IProductionStore):
    """Production plans and their per-product details."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create_plan(self, plan: ProductionPlan) -> ProductionPlan:
        now = utc_now()
        plan.created_at = now
        plan.updated_at = now
        cursor = await self._conn.execute(
            """
            INSERT INTO production_plans (
                plan_code, plan_date, note, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                plan.plan_code,
                to_db(plan.plan_date),
                plan.note,
                plan.status.value,
                to_db(plan.created_at),
                to_db(plan.updated_at),
            ),
        )
        plan.id = cursor.lastrowid

        for line_no, detail in enumerate(plan.details, start=1):
            detail.plan_id = plan.id
            cursor = await self._conn.execute(
                """
                INSERT INTO production_plan_details (
                    plan_id, line_no, product_id, planned_quantity,
                    actual_quantity, status, completed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    plan.id,
                    line_no,
                    detail.product_id,
                    detail.planned_quantity,
                    detail.actual_quantity,
                    detail.status.value,
                    to_db(detail.completed_at),
                ),
            )
            detail.id = cursor.lastrowid

        logger.info(
            "production_plan_created",
            plan_id=plan.id,
            plan_code=plan.plan_code,
            details=len(plan.details),
        )
        return plan

    async def get_plan(self, plan_id: int) -> ProductionPlan | None:
        cursor = await self._conn.execute(
            "SELECT * FROM production_plans WHERE id = ?", (plan_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._load_plan(row)

    async def get_plan_by_code(self, plan_code: str) -> ProductionPlan | None:
        cursor = await self._conn.execute(
            "SELECT * FROM production_plans WHERE plan_code = ?", (plan_code,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._load_plan(row)

    async def list_plans(
        self,
        status: PlanStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ProductionPlan]:
        conditions = []
        params: list = []
        if status is not None:
            conditions.append("status = ?")
            params.append(status.value)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM production_plans {where}
            ORDER BY plan_date DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        )
        rows = await cursor.fetchall()
        return [await self._load_plan(row) for row in rows]

    async def update_plan_status(
        self,
        plan_id: int,
        expected: PlanStatus,
        new: PlanStatus,
        at: datetime,
    ) -> bool:
        stamp = _PLAN_STAMPS[new]
        cursor = await self._conn.execute(
            f"""
            UPDATE production_plans SET status = ?, {stamp} = ?, updated_at = ?
            WHERE id = ? AND status = ?
            """,
            (new.value, to_db(at), to_db(at), plan_id, expected.value),
        )
        return cursor.rowcount == 1

    async def update_detail_status(
        self,
        detail_id: int,
        expected: DetailStatus,
        new: DetailStatus,
        at: datetime,
        actual_quantity: float | None = None,
    ) -> bool:
        completed_at = to_db(at) if new == DetailStatus.COMPLETED else None
        cursor = await self._conn.execute(
            """
            UPDATE production_plan_details SET
                status = ?,
                actual_quantity = COALESCE(?, actual_quantity),
                completed_at = COALESCE(?, completed_at)
            WHERE id = ? AND status = ?
            """,
            (new.value, actual_quantity, completed_at, detail_id, expected.value),
        )
        return cursor.rowcount == 1

    async def cancel_open_details(self, plan_id: int) -> int:
        cursor = await self._conn.execute(
            """
            UPDATE production_plan_details SET status = ?
            WHERE plan_id = ? AND status IN (?, ?)
            """,
            (
                DetailStatus.CANCELLED.value,
                plan_id,
                DetailStatus.PENDING.value,
                DetailStatus.IN_PROGRESS.value,
            ),
        )
        return cursor.rowcount

    async def _load_plan(self, row: aiosqlite.Row) -> ProductionPlan:
        cursor = await self._conn.execute(
            "SELECT * FROM production_plan_details WHERE plan_id = ? ORDER BY line_no",
            (row["id"],),
        )
        details = [self._row_to_detail(r) for r in await cursor.fetchall()]
        now = utc_now()
        return ProductionPlan(
            id=row["id"],
            plan_code=row["plan_code"],
            plan_date=from_db_required(row["plan_date"], now),
            note=row["note"],
            status=PlanStatus(row["status"]),
            details=details,
            started_at=from_db(row["started_at"]),
            completed_at=from_db(row["completed_at"]),
            cancelled_at=from_db(row["cancelled_at"]),
            created_at=from_db_required(row["created_at"], now),
            updated_at=from_db_required(row["updated_at"], now),
        )

    @staticmethod
    def _row_to_detail(row: aiosqlite.Row) -> ProductionPlanDetail:
        return ProductionPlanDetail(
            id=row["id"],
            plan_id=row["plan_id"],
            product_id=row["product_id"],
            planned_quantity=float(row["planned_quantity"]),
            actual_quantity=float(row["actual_quantity"]),
            status=DetailStatus(row["status"]),
            completed_at=from_db(row["completed_at"]),
        )
