"""Tests for the schema migrator."""

from pathlib import Path

import aiosqlite

from src.infrastructure.storage.sqlite.migrations import (
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)
from src.infrastructure.storage.sqlite.migrations.migrator import REQUIRED_TABLES


class TestInitializeDatabase:
    async def test_creates_kitchen_tables(self, kitchen_db: Path):
        async with aiosqlite.connect(kitchen_db) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert set(REQUIRED_TABLES) <= tables

    async def test_rerun_is_a_no_op(self, kitchen_db: Path):
        assert await initialize_database(kitchen_db, create_backup_before=False) == []

    async def test_fresh_file_reports_each_result(self, tmp_path: Path):
        results = await initialize_database(tmp_path / "fresh.db", create_backup_before=False)
        assert results
        assert all(r.success for r in results)
        assert results[0].version == "001"


class TestMigrationStatus:
    async def test_missing_file(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "absent.db")
        assert status["exists"] is False
        assert status["current_version"] is None

    async def test_up_to_date(self, kitchen_db: Path):
        status = await get_migration_status(kitchen_db)
        assert status["exists"] is True
        assert status["current_version"] == "001"
        assert status["pending_migrations"] == []


class TestVerifySchemaIntegrity:
    async def test_clean_database_passes(self, kitchen_db: Path):
        checks = await verify_schema_integrity(kitchen_db)
        assert {c["check"] for c in checks} == {
            "foreign_keys",
            "integrity",
            "required_tables",
            "ingredient_conservation",
        }
        assert all(c["status"] == "PASS" for c in checks)

    async def test_batch_without_ledger_entry_fails_conservation(self, kitchen_db: Path):
        async with aiosqlite.connect(kitchen_db) as conn:
            await conn.execute(
                "INSERT INTO ingredients (name, unit, created_at, updated_at) "
                "VALUES ('Sugar', 'kg', '2026-03-01T00:00:00.000000+00:00', "
                "'2026-03-01T00:00:00.000000+00:00')"
            )
            await conn.execute(
                """
                INSERT INTO ingredient_batches (
                    ingredient_id, batch_code, received_date, expiry_date,
                    initial_quantity, current_quantity, created_at
                ) VALUES (1, 'SU-1', '2026-03-01T00:00:00.000000+00:00',
                          '2026-04-01T00:00:00.000000+00:00', 10, 10,
                          '2026-03-01T00:00:00.000000+00:00')
                """
            )
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(kitchen_db)}
        assert checks["ingredient_conservation"]["status"] == "FAIL"
        assert checks["ingredient_conservation"]["batches"] == ["SU-1"]
