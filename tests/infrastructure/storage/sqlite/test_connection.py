"""Tests for the aiosqlite connection pool."""

from pathlib import Path

import pytest

from src.infrastructure.storage.sqlite.connection import ConnectionPool


@pytest.fixture
async def pool(tmp_path: Path):
    pool = ConnectionPool(tmp_path / "pool.db", pool_size=2)
    await pool.initialize()
    async with pool.transaction() as conn:
        await conn.execute("CREATE TABLE t (v INTEGER NOT NULL)")
    yield pool
    await pool.close()


async def _count(pool: ConnectionPool) -> int:
    async with pool.acquire() as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM t")
        (count,) = await cursor.fetchone()
    return count


class TestConnectionPool:
    async def test_connections_use_wal_and_foreign_keys(self, pool):
        async with pool.acquire() as conn:
            cursor = await conn.execute("PRAGMA journal_mode")
            assert (await cursor.fetchone())[0] == "wal"
            cursor = await conn.execute("PRAGMA foreign_keys")
            assert (await cursor.fetchone())[0] == 1

    async def test_transaction_commits(self, pool):
        async with pool.transaction(immediate=True) as conn:
            await conn.execute("INSERT INTO t (v) VALUES (1)")
        assert await _count(pool) == 1

    async def test_transaction_rolls_back_on_error(self, pool):
        with pytest.raises(RuntimeError):
            async with pool.transaction(immediate=True) as conn:
                await conn.execute("INSERT INTO t (v) VALUES (1)")
                raise RuntimeError("boom")
        assert await _count(pool) == 0

    async def test_connection_returns_to_pool(self, pool):
        for _ in range(5):
            async with pool.acquire():
                pass
        assert pool._pool.qsize() == 2
