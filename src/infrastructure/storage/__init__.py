"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteUnitOfWork,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
    get_unit_of_work,
)

__all__ = [
    # Unit of work
    "SQLiteUnitOfWork",
    "get_unit_of_work",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
