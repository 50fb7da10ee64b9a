"""Abstract interfaces for order and store inventory storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.order import Order, OrderAllocation, OrderStatus
from src.core.entities.product import StoreInventoryLine


class IOrderStore(ABC):
    """Interface for orders, their items and shipment allocations."""

    @abstractmethod
    async def create_order(self, order: Order) -> Order:
        """Create an order with its items."""
        pass

    @abstractmethod
    async def get_order(self, order_id: int) -> Order | None:
        """Get order (with items) by ID."""
        pass

    @abstractmethod
    async def get_order_by_code(self, order_code: str) -> Order | None:
        """Get order by its unique code."""
        pass

    @abstractmethod
    async def list_orders(
        self,
        store_id: int | None = None,
        statuses: list[OrderStatus] | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        limit: int | None = 100,
        offset: int = 0,
    ) -> list[Order]:
        """List orders, newest first."""
        pass

    @abstractmethod
    async def update_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
        at: datetime,
        reason: str | None = None,
    ) -> bool:
        """
        Move an order from ``expected`` to ``new``.

        Returns False, changing nothing, if the stored status differs.
        Stamps the timestamp column that belongs to ``new``.
        """
        pass

    @abstractmethod
    async def add_allocations(
        self, allocations: list[OrderAllocation]
    ) -> list[OrderAllocation]:
        """Record batch allocations made when an order ships."""
        pass

    @abstractmethod
    async def list_allocations(self, order_id: int) -> list[OrderAllocation]:
        """Get allocations for an order."""
        pass


class IStoreInventoryStore(ABC):
    """Interface for stock held at stores."""

    @abstractmethod
    async def credit(
        self,
        store_id: int,
        product_id: int,
        product_batch_id: int,
        quantity: float,
        at: datetime,
    ) -> StoreInventoryLine:
        """Add quantity to the (store, batch) line, creating it if missing."""
        pass

    @abstractmethod
    async def list_lines(self, store_id: int) -> list[StoreInventoryLine]:
        """Lines held by a store, with batch expiry joined in."""
        pass
