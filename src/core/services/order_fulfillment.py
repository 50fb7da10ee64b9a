"""
Order fulfillment state machine.

Store orders move Pending -> Approved -> Shipped -> Received, or are
Cancelled before they ship. Shipping allocates finished goods FEFO and
receiving credits the store from those exact allocations.
"""

import random
from datetime import datetime
from typing import NamedTuple

from src.config import get_logger, get_settings
from src.core.common import Clock, ensure_utc, round_quantity, utc_now
from src.core.entities.order import Order, OrderAllocation, OrderItem, OrderStatus
from src.core.entities.product import StoreStatus
from src.core.exceptions import (
    DuplicateError,
    EmptyOrderError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.core.interfaces.order_store import IOrderStore
from src.core.interfaces.unit_of_work import IUnitOfWork, KitchenRepositories
from src.core.services.batch_registry import allocate_product
from src.core.state_machine import ORDER_LIFECYCLE

logger = get_logger(__name__)

_MAX_CODE_ATTEMPTS = 50


class OrderLine(NamedTuple):
    """Requested product and quantity for a new order."""

    product_id: int
    quantity: float


def merge_order_lines(lines: list[OrderLine]) -> dict[int, float]:
    """
    Sum quantities per product, keeping first-seen order.

    Zero quantities are dropped after merging; negatives are rejected.
    """
    merged: dict[int, float] = {}
    for line in lines:
        if line.quantity < 0:
            raise ValidationError("quantity", "cannot be negative", line.quantity)
        merged[line.product_id] = round_quantity(merged.get(line.product_id, 0.0) + line.quantity)
    return {pid: qty for pid, qty in merged.items() if qty > 0}


async def next_order_code(orders: IOrderStore, prefix: str, created_at: datetime) -> str:
    """``PREFIX-YYYYMMDD-NNNN`` with a random, unused sequence."""
    for _ in range(_MAX_CODE_ATTEMPTS):
        code = f"{prefix}-{created_at:%Y%m%d}-{random.randint(0, 9999):04d}"
        if await orders.get_order_by_code(code) is None:
            return code
    raise DuplicateError("Order", "order_code", f"{prefix}-{created_at:%Y%m%d}")


class OrderFulfillmentService:
    """Order creation and lifecycle transitions."""

    def __init__(self, uow: IUnitOfWork, clock: Clock = utc_now):
        self._uow = uow
        self._clock = clock

    async def create(
        self,
        store_id: int,
        items: list[OrderLine],
        requested_delivery_date: datetime | None = None,
        notes: str | None = None,
    ) -> Order:
        """
        Create a Pending order priced at current product prices.

        Raises:
            EmptyOrderError: no line with a positive quantity.
            ValidationError: negative quantity or delivery date in the past.
            NotFoundError: unknown store or product.
            InvalidStateError: store is not Active.
        """
        now = self._clock()
        merged = merge_order_lines(items)
        if not merged:
            raise EmptyOrderError(store_id)

        delivery = ensure_utc(requested_delivery_date) if requested_delivery_date else now
        start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if delivery < start_of_today:
            raise ValidationError(
                "requested_delivery_date", "cannot be in the past", delivery.isoformat()
            )

        async with self._uow.begin() as repos:
            store = await repos.catalog.get_store(store_id)
            if store is None:
                raise NotFoundError("Store", store_id)
            if store.status != StoreStatus.ACTIVE:
                raise InvalidStateError(
                    "Store",
                    f"store {store.store_code} is not active",
                    current=store.status.value,
                )

            order_items = []
            for product_id, quantity in merged.items():
                product = await repos.catalog.get_product(product_id)
                if product is None:
                    raise NotFoundError("Product", product_id)
                order_items.append(
                    OrderItem(product_id=product_id, quantity=quantity, unit_price=product.price)
                )

            code = await next_order_code(
                repos.orders, get_settings().kitchen.order_code_prefix, now
            )
            order = await repos.orders.create_order(
                Order(
                    order_code=code,
                    store_id=store_id,
                    requested_delivery_date=delivery,
                    items=order_items,
                    notes=notes,
                )
            )
        return order

    async def get(self, order_id: int) -> Order:
        async with self._uow.read() as repos:
            order = await repos.orders.get_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def list_orders(
        self,
        store_id: int | None = None,
        status: OrderStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Order]:
        async with self._uow.read() as repos:
            return await repos.orders.list_orders(
                store_id=store_id,
                statuses=[status] if status else None,
                limit=limit,
                offset=offset,
            )

    async def allocations(self, order_id: int) -> list[OrderAllocation]:
        """Batches shipped against an order."""
        async with self._uow.read() as repos:
            if await repos.orders.get_order(order_id) is None:
                raise NotFoundError("Order", order_id)
            return await repos.orders.list_allocations(order_id)

    async def approve(self, order_id: int) -> Order:
        async with self._uow.begin() as repos:
            order = await self._transition(repos, order_id, OrderStatus.APPROVED)
        return order

    async def ship(self, order_id: int) -> Order:
        """
        Allocate every item FEFO and mark the order Shipped.

        All items ship or none do: an InsufficientStockError leaves the order
        Approved and every batch untouched.
        """
        now = self._clock()
        async with self._uow.begin() as repos:
            order = await self._require_order(repos, order_id)
            ORDER_LIFECYCLE.ensure_transition(order.status, OrderStatus.SHIPPED)

            allocations: list[OrderAllocation] = []
            for item in order.items:
                draws = await allocate_product(repos, item.product_id, item.quantity, now)
                allocations.extend(
                    OrderAllocation(
                        order_id=order_id,
                        product_id=item.product_id,
                        product_batch_id=d.batch_id,
                        quantity=d.quantity,
                        created_at=now,
                    )
                    for d in draws
                )
            await repos.orders.add_allocations(allocations)
            order = await self._transition(repos, order_id, OrderStatus.SHIPPED, order=order)

        logger.info("order_shipped", order_id=order_id, allocations=len(allocations))
        return order

    async def receive(self, order_id: int) -> Order:
        """Mark a Shipped order Received and credit the store exactly once."""
        now = self._clock()
        async with self._uow.begin() as repos:
            # Status moves first so a second call fails before any credit
            order = await self._transition(repos, order_id, OrderStatus.RECEIVED)
            for allocation in await repos.orders.list_allocations(order_id):
                await repos.store_inventory.credit(
                    order.store_id,
                    allocation.product_id,
                    allocation.product_batch_id,
                    allocation.quantity,
                    now,
                )

        logger.info("order_received", order_id=order_id, store_id=order.store_id)
        return order

    async def cancel(self, order_id: int, reason: str | None = None) -> Order:
        async with self._uow.begin() as repos:
            order = await self._transition(
                repos, order_id, OrderStatus.CANCELLED, reason=reason
            )
        return order

    async def update_status(
        self, order_id: int, status: OrderStatus, reason: str | None = None
    ) -> Order:
        """Dispatch a requested target status to its operation."""
        if status == OrderStatus.APPROVED:
            return await self.approve(order_id)
        if status == OrderStatus.SHIPPED:
            return await self.ship(order_id)
        if status == OrderStatus.RECEIVED:
            return await self.receive(order_id)
        if status == OrderStatus.CANCELLED:
            return await self.cancel(order_id, reason)
        current = (await self.get(order_id)).status
        raise InvalidTransitionError("Order", current.value, status.value)

    async def _transition(
        self,
        repos: KitchenRepositories,
        order_id: int,
        target: OrderStatus,
        reason: str | None = None,
        order: Order | None = None,
    ) -> Order:
        order = order or await self._require_order(repos, order_id)
        ORDER_LIFECYCLE.ensure_transition(order.status, target)
        if not await repos.orders.update_status(
            order_id, order.status, target, self._clock(), reason=reason
        ):
            raise InvalidTransitionError("Order", order.status.value, target.value)
        logger.info(
            "order_status_changed",
            order_id=order_id,
            from_status=order.status.value,
            to_status=target.value,
        )
        return await self._require_order(repos, order_id)

    @staticmethod
    async def _require_order(repos: KitchenRepositories, order_id: int) -> Order:
        order = await repos.orders.get_order(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order
