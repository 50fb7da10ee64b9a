"""
Inventory aggregation view.

Read-only projections recomputed on every call. Nothing here is cached or
written back, so the numbers always agree with the underlying batches.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from src.config import get_settings
from src.core.common import Clock, ensure_utc, round_quantity, utc_now
from src.core.entities.batch import BatchStatus, ProductBatch
from src.core.entities.ingredient import Ingredient, IngredientBatch
from src.core.entities.order import OrderStatus
from src.core.exceptions import NotFoundError, ValidationError
from src.core.interfaces.unit_of_work import IUnitOfWork


@dataclass
class IngredientStock:
    ingredient: Ingredient
    total_quantity: float
    batch_count: int

    @property
    def is_low_stock(self) -> bool:
        return self.total_quantity < self.ingredient.warning_threshold


@dataclass
class StoreProductStock:
    """One product held at a store, summed over its batches."""

    product_id: int
    total_quantity: float
    batch_count: int
    earliest_expiry: datetime | None
    is_expiring_soon: bool


@dataclass
class ProductStock:
    product_id: int
    total_quantity: float
    batch_count: int


@dataclass
class ProductDemand:
    """Open order quantity for one product."""

    product_id: int
    total_quantity: float
    order_count: int
    order_codes: list[str] = field(default_factory=list)


class InventoryViewService:
    """Stock and demand projections across the kitchen and stores."""

    def __init__(self, uow: IUnitOfWork, clock: Clock = utc_now):
        self._uow = uow
        self._clock = clock

    async def ingredient_stock(self) -> list[IngredientStock]:
        """Available quantity of every ingredient, ordered by name."""
        now = self._clock()
        stock = []
        async with self._uow.read() as repos:
            for ingredient in await repos.ingredients.list_ingredients():
                batches = await repos.ingredients.list_available_batches(
                    ingredient.id, now  # type: ignore[arg-type]
                )
                stock.append(
                    IngredientStock(
                        ingredient=ingredient,
                        total_quantity=round_quantity(sum(b.current_quantity for b in batches)),
                        batch_count=len(batches),
                    )
                )
        return stock

    async def low_stock_ingredients(self) -> list[IngredientStock]:
        return [s for s in await self.ingredient_stock() if s.is_low_stock]

    async def expiring_batches(self, within_days: int | None = None) -> list[ProductBatch]:
        """Active product batches with stock left that expire within the window."""
        now, until = self._window(within_days)
        async with self._uow.read() as repos:
            return await repos.batches.list_expiring_batches(now, until)

    async def expiring_ingredient_batches(
        self, within_days: int | None = None
    ) -> list[IngredientBatch]:
        now, until = self._window(within_days)
        async with self._uow.read() as repos:
            return await repos.ingredients.list_expiring_batches(now, until)

    async def store_inventory(self, store_id: int) -> list[StoreProductStock]:
        """
        A store's holdings grouped by product.

        ``is_expiring_soon`` follows the earliest expiry among the product's
        lines that still hold stock.
        """
        now = self._clock()
        soon = now + timedelta(days=get_settings().kitchen.expiring_soon_days)
        async with self._uow.read() as repos:
            if await repos.catalog.get_store(store_id) is None:
                raise NotFoundError("Store", store_id)
            lines = await repos.store_inventory.list_lines(store_id)

        grouped: dict[int, list] = {}
        for line in lines:
            if line.quantity > 0:
                grouped.setdefault(line.product_id, []).append(line)

        result = []
        for product_id, product_lines in grouped.items():
            expiries = [ln.expiry_date for ln in product_lines if ln.expiry_date is not None]
            earliest = min(expiries) if expiries else None
            result.append(
                StoreProductStock(
                    product_id=product_id,
                    total_quantity=round_quantity(sum(ln.quantity for ln in product_lines)),
                    batch_count=len(product_lines),
                    earliest_expiry=earliest,
                    is_expiring_soon=earliest is not None and now <= earliest <= soon,
                )
            )
        return result

    async def product_stock(self, product_id: int | None = None) -> list[ProductStock]:
        """Allocatable finished goods per product."""
        now = self._clock()
        async with self._uow.read() as repos:
            batches = await repos.batches.list_batches(
                product_id=product_id, status=BatchStatus.ACTIVE
            )
        totals: dict[int, ProductStock] = {}
        for batch in batches:
            if not batch.is_available(now):
                continue
            stock = totals.setdefault(batch.product_id, ProductStock(batch.product_id, 0.0, 0))
            stock.total_quantity = round_quantity(stock.total_quantity + batch.current_quantity)
            stock.batch_count += 1
        return sorted(totals.values(), key=lambda s: s.product_id)

    async def daily_demand(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ProductDemand]:
        """
        Quantity requested by Pending and Approved orders, per product.

        Defaults to orders created from the start of today over the
        configured demand window. Sorted by quantity, largest first.
        """
        now = self._clock()
        if start is None:
            start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if end is None:
            end = ensure_utc(start) + timedelta(days=get_settings().kitchen.demand_window_days)
        start, end = ensure_utc(start), ensure_utc(end)
        if end < start:
            raise ValidationError("end", "must not be before start", end.isoformat())

        async with self._uow.read() as repos:
            orders = await repos.orders.list_orders(
                statuses=[OrderStatus.PENDING, OrderStatus.APPROVED],
                created_from=start,
                created_to=end,
                limit=None,
            )

        demand: dict[int, ProductDemand] = {}
        for order in orders:
            for item in order.items:
                entry = demand.setdefault(item.product_id, ProductDemand(item.product_id, 0.0, 0))
                entry.total_quantity = round_quantity(entry.total_quantity + item.quantity)
                entry.order_count += 1
                entry.order_codes.append(order.order_code)

        return sorted(demand.values(), key=lambda d: (-d.total_quantity, d.product_id))

    def _window(self, within_days: int | None) -> tuple[datetime, datetime]:
        if within_days is None:
            within_days = get_settings().kitchen.expiring_soon_days
        if within_days < 0:
            raise ValidationError("within_days", "cannot be negative", within_days)
        now = self._clock()
        return now, now + timedelta(days=within_days)
