"""Reference data: products with recipes, and stores."""

from src.core.common import Clock, round_quantity, utc_now
from src.core.entities.product import Product, RecipeLine, Store, StoreStatus
from src.core.exceptions import DuplicateError, NotFoundError
from src.core.interfaces.unit_of_work import IUnitOfWork


class CatalogService:
    """Products and stores referenced by production and orders."""

    def __init__(self, uow: IUnitOfWork, clock: Clock = utc_now):
        self._uow = uow
        self._clock = clock

    async def create_product(
        self,
        name: str,
        sku: str,
        shelf_life_days: int,
        price: float = 0.0,
        unit: str = "piece",
        recipe: list[RecipeLine] | None = None,
    ) -> Product:
        """Create a product. Recipe lines for the same ingredient are summed."""
        merged: dict[int, float] = {}
        for line in recipe or []:
            merged[line.ingredient_id] = round_quantity(
                merged.get(line.ingredient_id, 0.0) + line.quantity
            )
        product = Product(
            name=name,
            sku=sku,
            price=price,
            unit=unit,
            shelf_life_days=shelf_life_days,
            recipe=[RecipeLine(ingredient_id=i, quantity=q) for i, q in merged.items()],
        )

        async with self._uow.begin() as repos:
            if await repos.catalog.get_product_by_sku(product.sku) is not None:
                raise DuplicateError("Product", "sku", product.sku)
            for ingredient_id in merged:
                if await repos.ingredients.get_ingredient(ingredient_id) is None:
                    raise NotFoundError("Ingredient", ingredient_id)
            return await repos.catalog.create_product(product)

    async def get_product(self, product_id: int) -> Product:
        async with self._uow.read() as repos:
            product = await repos.catalog.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        async with self._uow.read() as repos:
            return await repos.catalog.list_products(limit=limit, offset=offset)

    async def create_store(
        self,
        store_name: str,
        store_code: str,
        address: str = "",
        phone: str | None = None,
        status: StoreStatus = StoreStatus.ACTIVE,
    ) -> Store:
        store = Store(
            store_name=store_name,
            store_code=store_code,
            address=address,
            phone=phone,
            status=status,
        )
        async with self._uow.begin() as repos:
            if await repos.catalog.get_store_by_code(store.store_code) is not None:
                raise DuplicateError("Store", "store_code", store.store_code)
            for existing in await repos.catalog.list_stores(limit=-1):
                if existing.store_name == store.store_name:
                    raise DuplicateError("Store", "store_name", store.store_name)
            return await repos.catalog.create_store(store)

    async def get_store(self, store_id: int) -> Store:
        async with self._uow.read() as repos:
            store = await repos.catalog.get_store(store_id)
        if store is None:
            raise NotFoundError("Store", store_id)
        return store

    async def list_stores(self, limit: int = 100, offset: int = 0) -> list[Store]:
        async with self._uow.read() as repos:
            return await repos.catalog.list_stores(limit=limit, offset=offset)
