"""Abstract interface for product and store reference data."""

from abc import ABC, abstractmethod

from src.core.entities.product import Product, Store


class ICatalogStore(ABC):
    """Interface for products (with recipes) and stores."""

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a product together with its recipe lines."""
        pass

    @abstractmethod
    async def get_product(self, product_id: int) -> Product | None:
        """Get product (with recipe) by ID."""
        pass

    @abstractmethod
    async def get_product_by_sku(self, sku: str) -> Product | None:
        """Get product by SKU."""
        pass

    @abstractmethod
    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        """List products ordered by name."""
        pass

    @abstractmethod
    async def create_store(self, store: Store) -> Store:
        """Create a store."""
        pass

    @abstractmethod
    async def get_store(self, store_id: int) -> Store | None:
        """Get store by ID."""
        pass

    @abstractmethod
    async def get_store_by_code(self, store_code: str) -> Store | None:
        """Get store by its unique code."""
        pass

    @abstractmethod
    async def list_stores(self, limit: int = 100, offset: int = 0) -> list[Store]:
        """List stores ordered by name."""
        pass
