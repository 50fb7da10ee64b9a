"""Tests for CatalogService."""

import pytest

from src.core.entities import RecipeLine, StoreStatus
from src.core.exceptions import DuplicateError, NotFoundError


class TestProducts:
    async def test_recipe_lines_are_summed(self, seed, catalog):
        flour = await seed.ingredient("Flour")
        product = await catalog.create_product(
            "Moon Cake",
            "mooncake",
            shelf_life_days=3,
            recipe=[
                RecipeLine(ingredient_id=flour.id, quantity=0.25),
                RecipeLine(ingredient_id=flour.id, quantity=0.25),
            ],
        )
        assert product.sku == "MOONCAKE"
        loaded = await catalog.get_product(product.id)
        assert [(r.ingredient_id, r.quantity) for r in loaded.recipe] == [(flour.id, 0.5)]

    async def test_duplicate_sku(self, seed, catalog):
        await seed.product("Moon Cake", "MOONCAKE", {})
        with pytest.raises(DuplicateError):
            await catalog.create_product("Other", "mooncake", shelf_life_days=1)

    async def test_unknown_recipe_ingredient(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.create_product(
                "Moon Cake", "MOONCAKE", 3, recipe=[RecipeLine(ingredient_id=7, quantity=1)]
            )

    async def test_get_missing(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.get_product(1)


class TestStores:
    async def test_create_and_list(self, catalog):
        store = await catalog.create_store("Downtown", "st-001", address="1 Main St")
        assert store.store_code == "ST-001"
        assert store.status == StoreStatus.ACTIVE
        assert [s.id for s in await catalog.list_stores()] == [store.id]

    async def test_duplicate_code_or_name(self, catalog):
        await catalog.create_store("Downtown", "ST-001")
        with pytest.raises(DuplicateError):
            await catalog.create_store("Uptown", "st-001")
        with pytest.raises(DuplicateError):
            await catalog.create_store("Downtown", "ST-002")
