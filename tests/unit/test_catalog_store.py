"""Tests for catalog stores and seeding."""

import json
from decimal import Decimal

import pytest

from tractorbot.catalog.models import Category, Item
from tractorbot.catalog.store import SqlCatalogStore, load_catalog_file, seed_catalog
from tractorbot.config.settings import settings
from tractorbot.core.errors import NotFoundError


class TestInMemoryCatalogStore:
    @pytest.mark.asyncio
    async def test_get_item(self, catalog):
        item = await catalog.get_item(2)
        assert item.name == "Kubota BX2380"
        assert item.price == Decimal("10000")

    @pytest.mark.asyncio
    async def test_get_missing_item_raises(self, catalog):
        with pytest.raises(NotFoundError) as exc_info:
            await catalog.get_item(99)
        assert exc_info.value.item_id == 99

    @pytest.mark.asyncio
    async def test_find_missing_item(self, catalog):
        assert await catalog.find_item(99) is None

    @pytest.mark.asyncio
    async def test_category_case_insensitive_store_order(self, catalog):
        items = await catalog.list_by_category("FARMING")
        assert [item.id for item in items] == [1, 4]

        items = await catalog.list_by_category(Category.CONSTRUCTION)
        assert [item.id for item in items] == [3]


class TestSqlCatalogStore:
    """Tests for SqlCatalogStore against the per-test SQLite database."""

    @pytest.fixture
    def store(self):
        return SqlCatalogStore()

    @pytest.mark.asyncio
    async def test_seed_and_read(self, store, catalog_items):
        inserted = await seed_catalog(catalog_items)
        assert inserted == len(catalog_items)

        items = await store.list_items()
        assert [item.id for item in items] == [1, 2, 3, 4]
        assert items[2].price == Decimal("12345.5")

        item = await store.get_item(2)
        assert item == catalog_items[1]

    @pytest.mark.asyncio
    async def test_seed_skips_populated_table(self, catalog_items):
        await seed_catalog(catalog_items)
        assert await seed_catalog(catalog_items[:1]) == 0

    @pytest.mark.asyncio
    async def test_seed_replace(self, store, catalog_items):
        await seed_catalog(catalog_items)
        assert await seed_catalog(catalog_items[:2], replace=True) == 2
        assert [item.id for item in await store.list_items()] == [1, 2]

    @pytest.mark.asyncio
    async def test_list_by_category(self, store, catalog_items):
        await seed_catalog(catalog_items)

        items = await store.list_by_category(Category.FARMING)
        assert [item.name for item in items] == ["John Deere 5075E", "Case IH Farmall 75C"]

    @pytest.mark.asyncio
    async def test_missing_item(self, store, catalog_items):
        await seed_catalog(catalog_items)

        assert await store.find_item(42) is None
        with pytest.raises(NotFoundError):
            await store.get_item(42)


class TestLoadCatalogFile:
    def test_bundled_catalog(self):
        items = load_catalog_file(settings.catalog_path)

        assert len(items) >= 3
        assert {Category.parse(item.category) for item in items} == set(Category)
        assert all(item.price > 0 for item in items)
        kubota = next(item for item in items if item.id == 2)
        assert kubota.price == Decimal("10000")

    def test_plain_list(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([
            {"id": 9, "name": "Tiny", "price": 500, "condition": "new",
             "category": "farming", "image": "https://images.test/tiny.jpg"},
        ]))

        items = load_catalog_file(path)

        assert items == [
            Item(id=9, name="Tiny", price=Decimal("500"), condition="new",
                 category="farming", image="https://images.test/tiny.jpg"),
        ]

    def test_rejects_non_positive_price(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps({"tractors": [
            {"id": 9, "name": "Free", "price": 0, "condition": "new",
             "useCase": "Farming", "image": "x"},
        ]}))

        with pytest.raises(ValueError):
            load_catalog_file(path)
