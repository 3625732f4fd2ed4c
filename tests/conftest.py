"""Pytest configuration and shared fixtures."""

import asyncio
from decimal import Decimal
from pathlib import Path

import pytest

from tractorbot.catalog.models import Item
from tractorbot.catalog.store import InMemoryCatalogStore
from tractorbot.core.dispatcher import Dispatcher
from tractorbot.state.store import InMemorySessionStore


@pytest.fixture(autouse=True)
def init_test_database(tmp_path: Path):
    """Point the global engine at a fresh SQLite file for every test."""
    from tractorbot.config import settings as settings_module
    from tractorbot.db.base import get_engine, init_db, reset_engine

    reset_engine()

    # Ensure we use SQLite for tests (not PostgreSQL)
    original_database_url = settings_module.settings.database_url
    settings_module.settings.database_url = None

    test_db_path = tmp_path / "test.db"
    original_database_path = settings_module.settings.database_path
    settings_module.settings.database_path = test_db_path

    async def init():
        await init_db()
        # Connections are bound to this loop; the test opens its own
        await get_engine().dispose()

    asyncio.run(init())
    yield

    reset_engine()
    settings_module.settings.database_url = original_database_url
    settings_module.settings.database_path = original_database_path


@pytest.fixture
def catalog_items() -> list[Item]:
    """A small catalog in store order (not sorted by category or price)."""
    return [
        Item(
            id=1,
            name="John Deere 5075E",
            price=Decimal("42000"),
            condition="used",
            category="Farming",
            image="https://images.test/jd-5075e.jpg",
        ),
        Item(
            id=2,
            name="Kubota BX2380",
            price=Decimal("10000"),
            condition="refurbished",
            category="Landscaping",
            image="https://images.test/kubota-bx2380.jpg",
        ),
        Item(
            id=3,
            name="JCB 3CX Backhoe Loader",
            price=Decimal("12345.5"),
            condition="used",
            category="Construction",
            image="https://images.test/jcb-3cx.jpg",
        ),
        Item(
            id=4,
            name="Case IH Farmall 75C",
            price=Decimal("38500"),
            condition="new",
            category="Farming",
            image="https://images.test/case-75c.jpg",
        ),
    ]


@pytest.fixture
def catalog(catalog_items) -> InMemoryCatalogStore:
    return InMemoryCatalogStore(catalog_items)


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def dispatcher(catalog, sessions) -> Dispatcher:
    return Dispatcher(catalog, sessions, min_offer_ratio=Decimal("0.9"))
