"""Read-only catalog stores.

The catalog is loaded from a JSON seed file into the ``items`` table on
startup. Handlers only ever read from it through a ``CatalogStore``.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tractorbot.catalog.models import Category, Item
from tractorbot.core.errors import NotFoundError, StoreUnavailableError
from tractorbot.db.base import get_async_session_factory
from tractorbot.db.models import ItemModel

logger = structlog.get_logger()


class CatalogStore(ABC):
    """Read-only access to catalog items."""

    @abstractmethod
    async def list_items(self) -> list[Item]:
        """All items, in store order."""

    @abstractmethod
    async def find_item(self, item_id: int) -> Optional[Item]:
        """Item with the given id, or None."""

    async def get_item(self, item_id: int) -> Item:
        """Item with the given id.

        Raises:
            NotFoundError: if no item has this id
        """
        item = await self.find_item(item_id)
        if item is None:
            raise NotFoundError(item_id)
        return item

    async def list_by_category(self, category: Category | str) -> list[Item]:
        """Items whose category matches case-insensitively, in store order."""
        wanted = category.value if isinstance(category, Category) else category.lower()
        return [item for item in await self.list_items() if item.category.lower() == wanted]


class InMemoryCatalogStore(CatalogStore):
    """Catalog held in a list. Used by tests and the memory backend."""

    def __init__(self, items: Iterable[Item]):
        self._items = list(items)

    async def list_items(self) -> list[Item]:
        return list(self._items)

    async def find_item(self, item_id: int) -> Optional[Item]:
        return next((item for item in self._items if item.id == item_id), None)


class SqlCatalogStore(CatalogStore):
    """Catalog backed by the ``items`` table."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory or get_async_session_factory()

    async def list_items(self) -> list[Item]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(ItemModel).order_by(ItemModel.id))
                return [_to_item(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreUnavailableError("list_items", e) from e

    async def find_item(self, item_id: int) -> Optional[Item]:
        try:
            async with self.session_factory() as session:
                model = await session.get(ItemModel, item_id)
                return _to_item(model) if model else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError("find_item", e) from e

    async def list_by_category(self, category: Category | str) -> list[Item]:
        wanted = category.value if isinstance(category, Category) else category.lower()
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(ItemModel)
                    .where(func.lower(ItemModel.category) == wanted)
                    .order_by(ItemModel.id)
                )
                return [_to_item(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreUnavailableError("list_by_category", e) from e


def _to_item(model: ItemModel) -> Item:
    return Item(
        id=model.id,
        name=model.name,
        price=model.price,
        condition=model.condition,
        category=model.category,
        image=model.image,
    )


def load_catalog_file(path: Path) -> list[Item]:
    """Load items from a JSON seed file.

    Accepts either a bare list of items or an object with a ``tractors``
    (or ``items``) list.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("tractors", data.get("items", []))
    return [Item.model_validate(entry) for entry in data]


async def seed_catalog(
    items: list[Item],
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    replace: bool = False,
) -> int:
    """Insert items into an empty ``items`` table.

    Args:
        items: Items to insert
        session_factory: Optional factory (defaults to the global one)
        replace: Delete existing rows first

    Returns:
        Number of items inserted (0 if the table was already populated)
    """
    session_factory = session_factory or get_async_session_factory()
    async with session_factory() as session:
        if replace:
            for model in (await session.execute(select(ItemModel))).scalars().all():
                await session.delete(model)
        else:
            existing = await session.execute(select(ItemModel.id).limit(1))
            if existing.scalar_one_or_none() is not None:
                return 0

        for item in items:
            session.add(
                ItemModel(
                    id=item.id,
                    name=item.name,
                    price=item.price,
                    condition=item.condition,
                    category=item.category,
                    image=item.image,
                )
            )
        await session.commit()

    logger.info("Seeded catalog", items=len(items), replace=replace)
    return len(items)
