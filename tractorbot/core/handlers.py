"""Handlers for commands that never touch session state."""

from tractorbot.catalog.models import Category
from tractorbot.catalog.store import CatalogStore
from tractorbot.core import replies
from tractorbot.core.replies import Reply
from tractorbot.core.validators import parse_item_id


class CatalogHandlers:
    """Replies built from the catalog and fixed copy."""

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    async def start(self, argument: str | None = None) -> Reply:
        return Reply.text(replies.WELCOME)

    async def recommend(self, argument: str | None = None) -> Reply:
        return Reply.text(replies.RECOMMEND)

    async def help(self, argument: str | None = None) -> Reply:
        return Reply.text(replies.HELP)

    async def category(self, argument: str | None) -> Reply:
        category = Category.parse(argument or "")
        if category is None:
            return await self.help()
        items = await self.catalog.list_by_category(category)
        return replies.category_listing(category.value, items)

    async def browse(self, argument: str | None = None) -> Reply:
        return replies.browse_listing(await self.catalog.list_items())

    async def view(self, argument: str | None) -> Reply:
        item_id = parse_item_id(argument)
        item = await self.catalog.find_item(item_id) if item_id is not None else None
        if item is None:
            return Reply.text(replies.ITEM_NOT_FOUND)
        return replies.item_detail(item)
