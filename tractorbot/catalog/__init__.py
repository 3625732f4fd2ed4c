"""Catalog exports."""

from tractorbot.catalog.models import Category, Item
from tractorbot.catalog.store import (
    CatalogStore,
    InMemoryCatalogStore,
    SqlCatalogStore,
    load_catalog_file,
    seed_catalog,
)

__all__ = [
    "Category",
    "Item",
    "CatalogStore",
    "InMemoryCatalogStore",
    "SqlCatalogStore",
    "load_catalog_file",
    "seed_catalog",
]
