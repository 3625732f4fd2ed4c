"""Shared dispatcher instance for the HTTP routes."""

from typing import Optional

from tractorbot.catalog.store import CatalogStore, InMemoryCatalogStore, SqlCatalogStore, load_catalog_file
from tractorbot.config.settings import settings
from tractorbot.core.dispatcher import Dispatcher
from tractorbot.state.store import InMemorySessionStore, SessionStore, SqlSessionStore

_dispatcher: Optional[Dispatcher] = None


def create_dispatcher() -> Dispatcher:
    """Build a dispatcher for the configured session backend."""
    catalog: CatalogStore
    sessions: SessionStore
    if settings.session_backend == "memory":
        catalog = InMemoryCatalogStore(load_catalog_file(settings.catalog_path))
        sessions = InMemorySessionStore()
    else:
        catalog = SqlCatalogStore()
        sessions = SqlSessionStore()
    return Dispatcher(catalog, sessions, min_offer_ratio=settings.min_offer_ratio)


def get_dispatcher() -> Dispatcher:
    """Get the global dispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = create_dispatcher()
    return _dispatcher


def set_dispatcher(dispatcher: Optional[Dispatcher]):
    """Set the global dispatcher instance (for testing)."""
    global _dispatcher
    _dispatcher = dispatcher
