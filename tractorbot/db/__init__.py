"""Database layer with SQLAlchemy ORM."""

from .base import Base, get_engine, get_async_session_factory, init_db, reset_engine
from .models import ItemModel, UserSessionModel

__all__ = [
    "Base",
    "get_engine",
    "get_async_session_factory",
    "init_db",
    "reset_engine",
    "ItemModel",
    "UserSessionModel",
]
