"""Session storage keyed by user identifier.

Each user's session is a single row, so a mutation only touches that user's
record. Read-modify-write cycles are serialized per user with
``SessionStore.lock``; different users never wait on each other.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tractorbot.core.errors import StoreUnavailableError
from tractorbot.db.base import get_async_session_factory
from tractorbot.db.models import UserSessionModel
from .models import Negotiation, NegotiationStage, Session

logger = structlog.get_logger()


class UserLockRegistry:
    """One ``asyncio.Lock`` per user id, created on demand.

    A lock is discarded as soon as nobody holds or waits for it, so the
    registry only grows with the number of users active right now.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._holders[user_id] = self._holders.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[user_id] -= 1
            if self._holders[user_id] == 0:
                del self._holders[user_id]
                del self._locks[user_id]

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, user_id: str) -> bool:
        lock = self._locks.get(user_id)
        return lock is not None and lock.locked()


class SessionStore(ABC):
    """Durable mapping from user id to ``Session``."""

    def __init__(self):
        self.locks = UserLockRegistry()

    def lock(self, user_id: str):
        """Exclusive access to one user's session.

        Hold it from before ``get`` until after ``upsert``/``clear``.
        """
        return self.locks.hold(user_id)

    @abstractmethod
    async def get(self, user_id: str) -> Optional[Session]:
        """Session for the user, or None if the user has never mutated state."""

    @abstractmethod
    async def upsert(self, session: Session) -> None:
        """Create or replace the user's session."""

    @abstractmethod
    async def clear(self, user_id: str) -> bool:
        """Delete the user's session. Returns True if one existed."""


class InMemorySessionStore(SessionStore):
    """Dictionary-backed store, for tests and single-process development."""

    def __init__(self):
        super().__init__()
        self._sessions: dict[str, Session] = {}

    async def get(self, user_id: str) -> Optional[Session]:
        session = self._sessions.get(user_id)
        return session.model_copy(deep=True) if session else None

    async def upsert(self, session: Session) -> None:
        self._sessions[session.user_id] = session.model_copy(deep=True)

    async def clear(self, user_id: str) -> bool:
        return self._sessions.pop(user_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


class SqlSessionStore(SessionStore):
    """Sessions in the ``user_sessions`` table, one row per user."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        super().__init__()
        self._session_factory = session_factory

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory or get_async_session_factory()

    async def get(self, user_id: str) -> Optional[Session]:
        try:
            async with self.session_factory() as db:
                model = await db.get(UserSessionModel, user_id)
                return _to_session(model) if model else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError("get_session", e) from e

    async def upsert(self, session: Session) -> None:
        negotiation = session.negotiation
        try:
            async with self.session_factory() as db:
                model = await db.get(UserSessionModel, session.user_id)
                if model is None:
                    model = UserSessionModel(user_id=session.user_id)
                    db.add(model)
                model.display_name = session.display_name
                model.negotiation_item_id = negotiation.item_id if negotiation else None
                model.negotiation_stage = negotiation.stage.value if negotiation else None
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailableError("upsert_session", e) from e

        logger.debug(
            "Saved session",
            stage=negotiation.stage.value if negotiation else None,
        )

    async def clear(self, user_id: str) -> bool:
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    delete(UserSessionModel).where(UserSessionModel.user_id == user_id)
                )
                await db.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise StoreUnavailableError("clear_session", e) from e


def _to_session(model: UserSessionModel) -> Session:
    negotiation = None
    if model.negotiation_item_id is not None and model.negotiation_stage:
        negotiation = Negotiation(
            item_id=model.negotiation_item_id,
            stage=NegotiationStage(model.negotiation_stage),
        )
    return Session(
        user_id=model.user_id,
        display_name=model.display_name,
        negotiation=negotiation,
    )
