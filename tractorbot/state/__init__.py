"""State management exports."""

from tractorbot.state.models import (
    ConversationState,
    Negotiation,
    NegotiationStage,
    Session,
)
from tractorbot.state.store import (
    InMemorySessionStore,
    SessionStore,
    SqlSessionStore,
    UserLockRegistry,
)

__all__ = [
    "ConversationState",
    "Negotiation",
    "NegotiationStage",
    "Session",
    "SessionStore",
    "InMemorySessionStore",
    "SqlSessionStore",
    "UserLockRegistry",
]
