"""Conversation state models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class NegotiationStage(str, Enum):
    """Input an active negotiation is waiting for."""

    COLLECTING_NAME = "collecting_name"
    COLLECTING_OFFER = "collecting_offer"


class ConversationState(str, Enum):
    """Every state of the negotiation protocol.

    ``NO_NEGOTIATION`` and ``DEAL_ACCEPTED`` are never stored: both are
    persisted as a session without a negotiation.
    """

    NO_NEGOTIATION = "no_negotiation"
    COLLECTING_NAME = "collecting_name"
    COLLECTING_OFFER = "collecting_offer"
    DEAL_ACCEPTED = "deal_accepted"


class Negotiation(BaseModel):
    """An in-progress purchase discussion for one item."""

    item_id: int
    stage: NegotiationStage = NegotiationStage.COLLECTING_NAME


class Session(BaseModel):
    """Durable per-user conversation record."""

    user_id: str
    display_name: Optional[str] = None
    negotiation: Optional[Negotiation] = None

    @property
    def state(self) -> ConversationState:
        if self.negotiation is None:
            return ConversationState.NO_NEGOTIATION
        return ConversationState(self.negotiation.stage.value)

    @property
    def stage(self) -> Optional[NegotiationStage]:
        return self.negotiation.stage if self.negotiation else None
