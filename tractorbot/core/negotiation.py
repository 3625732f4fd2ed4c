"""Negotiation state machine.

States (see ``ConversationState``)::

    no_negotiation --negotiate(id)--> collecting_name     item must exist
    collecting_name --name--> collecting_offer            name must validate
    collecting_offer --offer >= minimum--> deal_accepted  negotiation cleared
    collecting_offer --offer < minimum--> collecting_offer
    collecting_offer --non-numeric--> collecting_offer
    collecting_offer --negotiate(id)--> collecting_name   replaces the negotiation

Every transition returns a ``Transition`` with the resulting session and
reply. Sessions are never mutated in place; callers persist
``Transition.session`` when ``Transition.changed`` is true.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

import structlog

from tractorbot.catalog.store import CatalogStore
from tractorbot.core import replies
from tractorbot.core.commands import RESERVED_WORDS
from tractorbot.core.errors import NotFoundError, ValidationError
from tractorbot.core.replies import Reply
from tractorbot.core.validators import (
    is_acceptable_offer,
    minimum_offer,
    parse_item_id,
    parse_offer_amount,
    validate_name,
)
from tractorbot.logging import log_business_event, log_transition
from tractorbot.state.models import (
    ConversationState,
    Negotiation,
    NegotiationStage,
    Session,
)

logger = structlog.get_logger()


class TransitionOutcome(str, Enum):
    NEGOTIATION_STARTED = "negotiation_started"
    ITEM_NOT_FOUND = "item_not_found"
    NAME_ACCEPTED = "name_accepted"
    NAME_REJECTED = "name_rejected"
    DEAL_ACCEPTED = "deal_accepted"
    OFFER_REJECTED = "offer_rejected"
    OFFER_INVALID = "offer_invalid"
    NO_ACTIVE_NEGOTIATION = "no_active_negotiation"


@dataclass
class Transition:
    """Result of feeding one input to the state machine."""

    before: Optional[Session]
    session: Optional[Session]
    from_state: ConversationState
    to_state: ConversationState
    outcome: TransitionOutcome
    reply: Reply

    @property
    def changed(self) -> bool:
        return self.session is not None and self.session != self.before


def _state(session: Optional[Session]) -> ConversationState:
    return session.state if session else ConversationState.NO_NEGOTIATION


class NegotiationStateMachine:
    """Stage transitions for a single user's negotiation."""

    def __init__(self, catalog: CatalogStore, min_offer_ratio: Decimal | float | str = Decimal("0.9")):
        self.catalog = catalog
        self.min_offer_ratio = Decimal(str(min_offer_ratio))

    def _finish(
        self,
        user_id: str,
        before: Optional[Session],
        after: Optional[Session],
        outcome: TransitionOutcome,
        reply: Reply,
        to_state: Optional[ConversationState] = None,
    ) -> Transition:
        transition = Transition(
            before=before,
            session=after,
            from_state=_state(before),
            to_state=to_state or _state(after),
            outcome=outcome,
            reply=reply,
        )
        log_transition(
            user_id,
            transition.from_state.value,
            transition.to_state.value,
            outcome.value,
        )
        return transition

    async def negotiate(
        self, user_id: str, session: Optional[Session], item_ref: Optional[str]
    ) -> Transition:
        """Open (or restart) a negotiation for an item.

        Creates the session on first contact. An existing negotiation is
        replaced without confirmation.
        """
        item_id = parse_item_id(item_ref)
        try:
            if item_id is None:
                raise NotFoundError(item_id)
            item = await self.catalog.get_item(item_id)
        except NotFoundError:
            return self._finish(
                user_id, session, session,
                TransitionOutcome.ITEM_NOT_FOUND,
                Reply.text(replies.ITEM_NOT_FOUND),
            )

        if session is not None and session.negotiation is not None:
            logger.info(
                "Replacing active negotiation",
                previous_item=session.negotiation.item_id,
                item=item.id,
            )

        base = session or Session(user_id=user_id)
        after = base.model_copy(update={"negotiation": Negotiation(item_id=item.id)})
        return self._finish(
            user_id, session, after,
            TransitionOutcome.NEGOTIATION_STARTED,
            replies.ask_for_name(item),
        )

    async def submit_name(self, session: Session, text: str) -> Transition:
        """Record the buyer's name and move on to collecting an offer."""
        try:
            name = validate_name(text, reserved=RESERVED_WORDS)
        except ValidationError:
            return self._finish(
                session.user_id, session, session,
                TransitionOutcome.NAME_REJECTED,
                Reply.text(replies.INVALID_NAME),
            )

        negotiation = session.negotiation.model_copy(
            update={"stage": NegotiationStage.COLLECTING_OFFER}
        )
        after = session.model_copy(update={"display_name": name, "negotiation": negotiation})
        return self._finish(
            session.user_id, session, after,
            TransitionOutcome.NAME_ACCEPTED,
            replies.ask_for_offer(name),
        )

    async def submit_offer(
        self, user_id: str, session: Optional[Session], amount_ref: Optional[str]
    ) -> Transition:
        """Accept or reject an offer against the item's stored price."""
        if session is None or session.stage != NegotiationStage.COLLECTING_OFFER:
            return self._finish(
                user_id, session, session,
                TransitionOutcome.NO_ACTIVE_NEGOTIATION,
                Reply.text(replies.NO_ACTIVE_NEGOTIATION),
            )

        try:
            amount = parse_offer_amount(amount_ref)
        except ValidationError:
            return self._finish(
                user_id, session, session,
                TransitionOutcome.OFFER_INVALID,
                Reply.text(replies.INVALID_OFFER),
            )

        try:
            item = await self.catalog.get_item(session.negotiation.item_id)
        except NotFoundError:
            return self._finish(
                user_id, session, session,
                TransitionOutcome.ITEM_NOT_FOUND,
                Reply.text(replies.ITEM_NOT_FOUND),
            )

        if not is_acceptable_offer(amount, item.price, self.min_offer_ratio):
            minimum = minimum_offer(item.price, self.min_offer_ratio)
            log_business_event(
                "offer_rejected",
                {"item_id": item.id, "amount": amount, "minimum": str(minimum)},
            )
            return self._finish(
                user_id, session, session,
                TransitionOutcome.OFFER_REJECTED,
                replies.offer_too_low(minimum),
            )

        after = session.model_copy(update={"negotiation": None})
        log_business_event(
            "deal_accepted",
            {"item_id": item.id, "amount": amount, "price": str(item.price)},
        )
        return self._finish(
            user_id, session, after,
            TransitionOutcome.DEAL_ACCEPTED,
            replies.deal_accepted(session.display_name, item, amount),
            to_state=ConversationState.DEAL_ACCEPTED,
        )
