"""Per-message orchestration.

For each inbound message the dispatcher takes the sender's lock, loads the
session, classifies the text, runs the matching handler and persists the
session if the handler changed it. Only ``StoreUnavailableError`` escapes.
"""

from decimal import Decimal
from typing import Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel

from tractorbot.catalog.store import CatalogStore
from tractorbot.core.commands import Command, CommandKind, classify
from tractorbot.core.handlers import CatalogHandlers
from tractorbot.core.negotiation import NegotiationStateMachine, Transition
from tractorbot.core.replies import Reply
from tractorbot.logging import log_inbound_message
from tractorbot.state.models import Session
from tractorbot.state.store import SessionStore

logger = structlog.get_logger()


class InboundMessage(BaseModel):
    """One message as handed over by the channel adapter."""

    user_id: str
    text: str = ""


StatefulHandler = Callable[[str, Optional[Session], Command], Awaitable[Transition]]


class Dispatcher:
    """Routes classified messages to catalog handlers or the state machine."""

    def __init__(
        self,
        catalog: CatalogStore,
        sessions: SessionStore,
        min_offer_ratio: Decimal | float | str = Decimal("0.9"),
    ):
        self.catalog = catalog
        self.sessions = sessions
        self.handlers = CatalogHandlers(catalog)
        self.machine = NegotiationStateMachine(catalog, min_offer_ratio)

        self._stateless: dict[CommandKind, Callable[[Optional[str]], Awaitable[Reply]]] = {
            CommandKind.START: self.handlers.start,
            CommandKind.RECOMMEND: self.handlers.recommend,
            CommandKind.HELP: self.handlers.help,
            CommandKind.CATEGORY: self.handlers.category,
            CommandKind.BROWSE: self.handlers.browse,
            CommandKind.VIEW: self.handlers.view,
            CommandKind.UNKNOWN: self.handlers.help,
        }
        self._stateful: dict[CommandKind, StatefulHandler] = {
            CommandKind.NEGOTIATE: self._negotiate,
            CommandKind.NAME: self._name,
            CommandKind.OFFER: self._offer,
        }

    async def _negotiate(self, user_id, session, command) -> Transition:
        return await self.machine.negotiate(user_id, session, command.argument)

    async def _name(self, user_id, session, command) -> Transition:
        return await self.machine.submit_name(session, command.argument or "")

    async def _offer(self, user_id, session, command) -> Transition:
        return await self.machine.submit_offer(user_id, session, command.argument)

    async def handle(self, message: InboundMessage) -> Reply:
        """Process one inbound message and return the reply to send."""
        user_id = message.user_id

        async with self.sessions.lock(user_id):
            session = await self.sessions.get(user_id)
            command = classify(message.text, session)
            log_inbound_message(user_id, message.text.lower().strip(), command.token)

            stateless = self._stateless.get(command.kind)
            if stateless is not None:
                return await stateless(command.argument)

            transition = await self._stateful[command.kind](user_id, session, command)
            if transition.changed:
                await self.sessions.upsert(transition.session)
            return transition.reply
