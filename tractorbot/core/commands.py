"""Inbound command classification.

``classify`` maps one inbound message, plus the sender's current session,
to exactly one ``Command``. Rules are tried in order and the first match
wins, so the order of ``RULES`` is the precedence order:

1. An open negotiation collecting a name swallows every message.
2. Exact keywords: start, recommend, help, a category, browse.
3. Prefix commands: view (or a bare number), negotiate, offer.
4. An open negotiation collecting an offer takes any other text as an offer.
5. Everything else is unknown.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from tractorbot.catalog.models import Category
from tractorbot.state.models import NegotiationStage, Session


class CommandKind(str, Enum):
    START = "start"
    RECOMMEND = "recommend"
    HELP = "help"
    CATEGORY = "category"
    BROWSE = "browse"
    VIEW = "view"
    NEGOTIATE = "negotiate"
    OFFER = "offer"
    NAME = "name"
    UNKNOWN = "unknown"


KEYWORDS = {
    "start": CommandKind.START,
    "recommend": CommandKind.RECOMMEND,
    "help": CommandKind.HELP,
    "browse": CommandKind.BROWSE,
}
PREFIXES = ("view", "negotiate", "offer")

# Words that can never be accepted as a buyer's name
RESERVED_WORDS = frozenset({*KEYWORDS, *PREFIXES, *(c.value for c in Category)})

DIGITS = re.compile(r"^\d+$")


@dataclass(frozen=True)
class Command:
    """A classified inbound message."""

    kind: CommandKind
    argument: Optional[str] = None

    @property
    def token(self) -> str:
        """Compact form, e.g. ``view:3``, ``offer:9500`` or ``farming``."""
        if self.kind == CommandKind.CATEGORY:
            return self.argument or ""
        if self.kind in (CommandKind.VIEW, CommandKind.NEGOTIATE, CommandKind.OFFER):
            return f"{self.kind.value}:{self.argument or ''}"
        return self.kind.value


def normalize(text: Optional[str]) -> str:
    """Lower-case and trim inbound text."""
    return (text or "").lower().strip()


def _argument(text: str) -> Optional[str]:
    parts = text.split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else None


def _stage(session: Optional[Session]) -> Optional[NegotiationStage]:
    return session.stage if session else None


Rule = tuple[
    Callable[[str, Optional[Session]], bool],
    Callable[[str, str], Command],
]

RULES: list[Rule] = [
    (
        lambda text, session: _stage(session) == NegotiationStage.COLLECTING_NAME,
        lambda text, raw: Command(CommandKind.NAME, raw.strip()),
    ),
    (
        lambda text, session: text in KEYWORDS,
        lambda text, raw: Command(KEYWORDS[text]),
    ),
    (
        lambda text, session: Category.parse(text) is not None,
        lambda text, raw: Command(CommandKind.CATEGORY, text),
    ),
    (
        lambda text, session: text.startswith("view") or bool(DIGITS.match(text)),
        lambda text, raw: Command(CommandKind.VIEW, _argument(text) or text),
    ),
    (
        lambda text, session: text.startswith("negotiate"),
        lambda text, raw: Command(CommandKind.NEGOTIATE, _argument(text)),
    ),
    (
        lambda text, session: text.startswith("offer"),
        lambda text, raw: Command(CommandKind.OFFER, _argument(text)),
    ),
    (
        lambda text, session: _stage(session) == NegotiationStage.COLLECTING_OFFER,
        lambda text, raw: Command(CommandKind.OFFER, text),
    ),
]


def classify(raw_text: Optional[str], session: Optional[Session] = None) -> Command:
    """Classify an inbound message for the given session."""
    text = normalize(raw_text)
    for matches, build in RULES:
        if matches(text, session):
            return build(text, raw_text or "")
    return Command(CommandKind.UNKNOWN)
