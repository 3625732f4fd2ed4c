"""Outbound reply model and message copy.

A ``Reply`` is an ordered list of segments. Text segments get the
decorative marker added by the renderer, not here.
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field

from tractorbot.catalog.models import Item
from tractorbot.core.validators import format_minimum, format_price


class SegmentKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class ReplySegment(BaseModel):
    kind: SegmentKind = SegmentKind.TEXT
    content: str


class Reply(BaseModel):
    """Ordered reply segments for one inbound message."""

    segments: list[ReplySegment] = Field(default_factory=list)

    @classmethod
    def text(cls, *messages: str) -> "Reply":
        return cls(segments=[ReplySegment(content=m) for m in messages])

    def add_text(self, message: str) -> "Reply":
        self.segments.append(ReplySegment(content=message))
        return self

    def add_image(self, uri: str) -> "Reply":
        self.segments.append(ReplySegment(kind=SegmentKind.IMAGE, content=uri))
        return self

    @property
    def texts(self) -> list[str]:
        return [s.content for s in self.segments if s.kind == SegmentKind.TEXT]

    @property
    def images(self) -> list[str]:
        return [s.content for s in self.segments if s.kind == SegmentKind.IMAGE]

    @property
    def body(self) -> str:
        """All text segments joined, handy for logging and tests."""
        return "\n".join(self.texts)


WELCOME = (
    "👋 Welcome to Hallo Tractor! \n\n"
    "• Type 'Recommend' for personalized tractor suggestions\n"
    "• Type 'Browse' to see all tractors\n\n"
    "What would you like to do?"
)

RECOMMEND = (
    "Great! Let's find the perfect tractor for you. What's your primary use?\n\n"
    "• Type 'Farming'\n"
    "• Type 'Landscaping'\n"
    "• Type 'Construction'"
)

HELP = (
    "👋 Welcome to Hallo Tractor! \n\n"
    "• Type 'Start' to begin\n"
    "• Type 'Browse' to see all tractors\n"
    "• Type 'View [ID]' for details or 'Negotiate [ID]' to make an offer"
)

ITEM_NOT_FOUND = "❌ Tractor not found. Type 'Browse' to see available tractors."
NEGOTIATE_CTA = "Interested? Type 'Negotiate {id}' to start a conversation with the seller."
INVALID_NAME = (
    "❌ Invalid name. Please enter your full name using letters, spaces, hyphens, or apostrophes."
)
INVALID_OFFER = "❌ Please enter a valid number for your offer. Example: 'Offer 5000'"
NO_ACTIVE_NEGOTIATION = "❌ No active negotiation. Start by typing 'Negotiate [ID]'."


def listing_line(item: Item) -> str:
    return f"🔹 {item.id}. {item.name} - ${format_price(item.price)}"


def _listing(header: str, items: Iterable[Item], footer: str) -> Reply:
    lines = [header, *(listing_line(item) for item in items)]
    return Reply.text("\n".join(lines), footer)


def category_listing(category: str, items: Iterable[Item]) -> Reply:
    return _listing(
        f"🚜 Top {category.capitalize()} Tractors:",
        items,
        'Reply "View [ID]" to see details or "Browse" for more options.',
    )


def browse_listing(items: Iterable[Item]) -> Reply:
    return _listing(
        "Here are some tractors for sale: 🚜",
        items,
        'Reply "View [ID]" for details. Tip: More options coming soon!',
    )


def item_detail(item: Item) -> Reply:
    detail = (
        "🚜 Tractor Details:\n"
        f"📋 Name: {item.name}\n"
        f"💰 Price: ${format_price(item.price)}\n"
        f"🔍 Condition: {item.condition}\n"
        f"🌱 Best For: {item.category_label}"
    )
    return (
        Reply.text(detail)
        .add_image(item.image)
        .add_text(NEGOTIATE_CTA.format(id=item.id))
    )


def ask_for_name(item: Item) -> Reply:
    return Reply.text(
        f"🤝 Negotiating {item.name}. Please send your full name (first and last name)."
    )


def ask_for_offer(name: str) -> Reply:
    return Reply.text(
        f"Hello, {name}! 👋 What's your initial offer for the tractor? Type 'Offer [Amount]'."
    )


def offer_too_low(minimum: Decimal) -> Reply:
    return Reply.text(
        f"💔 Offer too low! The seller suggests a minimum of ${format_minimum(minimum)}."
    )


def deal_accepted(name: str | None, item: Item, amount: int) -> Reply:
    who = f", {name}" if name else ""
    return Reply.text(
        f"🎉 Deal accepted{who}! You've negotiated the {item.name} at ${amount}."
    )
