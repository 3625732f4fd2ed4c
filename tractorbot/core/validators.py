"""Validation and parsing helpers for user input.

All functions here are pure. Failures raise ``ValidationError`` carrying the
name of the offending field; callers turn that into a retry prompt.
"""

import re
from decimal import ROUND_CEILING, Decimal
from typing import Collection, Optional

from tractorbot.core.errors import ValidationError

# Letters, whitespace, hyphens and apostrophes
NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100

ITEM_ID_PATTERN = re.compile(r"^#?(\d+)$")
# Item ids are stored in a 32-bit INTEGER column
MAX_ITEM_ID = 2**31 - 1
AMOUNT_PATTERN = re.compile(r"^\$?(\d[\d,]*)$")


def is_valid_name(name: str) -> bool:
    """Check the name character set and trimmed length."""
    return (
        bool(NAME_PATTERN.match(name))
        and MIN_NAME_LENGTH <= len(name.strip()) <= MAX_NAME_LENGTH
    )


def validate_name(name: str, reserved: Collection[str] = ()) -> str:
    """Validate a buyer's name and return it trimmed.

    Args:
        name: Raw message text
        reserved: Lower-cased words that are commands, never names

    Raises:
        ValidationError: if the name has a bad character, has the wrong
            length, or is exactly a reserved command word
    """
    if not is_valid_name(name):
        raise ValidationError(
            "name",
            f"Names are {MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} letters, spaces, hyphens or apostrophes.",
        )

    trimmed = name.strip()
    if " ".join(trimmed.lower().split()) in reserved:
        raise ValidationError("name", f"'{trimmed}' is a command, not a name.")

    return trimmed


def parse_item_id(token: Optional[str]) -> Optional[int]:
    """Parse an item id such as ``3`` or ``#3``.

    Returns None if malformed or too large to be a stored id.
    """
    if not token:
        return None
    match = ITEM_ID_PATTERN.match(token.strip())
    if not match:
        return None
    item_id = int(match.group(1))
    return item_id if item_id <= MAX_ITEM_ID else None


def parse_offer_amount(token: Optional[str]) -> int:
    """Parse a whole-number offer such as ``9500``, ``$9500`` or ``9,500``.

    Raises:
        ValidationError: if the token is missing or not a whole number
    """
    match = AMOUNT_PATTERN.match(token.strip()) if token else None
    if not match:
        raise ValidationError("amount", "Offers must be a whole number, e.g. 'Offer 5000'.")
    return int(match.group(1).replace(",", ""))


def minimum_offer(price: Decimal, ratio: Decimal) -> Decimal:
    """Lowest acceptable offer for an item: ``ratio * price``."""
    return Decimal(str(price)) * Decimal(str(ratio))


def lowest_accepted_amount(price: Decimal, ratio: Decimal) -> int:
    """Smallest whole-number offer that will be accepted."""
    return int(minimum_offer(price, ratio).to_integral_value(rounding=ROUND_CEILING))


def is_acceptable_offer(amount: int, price: Decimal, ratio: Decimal) -> bool:
    """Inclusive threshold check against the item's stored price."""
    return Decimal(amount) >= minimum_offer(price, ratio)


def format_price(price: Decimal) -> str:
    """Whole prices without decimals, fractional prices with two."""
    price = Decimal(price)
    if price == price.to_integral_value():
        return f"{int(price)}"
    return f"{price:.2f}"


def format_minimum(amount: Decimal) -> str:
    """Minimum offers always show two decimal places."""
    return f"{Decimal(amount):.2f}"
