"""Error types raised inside the conversation core."""

from typing import Optional


class TractorBotError(Exception):
    """Base class for all bot errors."""


class ValidationError(TractorBotError):
    """User input failed validation (malformed name, non-numeric offer)."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class NotFoundError(TractorBotError):
    """A referenced catalog item does not exist."""

    def __init__(self, item_id: Optional[int]):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class StoreUnavailableError(TractorBotError):
    """The session or catalog store could not be read or written.

    This is the only error that escapes the dispatcher; the webhook turns
    it into a transport-level failure.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        super().__init__(f"Store unavailable during {operation}: {cause}")
        self.operation = operation
        self.cause = cause
