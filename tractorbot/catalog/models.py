"""Catalog models."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """What a tractor is best used for."""

    FARMING = "farming"
    LANDSCAPING = "landscaping"
    CONSTRUCTION = "construction"

    @classmethod
    def parse(cls, value: str) -> "Category | None":
        """Match a category case-insensitively, or return None."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Item(BaseModel):
    """A tractor for sale. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    price: Decimal = Field(gt=0)
    # Usually new/used/refurbished, but listings may carry free text
    condition: str
    category: str = Field(alias="useCase")
    image: str

    @property
    def category_label(self) -> str:
        return self.category.capitalize()
