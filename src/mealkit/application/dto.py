"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CartItemSpec:
    """Input: what the customer asked for (meal name + quantity)."""

    meal_name: str
    quantity: int


@dataclass(frozen=True)
class CartLineDTO:
    """Output: a single cart line as displayed to the user."""

    line_id: str
    meal_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$12.99"
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    """Output: the whole cart as displayed to the user."""

    lines: list[CartLineDTO]
    item_count: int
    subtotal: str
    currency: str

    @property
    def is_empty(self) -> bool:
        return not self.lines
