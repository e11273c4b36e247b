"""The sellable item a cart line refers to.

Meals are owned by the catalog.  The cart only ever reads them, so the
dataclass is frozen.
"""

from __future__ import annotations

from dataclasses import dataclass

from mealkit.domain.model.value_objects import Money


@dataclass(frozen=True)
class Meal:
    """A meal on the menu, with its unit price and macro summary."""

    id: str
    name: str
    price: Money
    calories: int = 0
    protein: int = 0  # grams
    carbs: int = 0
    fat: int = 0
    tags: tuple[str, ...] = ()
    image_name: str | None = None

    def has_tag(self, tag: str) -> bool:
        wanted = tag.strip().lower()
        return any(t.lower() == wanted for t in self.tags)
