"""Application service: Add To Cart use case.

Resolves a meal by name through the catalog and hands it to the ledger.
Quantity rules are enforced by the ledger, not here.
"""

from __future__ import annotations

from mealkit.application.dto import CartItemSpec, CartLineDTO
from mealkit.domain.exceptions import EntityNotFoundError
from mealkit.domain.model.cart import CartLedger, CartLine
from mealkit.domain.repository.meal_catalog import MealCatalog


class AddToCartHandler:

    def __init__(self, catalog: MealCatalog, ledger: CartLedger) -> None:
        self._catalog = catalog
        self._ledger = ledger

    def handle(self, meal_name: str, quantity: int = 1) -> CartLineDTO:
        meal = self._catalog.get_by_name(meal_name.strip())
        if meal is None:
            raise EntityNotFoundError(f"Meal not found: '{meal_name}'")

        line = self._ledger.add(meal, quantity)
        return to_line_dto(line)

    def handle_many(self, specs: list[CartItemSpec]) -> list[CartLineDTO]:
        """Add several meals, stopping at the first rejected one."""
        return [self.handle(spec.meal_name, spec.quantity) for spec in specs]


def to_line_dto(line: CartLine) -> CartLineDTO:
    return CartLineDTO(
        line_id=line.line_id,
        meal_name=line.meal.name,
        quantity=line.quantity,
        unit_price=str(line.meal.price),
        line_total=str(line.line_total),
    )
