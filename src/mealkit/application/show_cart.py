"""Application service: Show Cart use case (query)."""

from __future__ import annotations

from mealkit.application.add_to_cart import to_line_dto
from mealkit.application.dto import CartDTO
from mealkit.domain.model.cart import CartLedger
from mealkit.domain.model.value_objects import Money


class ShowCartHandler:

    def __init__(self, ledger: CartLedger) -> None:
        self._ledger = ledger

    def handle(self) -> CartDTO:
        # Totals come from the same snapshot as the lines they summarise.
        lines = self._ledger.lines
        subtotal = Money.zero(self._ledger.currency)
        for line in lines:
            subtotal = subtotal + line.line_total

        return CartDTO(
            lines=[to_line_dto(line) for line in lines],
            item_count=sum(line.quantity for line in lines),
            subtotal=str(subtotal),
            currency=self._ledger.currency,
        )
