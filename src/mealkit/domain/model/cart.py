"""CartLedger aggregate — the shopper's cart.

The ledger owns its lines and is the only place quantities change.

Invariants:
- every line quantity is within ``[1, MAX_PER_ITEM]``
- at most one line per meal id
- ``item_count`` and ``subtotal`` are always derived from the lines

Every mutation validates first and writes second, so a rejected call
leaves the ledger exactly as it was.

While a checkout is paying for the cart it holds the ledger: lines can
still be read and the cart can still be cleared, but add, set_quantity
and remove are refused with ``CartLocked`` until the hold is released.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace

import structlog

from mealkit.domain.exceptions import (
    CartLocked,
    InvalidQuantity,
    LineNotFound,
    MaxPerItemExceeded,
    ValidationError,
)
from mealkit.domain.model.meal import Meal
from mealkit.domain.model.value_objects import DEFAULT_CURRENCY, Money

logger = structlog.get_logger(__name__)

MAX_PER_ITEM = 20

CartListener = Callable[["CartLedger"], None]


@dataclass(frozen=True)
class CartLine:
    """One meal and how many of it are in the cart.

    Lines are snapshots: a quantity change produces a new ``CartLine`` with
    the same ``line_id``.
    """

    line_id: str
    meal: Meal
    quantity: int

    @property
    def line_total(self) -> Money:
        return self.meal.price * self.quantity


class CartLedger:
    """Aggregate root for the cart.

    A single instance is created per shopping session and handed to every
    collaborator that needs it; collaborators that render the cart register
    with ``subscribe()`` instead of polling.
    """

    def __init__(
        self,
        currency: str = DEFAULT_CURRENCY,
        max_per_item: int = MAX_PER_ITEM,
    ) -> None:
        self.currency = currency
        self.max_per_item = max_per_item
        self._lines: dict[str, CartLine] = {}  # meal id -> line, insertion ordered
        self._meal_ids: dict[str, str] = {}  # line id -> meal id
        self._listeners: list[CartListener] = []
        self._hold: str | None = None  # reference of the order being paid for
        self._lock = threading.RLock()

    # --- Commands -------------------------------------------------------------

    def add(self, meal: Meal, quantity: int = 1) -> CartLine:
        """Add *quantity* of *meal*, merging into its existing line if any."""
        self._check_positive(quantity)
        if meal.price.currency != self.currency:
            raise ValidationError(
                f"Cannot add {meal.name} priced in {meal.price.currency} "
                f"to a {self.currency} cart"
            )

        with self._lock:
            self._check_not_held()
            existing = self._lines.get(meal.id)
            new_quantity = quantity + (existing.quantity if existing else 0)
            if new_quantity > self.max_per_item:
                raise MaxPerItemExceeded(self.max_per_item)

            if existing is not None:
                line = replace(existing, quantity=new_quantity)
            else:
                line = CartLine(line_id=uuid.uuid4().hex, meal=meal, quantity=new_quantity)
                self._meal_ids[line.line_id] = meal.id
            self._lines[meal.id] = line

        logger.debug(
            "Cart line added",
            line_id=line.line_id,
            meal_id=meal.id,
            added=quantity,
            quantity=line.quantity,
        )
        self._notify()
        return line

    def set_quantity(self, line_id: str, quantity: int) -> CartLine:
        """Replace the quantity of an existing line (not additive)."""
        with self._lock:
            meal_id = self._meal_ids.get(line_id)
            if meal_id is None:
                raise LineNotFound(line_id)
            self._check_not_held()
            self._check_positive(quantity)
            if quantity > self.max_per_item:
                raise MaxPerItemExceeded(self.max_per_item)

            line = replace(self._lines[meal_id], quantity=quantity)
            self._lines[meal_id] = line

        logger.debug("Cart line quantity set", line_id=line_id, quantity=quantity)
        self._notify()
        return line

    def remove(self, line_id: str) -> None:
        """Remove a line.  Removing an unknown line is a no-op."""
        with self._lock:
            meal_id = self._meal_ids.get(line_id)
            if meal_id is None:
                return
            self._check_not_held()
            del self._meal_ids[line_id]
            del self._lines[meal_id]

        logger.debug("Cart line removed", line_id=line_id, meal_id=meal_id)
        self._notify()

    def clear(self) -> None:
        """Empty the cart."""
        with self._lock:
            if not self._lines:
                return
            count = len(self._lines)
            self._lines.clear()
            self._meal_ids.clear()

        logger.debug("Cart cleared", lines_removed=count)
        self._notify()

    def hold(self, reference: str) -> None:
        """Freeze the lines while *reference* is being paid for."""
        with self._lock:
            self._hold = reference
        logger.debug("Cart held", reference=reference)

    def release(self, *, clear: bool = False) -> None:
        """Lift the hold, emptying the cart first when the order went through."""
        with self._lock:
            reference, self._hold = self._hold, None
            if clear:
                self.clear()
        logger.debug("Cart released", reference=reference, cleared=clear)

    # --- Queries --------------------------------------------------------------

    @property
    def lines(self) -> tuple[CartLine, ...]:
        with self._lock:
            return tuple(self._lines.values())

    @property
    def item_count(self) -> int:
        with self._lock:
            return sum(line.quantity for line in self._lines.values())

    @property
    def subtotal(self) -> Money:
        with self._lock:
            result = Money.zero(self.currency)
            for line in self._lines.values():
                result = result + line.line_total
            return result

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._lines

    @property
    def is_held(self) -> bool:
        with self._lock:
            return self._hold is not None

    def line_for(self, meal_id: str) -> CartLine | None:
        with self._lock:
            return self._lines.get(meal_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    # --- Change notification --------------------------------------------------

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call *listener* after every change; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _check_positive(quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidQuantity()

    def _check_not_held(self) -> None:
        if self._hold is not None:
            raise CartLocked()

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                # The write has already been applied and stays applied.
                logger.exception("Cart listener failed", listener=repr(listener))
