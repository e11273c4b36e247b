"""Port for charging the order total.

The checkout workflow awaits ``charge()`` and treats the call as its only
suspension point.  Implementations must be cancellable: a cancelled charge
is treated as never having happened.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mealkit.domain.model.value_objects import Money


class PaymentGateway(ABC):

    @abstractmethod
    async def charge(self, amount: Money, reference: str) -> str:
        """Charge *amount* for order *reference* and return a payment reference."""
