"""Checkout state values observed by the presentation layer.

The workflow that drives these transitions lives in the application layer
(``mealkit.application.checkout_workflow``); this module only defines what
a snapshot of its state looks like.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from mealkit.domain.exceptions import DomainException
from mealkit.domain.model.value_objects import Money


class CheckoutPhase(Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


def new_order_reference() -> str:
    return uuid.uuid4().hex[:8].upper()


@dataclass(frozen=True)
class OrderConfirmation:
    """What the customer sees once the order has been placed."""

    reference: str
    customer_name: str
    email: str
    address: str
    item_count: int
    total: Money
    payment_reference: str
    placed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def message(self) -> str:
        return f"Thanks, {self.customer_name}. Your meals are on the way!"


@dataclass(frozen=True)
class CheckoutState:
    """Immutable snapshot of where a checkout attempt is.

    ``reason`` is set only for FAILED, ``confirmation`` only for CONFIRMED.
    """

    phase: CheckoutPhase
    reason: DomainException | None = None
    confirmation: OrderConfirmation | None = None

    @staticmethod
    def idle() -> CheckoutState:
        return CheckoutState(CheckoutPhase.IDLE)

    @staticmethod
    def failed(reason: DomainException) -> CheckoutState:
        return CheckoutState(CheckoutPhase.FAILED, reason=reason)

    @staticmethod
    def confirmed(confirmation: OrderConfirmation) -> CheckoutState:
        return CheckoutState(CheckoutPhase.CONFIRMED, confirmation=confirmation)

    @property
    def is_busy(self) -> bool:
        return self.phase in (CheckoutPhase.VALIDATING, CheckoutPhase.SUBMITTING)
