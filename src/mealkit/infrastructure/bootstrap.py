"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Settings come from the environment and are read on every call, so a test
or a long-running host can change them without re-importing:

- ``MEALKIT_PAYMENT_LATENCY``: simulated payment delay in seconds (1.2)
- ``MEALKIT_CURRENCY``: currency of carts and menu prices (AUD)
"""

from __future__ import annotations

import os

from mealkit.application.checkout_workflow import CheckoutWorkflow
from mealkit.domain.model.cart import CartLedger
from mealkit.domain.model.value_objects import DEFAULT_CURRENCY
from mealkit.infrastructure.catalog.sample_catalog import InMemoryMealCatalog, sample_meals
from mealkit.infrastructure.payment.simulated_gateway import (
    DEFAULT_LATENCY_SECONDS,
    SimulatedPaymentGateway,
)


def currency() -> str:
    return os.getenv("MEALKIT_CURRENCY", DEFAULT_CURRENCY).upper()


def payment_latency() -> float:
    raw = os.getenv("MEALKIT_PAYMENT_LATENCY")
    if raw is None or not raw.strip():
        return DEFAULT_LATENCY_SECONDS
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"MEALKIT_PAYMENT_LATENCY must be a number, got {raw!r}") from exc


def meal_catalog() -> InMemoryMealCatalog:
    return InMemoryMealCatalog(sample_meals(currency()))


def cart_ledger() -> CartLedger:
    return CartLedger(currency=currency())


def payment_gateway(latency: float | None = None) -> SimulatedPaymentGateway:
    return SimulatedPaymentGateway(payment_latency() if latency is None else latency)


def checkout_workflow(ledger: CartLedger, latency: float | None = None) -> CheckoutWorkflow:
    return CheckoutWorkflow(ledger, payment_gateway(latency))
