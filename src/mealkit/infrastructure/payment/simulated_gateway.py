"""Demo PaymentGateway: waits a fixed latency and always succeeds.

No money moves.  The latency stands in for the round trip to a real
payment provider so the UI has an in-flight state to render.
"""

from __future__ import annotations

import asyncio

import structlog

from mealkit.domain.model.value_objects import Money
from mealkit.domain.service.payment_gateway import PaymentGateway

logger = structlog.get_logger(__name__)

DEFAULT_LATENCY_SECONDS = 1.2


class SimulatedPaymentGateway(PaymentGateway):

    def __init__(self, latency: float = DEFAULT_LATENCY_SECONDS) -> None:
        if latency < 0:
            raise ValueError(f"Payment latency cannot be negative, got {latency}")
        self.latency = latency

    async def charge(self, amount: Money, reference: str) -> str:
        logger.debug("Simulating payment", reference=reference, amount=str(amount), latency=self.latency)
        await asyncio.sleep(self.latency)
        return f"SIM-{reference}"
