"""Application service: Checkout workflow.

Coordinates the CartLedger aggregate, the order form and the payment
gateway to place one order.

State machine::

    IDLE -> VALIDATING -> SUBMITTING -> CONFIRMED
                 |
                 +-> FAILED -> IDLE

A workflow is bound to a single ledger and is used for a single order:
once CONFIRMED it stays there and the caller creates a new workflow for
the next order.  A validation failure returns it to IDLE so the customer
can fix the form and submit again.

The payment call is the only suspension point.  The cart is held for its
whole duration, so the lines that are charged are the lines that get
cleared.  If the call is cancelled or raises, the hold is lifted, the
workflow goes back to IDLE and the cart is left as it was.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable

import structlog

from mealkit.domain.exceptions import (
    AlreadyInProgress,
    CartIsEmpty,
    OrderAlreadyPlaced,
    ValidationError,
)
from mealkit.domain.model.cart import CartLedger
from mealkit.domain.model.checkout import (
    CheckoutPhase,
    CheckoutState,
    OrderConfirmation,
    new_order_reference,
)
from mealkit.domain.model.order_form import OrderForm
from mealkit.domain.model.value_objects import Money
from mealkit.domain.service.payment_gateway import PaymentGateway

logger = structlog.get_logger(__name__)

CheckoutListener = Callable[[CheckoutState], None]


class CheckoutWorkflow:

    def __init__(self, ledger: CartLedger, gateway: PaymentGateway) -> None:
        self._ledger = ledger
        self._gateway = gateway
        self._state = CheckoutState.idle()
        self._last_error: ValidationError | None = None
        self._listeners: list[CheckoutListener] = []
        self._task: asyncio.Task[OrderConfirmation] | None = None
        self._lock = threading.RLock()

    # --- Read side ------------------------------------------------------------

    @property
    def ledger(self) -> CartLedger:
        return self._ledger

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def phase(self) -> CheckoutPhase:
        return self._state.phase

    @property
    def confirmation(self) -> OrderConfirmation | None:
        return self._state.confirmation

    @property
    def last_error(self) -> ValidationError | None:
        """The most recent validation failure, cleared by a valid submit."""
        return self._last_error

    def subscribe(self, listener: CheckoutListener) -> Callable[[], None]:
        """Call *listener* with every new state; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # --- Commands -------------------------------------------------------------

    async def submit(self, form: OrderForm) -> OrderConfirmation:
        """Validate, charge and place the order.

        Raises the first validation error found (cart, name, email,
        address, in that order), ``AlreadyInProgress`` if another submit
        is running, or ``OrderAlreadyPlaced`` once confirmed.  Errors from
        the gateway propagate unchanged after the workflow is reset.
        """
        form, reference, item_count, total = self._begin(form)

        try:
            payment_reference = await self._gateway.charge(total, reference)
        except asyncio.CancelledError:
            self._abandon()
            logger.warning("Checkout cancelled during payment", reference=reference)
            raise
        except Exception:
            self._abandon()
            logger.exception("Payment failed", reference=reference)
            raise

        with self._lock:
            self._ledger.release(clear=True)
            confirmation = OrderConfirmation(
                reference=reference,
                customer_name=form.full_name,
                email=form.email,
                address=form.address,
                item_count=item_count,
                total=total,
                payment_reference=payment_reference,
            )
            self._set_state(CheckoutState.confirmed(confirmation))

        logger.info(
            "Order placed",
            reference=reference,
            item_count=item_count,
            total=str(total),
            payment_reference=payment_reference,
        )
        return confirmation

    def start(self, form: OrderForm) -> asyncio.Task[OrderConfirmation]:
        """Run ``submit`` as a task on the running loop and return the task."""
        with self._lock:
            if self._task is not None and not self._task.done():
                raise AlreadyInProgress()
            self._ensure_can_submit()
            task = asyncio.get_running_loop().create_task(self.submit(form))
            self._task = task
        return task

    def cancel(self) -> bool:
        """Cancel the task started by ``start()``, if it is still running."""
        with self._lock:
            task = self._task
        if task is None or task.done():
            return False
        return task.cancel()

    # --- Internal helpers -----------------------------------------------------

    def _begin(self, form: OrderForm) -> tuple[OrderForm, str, int, Money]:
        with self._lock:
            self._ensure_can_submit()
            self._set_state(CheckoutState(CheckoutPhase.VALIDATING))

            try:
                if self._ledger.is_empty:
                    raise CartIsEmpty()
                form.validate()
            except ValidationError as exc:
                self._last_error = exc
                self._set_state(CheckoutState.failed(exc))
                self._set_state(CheckoutState.idle())
                logger.info("Checkout rejected", error=type(exc).__name__, detail=str(exc))
                raise

            self._last_error = None
            reference = new_order_reference()
            item_count = self._ledger.item_count
            total = self._ledger.subtotal
            self._ledger.hold(reference)
            self._set_state(CheckoutState(CheckoutPhase.SUBMITTING))

        logger.info(
            "Submitting payment",
            reference=reference,
            item_count=item_count,
            total=str(total),
        )
        return form.normalized(), reference, item_count, total

    def _abandon(self) -> None:
        with self._lock:
            self._ledger.release()
            self._set_state(CheckoutState.idle())

    def _ensure_can_submit(self) -> None:
        if self._state.phase == CheckoutPhase.CONFIRMED:
            raise OrderAlreadyPlaced()
        if self._state.is_busy:
            logger.warning("Checkout already in progress", phase=self._state.phase.value)
            raise AlreadyInProgress()

    def _set_state(self, state: CheckoutState) -> None:
        previous = self._state
        self._state = state
        logger.debug(
            "Checkout transition",
            previous=previous.phase.value,
            current=state.phase.value,
        )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Checkout listener failed", listener=repr(listener))
