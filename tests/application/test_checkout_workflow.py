"""Tests for the CheckoutWorkflow use case: validation gate, payment,
payment failures, cancellation and the single-submission rule."""

import asyncio

import pytest

from mealkit.application.checkout_workflow import CheckoutWorkflow
from mealkit.domain.exceptions import (
    AlreadyInProgress,
    CartIsEmpty,
    CartLocked,
    InvalidEmail,
    MissingAddress,
    MissingName,
    OrderAlreadyPlaced,
)
from mealkit.domain.model.cart import CartLedger
from mealkit.domain.model.checkout import CheckoutPhase
from mealkit.domain.model.order_form import OrderForm
from mealkit.domain.model.value_objects import Money
from tests.fakes import (
    FlakyPaymentGateway,
    GatedPaymentGateway,
    InstantPaymentGateway,
    make_meal,
)

VALID_FORM = OrderForm(full_name="Alice", email="a@b.com", address="1 Main St")


def _setup(gateway=None):
    ledger = CartLedger()
    ledger.add(make_meal(price="12.99"), 2)
    gateway = gateway or InstantPaymentGateway()
    workflow = CheckoutWorkflow(ledger, gateway)
    phases = []
    workflow.subscribe(lambda state: phases.append(state.phase))
    return ledger, gateway, workflow, phases


class TestCheckoutHappyPath:

    @pytest.mark.asyncio
    async def test_places_order_and_clears_cart(self):
        ledger, gateway, workflow, phases = _setup()
        assert workflow.phase == CheckoutPhase.IDLE

        confirmation = await workflow.submit(VALID_FORM)

        assert phases == [
            CheckoutPhase.VALIDATING,
            CheckoutPhase.SUBMITTING,
            CheckoutPhase.CONFIRMED,
        ]
        assert workflow.phase == CheckoutPhase.CONFIRMED
        assert workflow.confirmation is confirmation
        assert ledger.is_empty
        assert confirmation.customer_name == "Alice"
        assert "Alice" in confirmation.message
        assert confirmation.item_count == 2
        assert confirmation.total == Money.of("25.98")

    @pytest.mark.asyncio
    async def test_charges_the_subtotal_once(self):
        _, gateway, workflow, _ = _setup()

        confirmation = await workflow.submit(VALID_FORM)

        assert gateway.charges == [(Money.of("25.98"), confirmation.reference)]
        assert confirmation.payment_reference == f"PAY-{confirmation.reference}"

    @pytest.mark.asyncio
    async def test_confirmation_uses_trimmed_form(self):
        _, _, workflow, _ = _setup()
        form = OrderForm(full_name="  Alice  ", email=" a@b.com ", address=" 1 Main St ")

        confirmation = await workflow.submit(form)

        assert confirmation.customer_name == "Alice"
        assert confirmation.email == "a@b.com"
        assert confirmation.address == "1 Main St"

    @pytest.mark.asyncio
    async def test_confirmed_workflow_cannot_be_reused(self):
        ledger, _, workflow, _ = _setup()
        await workflow.submit(VALID_FORM)
        ledger.add(make_meal())

        with pytest.raises(OrderAlreadyPlaced):
            await workflow.submit(VALID_FORM)

        assert workflow.phase == CheckoutPhase.CONFIRMED
        assert ledger.item_count == 1


class TestCheckoutValidation:

    @pytest.mark.asyncio
    async def test_empty_cart_reported_before_form_errors(self):
        gateway = InstantPaymentGateway()
        workflow = CheckoutWorkflow(CartLedger(), gateway)

        with pytest.raises(CartIsEmpty):
            await workflow.submit(OrderForm(full_name="", email="bad", address=""))

        assert gateway.charges == []

    @pytest.mark.asyncio
    async def test_name_reported_before_email(self):
        _, _, workflow, _ = _setup()
        with pytest.raises(MissingName):
            await workflow.submit(OrderForm(full_name="  ", email="bad", address="1 Main St"))

    @pytest.mark.asyncio
    async def test_missing_address(self):
        _, _, workflow, _ = _setup()
        with pytest.raises(MissingAddress):
            await workflow.submit(OrderForm(full_name="Alice", email="a@b.com", address=" "))

    @pytest.mark.asyncio
    async def test_invalid_email_leaves_cart_and_returns_to_idle(self):
        ledger, gateway, workflow, phases = _setup()
        before = ledger.lines

        with pytest.raises(InvalidEmail) as exc_info:
            await workflow.submit(
                OrderForm(full_name="Alice", email="not-an-email", address="1 Main St")
            )

        assert phases == [CheckoutPhase.VALIDATING, CheckoutPhase.FAILED, CheckoutPhase.IDLE]
        assert workflow.phase == CheckoutPhase.IDLE
        assert workflow.last_error is exc_info.value
        assert ledger.lines == before
        assert gateway.charges == []

    @pytest.mark.asyncio
    async def test_failed_state_carries_reason(self):
        ledger = CartLedger()
        workflow = CheckoutWorkflow(ledger, InstantPaymentGateway())
        states = []
        workflow.subscribe(states.append)

        with pytest.raises(CartIsEmpty):
            await workflow.submit(VALID_FORM)

        failed = states[1]
        assert failed.phase == CheckoutPhase.FAILED
        assert isinstance(failed.reason, CartIsEmpty)
        assert states[-1].reason is None

    @pytest.mark.asyncio
    async def test_retry_after_correction_succeeds(self):
        ledger, _, workflow, _ = _setup()

        with pytest.raises(InvalidEmail):
            await workflow.submit(OrderForm(full_name="Alice", email="alice", address="1 Main St"))
        confirmation = await workflow.submit(VALID_FORM)

        assert confirmation.customer_name == "Alice"
        assert workflow.last_error is None
        assert ledger.is_empty


class TestCheckoutConcurrency:

    @pytest.mark.asyncio
    async def test_second_submit_while_paying_rejected(self):
        ledger, gateway, workflow, _ = _setup(GatedPaymentGateway())

        first = asyncio.create_task(workflow.submit(VALID_FORM))
        await gateway.started.wait()
        assert workflow.phase == CheckoutPhase.SUBMITTING

        with pytest.raises(AlreadyInProgress):
            await workflow.submit(VALID_FORM)

        gateway.release.set()
        confirmation = await first

        assert len(gateway.charges) == 1
        assert confirmation.customer_name == "Alice"
        assert workflow.phase == CheckoutPhase.CONFIRMED

    @pytest.mark.asyncio
    async def test_ledger_readable_while_paying(self):
        ledger, gateway, workflow, _ = _setup(GatedPaymentGateway())

        task = workflow.start(VALID_FORM)
        await gateway.started.wait()

        assert ledger.item_count == 2
        assert ledger.subtotal == Money.of("25.98")

        gateway.release.set()
        await task
        assert ledger.is_empty

    @pytest.mark.asyncio
    async def test_cancel_during_payment_restores_idle(self):
        ledger, gateway, workflow, phases = _setup(GatedPaymentGateway())
        before = ledger.lines

        task = workflow.start(VALID_FORM)
        await gateway.started.wait()

        assert workflow.cancel() is True
        with pytest.raises(asyncio.CancelledError):
            await task

        assert workflow.phase == CheckoutPhase.IDLE
        assert phases[-1] == CheckoutPhase.IDLE
        assert ledger.lines == before
        assert workflow.confirmation is None

    @pytest.mark.asyncio
    async def test_submit_again_after_cancel(self):
        ledger, gateway, workflow, _ = _setup(GatedPaymentGateway())

        task = workflow.start(VALID_FORM)
        await gateway.started.wait()
        workflow.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        gateway.release.set()
        confirmation = await workflow.submit(VALID_FORM)

        assert confirmation.item_count == 2
        assert ledger.is_empty

    @pytest.mark.asyncio
    async def test_start_twice_rejected(self):
        _, gateway, workflow, _ = _setup(GatedPaymentGateway())

        task = workflow.start(VALID_FORM)
        with pytest.raises(AlreadyInProgress):
            workflow.start(VALID_FORM)

        gateway.release.set()
        await task
        assert len(gateway.charges) == 1

    @pytest.mark.asyncio
    async def test_cancel_without_task_is_false(self):
        _, _, workflow, _ = _setup()
        assert workflow.cancel() is False

    @pytest.mark.asyncio
    async def test_cancel_before_task_runs_leaves_idle(self):
        ledger, gateway, workflow, phases = _setup(GatedPaymentGateway())

        task = workflow.start(VALID_FORM)
        workflow.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert phases == []
        assert workflow.phase == CheckoutPhase.IDLE
        assert gateway.charges == []
        assert ledger.item_count == 2

    @pytest.mark.asyncio
    async def test_unsubscribed_listener_not_called(self):
        ledger = CartLedger()
        ledger.add(make_meal())
        workflow = CheckoutWorkflow(ledger, InstantPaymentGateway())
        seen = []
        unsubscribe = workflow.subscribe(seen.append)
        unsubscribe()

        await workflow.submit(VALID_FORM)

        assert seen == []

    @pytest.mark.asyncio
    async def test_cart_locked_while_paying(self):
        ledger, gateway, workflow, _ = _setup(GatedPaymentGateway())
        line_id = ledger.lines[0].line_id

        task = workflow.start(VALID_FORM)
        await gateway.started.wait()

        assert ledger.is_held
        with pytest.raises(CartLocked):
            ledger.add(make_meal("salmon", "Teriyaki Salmon", "14.50"))
        with pytest.raises(CartLocked):
            ledger.set_quantity(line_id, 5)
        with pytest.raises(CartLocked):
            ledger.remove(line_id)

        gateway.release.set()
        confirmation = await task

        assert confirmation.item_count == 2
        assert confirmation.total == Money.of("25.98")
        assert ledger.is_empty
        assert not ledger.is_held

    @pytest.mark.asyncio
    async def test_cart_editable_again_after_cancel(self):
        ledger, gateway, workflow, _ = _setup(GatedPaymentGateway())

        task = workflow.start(VALID_FORM)
        await gateway.started.wait()
        workflow.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not ledger.is_held
        ledger.add(make_meal())
        assert ledger.item_count == 3


class TestCheckoutPaymentFailure:

    @pytest.mark.asyncio
    async def test_gateway_error_resets_to_idle_and_propagates(self):
        ledger, gateway, workflow, phases = _setup(FlakyPaymentGateway())
        before = ledger.lines

        with pytest.raises(RuntimeError, match="card processor unavailable"):
            await workflow.submit(VALID_FORM)

        assert phases == [CheckoutPhase.VALIDATING, CheckoutPhase.SUBMITTING, CheckoutPhase.IDLE]
        assert workflow.phase == CheckoutPhase.IDLE
        assert workflow.confirmation is None
        assert ledger.lines == before
        assert not ledger.is_held
        assert gateway.charges == []

    @pytest.mark.asyncio
    async def test_retry_after_gateway_error_succeeds(self):
        ledger, gateway, workflow, _ = _setup(FlakyPaymentGateway(failures=1))

        with pytest.raises(RuntimeError):
            await workflow.submit(VALID_FORM)
        confirmation = await workflow.submit(VALID_FORM)

        assert gateway.attempts == 2
        assert gateway.charges == [(Money.of("25.98"), confirmation.reference)]
        assert workflow.phase == CheckoutPhase.CONFIRMED
        assert ledger.is_empty

    @pytest.mark.asyncio
    async def test_started_task_surfaces_gateway_error(self):
        ledger, _, workflow, _ = _setup(FlakyPaymentGateway())

        task = workflow.start(VALID_FORM)
        with pytest.raises(RuntimeError):
            await task

        assert workflow.phase == CheckoutPhase.IDLE
        ledger.add(make_meal())
        assert ledger.item_count == 3
