"""CLI command for placing an order in one go.

There is no persistence, so the cart only lives for the duration of the
command: it is filled from ``--items``, shown, and checked out.
"""

from __future__ import annotations

import asyncio

import click

from mealkit.application.add_to_cart import AddToCartHandler
from mealkit.application.dto import CartDTO, CartItemSpec
from mealkit.application.show_cart import ShowCartHandler
from mealkit.domain.exceptions import DomainException
from mealkit.domain.model.checkout import CheckoutPhase, CheckoutState
from mealkit.domain.model.order_form import OrderForm
from mealkit.infrastructure.bootstrap import cart_ledger, checkout_workflow, meal_catalog
from mealkit.infrastructure.logging import add_context, clear_context


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse 'Tuna Poke Bowl:2,Lean Beef Burrito:1' into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'MealName:Quantity'."
            )
        name, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for meal '{name}'."
            )
        specs.append(CartItemSpec(meal_name=name.strip(), quantity=qty))
    return specs


def _display_cart(dto: CartDTO) -> None:
    click.echo("Order Summary")
    click.echo(f"  {'Meal':<30} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*57}")
    for line in dto.lines:
        click.echo(
            f"  {line.meal_name:<30} {line.quantity:>5} {line.unit_price:>10} {line.line_total:>10}"
        )
    click.echo(f"  {'-'*57}")
    click.echo(f"  {'Items':<30} {dto.item_count:>5}")
    click.echo(f"  {'Subtotal (' + dto.currency + ')':<37} {dto.subtotal:>20}")


def _show_progress(state: CheckoutState) -> None:
    if state.phase == CheckoutPhase.SUBMITTING:
        click.echo("Processing payment...")


@click.command("order")
@click.option("--items", required=True, help="Meals as 'Meal:Qty,Meal:Qty'.")
@click.option("--name", "full_name", default="", help="Full name.")
@click.option("--email", default="", help="Email address.")
@click.option("--address", default="", help="Delivery address.")
@click.option(
    "--latency",
    type=click.FloatRange(min=0),
    default=None,
    help="Simulated payment delay in seconds (default: MEALKIT_PAYMENT_LATENCY or 1.2).",
)
def order_place(
    items: str,
    full_name: str,
    email: str,
    address: str,
    latency: float | None,
) -> None:
    """Fill a cart and check it out (demo payment, nothing is charged)."""
    specs = _parse_items(items)

    ledger = cart_ledger()
    add_to_cart = AddToCartHandler(catalog=meal_catalog(), ledger=ledger)
    try:
        workflow = checkout_workflow(ledger, latency=latency)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    unsubscribe = workflow.subscribe(_show_progress)
    add_context(command="order")

    try:
        add_to_cart.handle_many(specs)
        _display_cart(ShowCartHandler(ledger).handle())
        click.echo()
        confirmation = asyncio.run(
            workflow.submit(OrderForm(full_name=full_name, email=email, address=address))
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        unsubscribe()
        clear_context()

    click.echo(f"Order placed! (ref {confirmation.reference})")
    click.echo(confirmation.message)
    click.echo(f"Charged {confirmation.total} for {confirmation.item_count} item(s).")
