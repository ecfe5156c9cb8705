"""Checkout commands, one per saga step.

Each step is its own command so that a failed payment intent or confirmation
is retried against the order that already exists instead of checking out again.
"""

from __future__ import annotations

import click

from heroesmarket.services import CheckoutOrchestrator

from .context import console, get_cli_context, reporting_errors


@click.group()
def checkout() -> None:
    """Buy a listing step by step."""
    pass


@checkout.command("start")
@click.argument("listing_id", type=int)
@click.option("--address-id", type=int, default=None, help="Saved shipping address id.")
@click.pass_context
def start_cmd(ctx: click.Context, listing_id: int, address_id: int | None) -> None:
    """Reserve LISTING_ID and create an order."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        order = cli_context.run(
            lambda gateway: CheckoutOrchestrator.from_gateway(gateway).checkout(
                listing_id, address_id
            )
        )
    console.print(f"[green]Order {order.order_id} created[/green]")
    console.print(
        f"Subtotal {order.subtotal} + shipping {order.shipping} + fee {order.fee} = {order.total}"
    )
    console.print(f"Next: heroesmarket checkout intent {order.order_id}")


@checkout.command("intent")
@click.argument("order_id", type=int)
@click.option("--payment-method", default=None, help="Saved payment method id.")
@click.pass_context
def intent_cmd(ctx: click.Context, order_id: int, payment_method: str | None) -> None:
    """Create a payment intent for ORDER_ID."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        intent = cli_context.run(
            lambda gateway: CheckoutOrchestrator.from_gateway(gateway).create_payment_intent(
                order_id, payment_method
            )
        )
    console.print(f"Payment intent: {intent.payment_intent_id}")
    console.print(f"Client secret: {intent.client_secret}")
    console.print(f"Amount: {intent.amount} {intent.currency.upper()}")


@checkout.command("confirm")
@click.argument("payment_intent_id")
@click.pass_context
def confirm_cmd(ctx: click.Context, payment_intent_id: str) -> None:
    """Report a processor-confirmed PAYMENT_INTENT_ID to the marketplace."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        confirmation = cli_context.run(
            lambda gateway: CheckoutOrchestrator.from_gateway(gateway).confirm_payment(
                payment_intent_id
            )
        )
    if confirmation.success:
        console.print(f"[green]Payment confirmed for order {confirmation.order_id}[/green]")
        return
    console.print(f"[red]Payment not confirmed: {confirmation.message or confirmation.status}[/red]")
    ctx.exit(1)
