"""Order commands for buyers and sellers."""

from __future__ import annotations

import click
from rich.table import Table

from heroesmarket.services.marketplace import OrdersClient

from .context import console, get_cli_context, reporting_errors


@click.group()
def orders() -> None:
    """Track, ship and review orders."""
    pass


@orders.command("list")
@click.option(
    "--type",
    "order_type",
    type=click.Choice(["bought", "sold"]),
    default="bought",
    show_default=True,
)
@click.option("--page", type=int, default=1, show_default=True)
@click.pass_context
def list_cmd(ctx: click.Context, order_type: str, page: int) -> None:
    """List orders you bought or sold."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        result = cli_context.run(
            lambda gateway: OrdersClient(gateway).get_orders(page, order_type)
        )

    if not result.results:
        console.print("[yellow]No orders found.[/yellow]")
        return

    table = Table(title=f"Orders ({order_type})")
    table.add_column("ID", style="bold")
    table.add_column("Listing")
    table.add_column("Total")
    table.add_column("Status")
    table.add_column("Tracking")
    for order in result.results:
        table.add_row(
            str(order.id),
            order.listing.title,
            order.total,
            order.status_value.value,
            order.tracking_number or "",
        )
    console.print(table)


@orders.command("ship")
@click.argument("order_id", type=int)
@click.option("--tracking", "tracking_number", default=None, help="Tracking number.")
@click.option("--carrier", default=None, help="Shipping carrier.")
@click.pass_context
def ship_cmd(
    ctx: click.Context, order_id: int, tracking_number: str | None, carrier: str | None
) -> None:
    """Mark ORDER_ID as shipped."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        order = cli_context.run(
            lambda gateway: OrdersClient(gateway).mark_shipped(
                order_id, tracking_number=tracking_number, carrier=carrier
            )
        )
    console.print(f"[green]Order {order.id} is {order.status_value.value}[/green]")


@orders.command("received")
@click.argument("order_id", type=int)
@click.pass_context
def received_cmd(ctx: click.Context, order_id: int) -> None:
    """Confirm that ORDER_ID arrived."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        order = cli_context.run(lambda gateway: OrdersClient(gateway).mark_received(order_id))
    console.print(f"[green]Order {order.id} is {order.status_value.value}[/green]")


@orders.command("review")
@click.argument("order_id", type=int)
@click.argument("rating", type=int)
@click.option("--comment", default=None)
@click.pass_context
def review_cmd(ctx: click.Context, order_id: int, rating: int, comment: str | None) -> None:
    """Leave a RATING (1-5) for ORDER_ID."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        review = cli_context.run(
            lambda gateway: OrdersClient(gateway).leave_review(order_id, rating, comment)
        )
    console.print(f"[green]Review {review.id} saved ({review.rating}/5)[/green]")
