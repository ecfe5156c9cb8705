"""Listing browsing commands."""

from __future__ import annotations

import click
from rich.table import Table

from heroesmarket.services import BiddingService
from heroesmarket.services.marketplace import ListingsClient

from .context import console, get_cli_context, reporting_errors


@click.group()
def listing() -> None:
    """Browse marketplace listings."""
    pass


@listing.command("show")
@click.argument("listing_id", type=int)
@click.pass_context
def show_cmd(ctx: click.Context, listing_id: int) -> None:
    """Show one listing with its current bid and suggested next bids."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        detail = cli_context.run(lambda gateway: ListingsClient(gateway).get_listing(listing_id))

    console.print(f"[bold]{detail.title}[/bold] (#{detail.id})")
    console.print(f"Type: {detail.kind.value}  Price: ${detail.price}")
    if detail.is_hot:
        console.print("[magenta]Hot listing[/magenta]")
    if detail.is_auction:
        current = detail.current_bid or "no bids yet"
        console.print(f"Current bid: {current}  Bids: {detail.bid_count}")
        suggestions = ", ".join(str(a) for a in BiddingService.suggested_bids(detail))
        console.print(f"Suggested bids: {suggestions}")
    console.print(f"Seller: {detail.seller.username}")


@listing.command("list")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--search", default=None, help="Free-text search.")
@click.option("--category", type=int, default=None, help="Category id.")
@click.option(
    "--type",
    "listing_type",
    type=click.Choice(["fixed", "auction"]),
    default=None,
    help="Only show this sale format.",
)
@click.option("--sort", default=None, help="Server ordering, e.g. -created or price.")
@click.pass_context
def list_cmd(
    ctx: click.Context,
    page: int,
    search: str | None,
    category: int | None,
    listing_type: str | None,
    sort: str | None,
) -> None:
    """List active listings."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        result = cli_context.run(
            lambda gateway: ListingsClient(gateway).get_listings(
                page,
                category=category,
                search=search,
                listing_type=listing_type,
                sort=sort,
            )
        )

    if not result.results:
        console.print("[yellow]No listings found.[/yellow]")
        return

    table = Table(title=f"Listings (page {page}, {result.count} total)")
    table.add_column("ID", style="bold")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Price")
    table.add_column("Bid")
    for item in result.results[: cli_context.settings.page_size]:
        table.add_row(
            str(item.id),
            item.title,
            item.kind.value,
            item.price,
            item.current_bid or "",
        )
    console.print(table)
    if result.has_next:
        console.print(f"More results: --page {page + 1}")
