"""Bidding commands: direct bids and auto-bids."""

from __future__ import annotations

import click
from rich.table import Table

from heroesmarket.services import BiddingService

from .context import console, get_cli_context, reporting_errors


@click.command(name="bid")
@click.argument("listing_id", type=int)
@click.argument("amount")
@click.pass_context
def bid(ctx: click.Context, listing_id: int, amount: str) -> None:
    """Place a bid of AMOUNT on LISTING_ID."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        attempt = cli_context.run(
            lambda gateway: BiddingService.from_gateway(gateway).place_bid(listing_id, amount)
        )
        if attempt.listing is not None:
            current = attempt.listing.current_bid or attempt.listing.price
            console.print(f"Current bid is now {current} ({attempt.listing.bid_count} bids)")
        attempt.raise_for_error()

    console.print(f"[green]Bid of {attempt.amount} placed on listing {listing_id}[/green]")


@click.group()
def autobid() -> None:
    """Manage standing auto-bids."""
    pass


@autobid.command("set")
@click.argument("listing_id", type=int)
@click.argument("max_amount")
@click.pass_context
def set_cmd(ctx: click.Context, listing_id: int, max_amount: str) -> None:
    """Bid automatically on LISTING_ID up to MAX_AMOUNT."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        auto_bid = cli_context.run(
            lambda gateway: BiddingService.from_gateway(gateway).set_auto_bid(
                listing_id, max_amount
            )
        )
    console.print(
        f"[green]Auto-bid {auto_bid.id} active up to {auto_bid.max_amount}[/green]"
    )


@autobid.command("list")
@click.pass_context
def list_cmd(ctx: click.Context) -> None:
    """List your auto-bids."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        auto_bids = cli_context.run(
            lambda gateway: BiddingService.from_gateway(gateway).all_auto_bids()
        )

    if not auto_bids:
        console.print("[yellow]No auto-bids found.[/yellow]")
        return

    table = Table(title="Auto-bids")
    table.add_column("ID", style="bold")
    table.add_column("Listing")
    table.add_column("Max")
    table.add_column("Current")
    table.add_column("Active")
    for item in auto_bids:
        table.add_row(
            str(item.id),
            item.listing.title,
            item.max_amount,
            item.listing.current_bid or "",
            "yes" if item.is_active else "no",
        )
    console.print(table)


@autobid.command("cancel")
@click.argument("auto_bid_id", type=int)
@click.pass_context
def cancel_cmd(ctx: click.Context, auto_bid_id: int) -> None:
    """Cancel auto-bid AUTO_BID_ID."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        cancelled = cli_context.run(
            lambda gateway: BiddingService.from_gateway(gateway).cancel_auto_bid(auto_bid_id)
        )
    if cancelled:
        console.print(f"[green]Cancelled auto-bid {auto_bid_id}[/green]")
    else:
        console.print(f"Auto-bid {auto_bid_id} was already inactive.")
