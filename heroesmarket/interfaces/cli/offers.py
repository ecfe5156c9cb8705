"""Offer negotiation commands."""

from __future__ import annotations

import click
from rich.table import Table

from heroesmarket.domain.models import OfferAction
from heroesmarket.infrastructure.http import MarketplaceGateway, NotFoundError
from heroesmarket.services import OfferNegotiator, collect_all
from heroesmarket.services.dto import Offer

from .context import console, get_cli_context, reporting_errors


async def _find_offer(negotiator: OfferNegotiator, offer_id: int) -> Offer:
    for offer in await collect_all(negotiator.list_offers):
        if offer.id == offer_id:
            return offer
    raise NotFoundError(f"Offer {offer_id} not found")


def _act(ctx: click.Context, offer_id: int, action: OfferAction, **kwargs) -> None:
    cli_context = get_cli_context(ctx)

    async def _run(gateway: MarketplaceGateway) -> Offer:
        negotiator = OfferNegotiator.from_gateway(gateway)
        offer = await _find_offer(negotiator, offer_id)
        return await negotiator.perform(offer, action, **kwargs)

    with reporting_errors(ctx):
        updated = cli_context.run(_run)
    console.print(f"[green]Offer {updated.id} is now {updated.status}[/green]")


@click.group()
def offers() -> None:
    """Make and answer offers."""
    pass


@offers.command("list")
@click.option("--page", type=int, default=1, show_default=True)
@click.pass_context
def list_cmd(ctx: click.Context, page: int) -> None:
    """List offers you made or received."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        result = cli_context.run(
            lambda gateway: OfferNegotiator.from_gateway(gateway).list_offers(page)
        )

    if not result.results:
        console.print("[yellow]No offers found.[/yellow]")
        return

    table = Table(title="Offers")
    table.add_column("ID", style="bold")
    table.add_column("Listing")
    table.add_column("Amount")
    table.add_column("Counter")
    table.add_column("Status")
    table.add_column("Actions")
    for offer in result.results:
        table.add_row(
            str(offer.id),
            offer.listing.title,
            offer.amount,
            offer.counter_amount or "",
            offer.effective_status().value,
            ", ".join(action.value for action in offer.available_actions()),
        )
    console.print(table)


@offers.command("make")
@click.argument("listing_id", type=int)
@click.argument("amount")
@click.option("--message", default=None, help="Note for the seller.")
@click.pass_context
def make_cmd(ctx: click.Context, listing_id: int, amount: str, message: str | None) -> None:
    """Offer AMOUNT for LISTING_ID."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        offer = cli_context.run(
            lambda gateway: OfferNegotiator.from_gateway(gateway).make_offer(
                listing_id, amount, message
            )
        )
    console.print(f"[green]Offer {offer.id} of {offer.amount} sent ({offer.status})[/green]")


@offers.command("accept")
@click.argument("offer_id", type=int)
@click.pass_context
def accept_cmd(ctx: click.Context, offer_id: int) -> None:
    """Accept a pending offer on your listing."""
    _act(ctx, offer_id, OfferAction.ACCEPT)


@offers.command("decline")
@click.argument("offer_id", type=int)
@click.pass_context
def decline_cmd(ctx: click.Context, offer_id: int) -> None:
    """Decline a pending offer on your listing."""
    _act(ctx, offer_id, OfferAction.DECLINE)


@offers.command("counter")
@click.argument("offer_id", type=int)
@click.argument("amount")
@click.option("--message", default=None, help="Note for the buyer.")
@click.pass_context
def counter_cmd(ctx: click.Context, offer_id: int, amount: str, message: str | None) -> None:
    """Counter a pending offer with AMOUNT."""
    _act(ctx, offer_id, OfferAction.COUNTER, amount=amount, message=message)


@offers.command("accept-counter")
@click.argument("offer_id", type=int)
@click.pass_context
def accept_counter_cmd(ctx: click.Context, offer_id: int) -> None:
    """Accept the seller's counter-offer."""
    _act(ctx, offer_id, OfferAction.ACCEPT_COUNTER)


@offers.command("decline-counter")
@click.argument("offer_id", type=int)
@click.pass_context
def decline_counter_cmd(ctx: click.Context, offer_id: int) -> None:
    """Decline the seller's counter-offer."""
    _act(ctx, offer_id, OfferAction.DECLINE_COUNTER)
