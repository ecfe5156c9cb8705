"""Entry point for running the HeroesMarket CLI.

This module defines a top-level Click group that aggregates all subcommands
defined in the ``heroesmarket.interfaces.cli`` package. Executing
``python -m heroesmarket.interfaces.cli`` or the ``heroesmarket`` console
script invokes this group.
"""

import logging

import click

from heroesmarket.infrastructure.observability import configure_logging

from .auth import login, logout, whoami
from .bid import autobid, bid
from .checkout import checkout
from .context import build_cli_context
from .listings import listing
from .offers import offers
from .orders import orders


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a JSON config file.",
)
@click.option("--api-url", default=None, help="Override the marketplace API base URL.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, api_url: str | None, verbose: bool) -> None:
    """HeroesMarket command-line interface."""
    ctx.ensure_object(dict)
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)
    ctx.obj["cli_context"] = build_cli_context(
        config_path,
        api_url=api_url,
        store=ctx.obj.get("store"),
        transport=ctx.obj.get("transport"),
    )


cli.add_command(login)
cli.add_command(logout)
cli.add_command(whoami)
cli.add_command(listing)
cli.add_command(bid)
cli.add_command(autobid)
cli.add_command(offers)
cli.add_command(orders)
cli.add_command(checkout)


if __name__ == "__main__":
    cli()
