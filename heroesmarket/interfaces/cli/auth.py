"""Session commands: login, logout and whoami."""

from __future__ import annotations

import click

from heroesmarket.services import SessionService

from .context import console, get_cli_context, reporting_errors


@click.command()
@click.option("--username", prompt=True, help="Account username or email.")
@click.option("--password", prompt=True, hide_input=True, help="Account password.")
@click.pass_context
def login(ctx: click.Context, username: str, password: str) -> None:
    """Sign in and store the session credentials."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        profile = cli_context.run(
            lambda gateway: SessionService(gateway).login(username, password)
        )
    console.print(f"[green]Logged in as [bold]{profile.username}[/bold][/green]")


@click.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Forget the stored session."""

    cli_context = get_cli_context(ctx)
    SessionService(cli_context.build_gateway()).logout()
    console.print("Logged out.")


@click.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the signed-in account."""

    cli_context = get_cli_context(ctx)
    with reporting_errors(ctx):
        profile = cli_context.run(lambda gateway: SessionService(gateway).get_current_user())
    console.print(f"[bold]{profile.username}[/bold] <{profile.email}>")
    if profile.rating is not None:
        console.print(f"Rating: {profile.rating:.1f} ({profile.rating_count} reviews)")
