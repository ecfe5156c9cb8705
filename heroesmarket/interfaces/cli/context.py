"""Shared helpers for composing CLI command contexts.

This module centralises the CLI wiring: resolving settings, choosing the
credential store and running one coroutine against a freshly opened gateway.
Tests inject a fake transport and an in-memory store through ``ctx.obj``.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, TypeVar

import click
import httpx
from rich.console import Console

from heroesmarket.app.config import MarketSettings, load_settings
from heroesmarket.domain.models import OfferTransitionError
from heroesmarket.infrastructure.credentials import (
    CredentialStore,
    JsonFileCredentialStore,
)
from heroesmarket.infrastructure.http import (
    GatewayError,
    InvalidRequestError,
    MarketplaceGateway,
    UnauthorizedError,
)

T = TypeVar("T")

console = Console()


@dataclass(frozen=True)
class CLIContext:
    """Container for CLI dependencies and resolved settings."""

    settings: MarketSettings
    store: CredentialStore
    transport: httpx.AsyncBaseTransport | None = None

    def build_gateway(self) -> MarketplaceGateway:
        return MarketplaceGateway.from_settings(
            self.settings, self.store, transport=self.transport
        )

    def run(self, fn: Callable[[MarketplaceGateway], Awaitable[T]]) -> T:
        """Run ``fn`` against a gateway that is closed afterwards."""

        async def _main() -> T:
            async with self.build_gateway() as gateway:
                return await fn(gateway)

        return asyncio.run(_main())


def build_cli_context(
    config_path: str | None = None,
    *,
    api_url: str | None = None,
    store: CredentialStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CLIContext:
    """Build the CLI context with resolved settings and credential store."""

    settings = load_settings(config_path)
    if api_url:
        settings = MarketSettings(
            api_base_url=api_url.rstrip("/"),
            renewal_path=settings.renewal_path,
            request_timeout_seconds=settings.request_timeout_seconds,
            resource_timeout_seconds=settings.resource_timeout_seconds,
            page_size=settings.page_size,
            credentials_path=settings.credentials_path,
        )
    if store is None:
        store = JsonFileCredentialStore(settings.resolved_credentials_path)
    return CLIContext(settings=settings, store=store, transport=transport)


def get_cli_context(ctx: click.Context) -> CLIContext:
    return ctx.find_root().obj["cli_context"]


@contextmanager
def reporting_errors(ctx: click.Context) -> Iterator[None]:
    """Print gateway and negotiation failures and exit with status 1."""

    try:
        yield
    except UnauthorizedError as exc:
        console.print(f"[red]{exc.user_message}[/red]")
        console.print("Run [bold]heroesmarket login[/bold] to sign in again.")
        ctx.exit(1)
    except InvalidRequestError as exc:
        console.print(f"[red]{exc}[/red]")
        ctx.exit(1)
    except GatewayError as exc:
        console.print(f"[red]{exc.user_message}[/red]")
        ctx.exit(1)
    except OfferTransitionError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        ctx.exit(1)
