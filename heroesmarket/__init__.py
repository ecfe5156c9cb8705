"""
HeroesMarket package initializer.

This package provides the client-side transaction layer for the HeroesAndMore
collectibles marketplace: an authenticated gateway with transparent session
renewal, typed resource clients, and the bidding, offer and checkout flows
built on top of them.

The package exposes a ``__version__`` attribute indicating the installed
version. The version is read from pyproject.toml via importlib.metadata – this
is the single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("heroesmarket")
except PackageNotFoundError:
    # Package is not installed (running from source without pip install -e .)
    __version__ = "0.0.0.dev"

__all__: list[str] = ["__version__"]
