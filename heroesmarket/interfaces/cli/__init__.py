"""CLI interface facades for HeroesMarket.

This package is the canonical home for all Click commands.
"""

from .__main__ import cli
from .auth import login, logout, whoami
from .bid import autobid, bid
from .checkout import checkout
from .listings import listing
from .offers import offers
from .orders import orders

__all__ = [
    "autobid",
    "bid",
    "checkout",
    "cli",
    "listing",
    "login",
    "logout",
    "offers",
    "orders",
    "whoami",
]
