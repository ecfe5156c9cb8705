"""Listing rules: listing type, bid suggestions and the "hot" flag."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

# Added to the current bid to pre-fill suggested next bids.
STANDARD_BID_INCREMENTS: tuple[Decimal, ...] = (
    Decimal("1.00"),
    Decimal("5.00"),
    Decimal("10.00"),
    Decimal("25.00"),
)

HOT_RECENCY = timedelta(days=7)
HOT_MIN_BIDS = 5
HOT_MIN_WATCHERS = 10
HOT_MIN_VIEWS = 250

_CENT = Decimal("0.01")


class ListingType(str, Enum):
    """Enumeration of listing sale formats."""

    FIXED = "fixed"
    AUCTION = "auction"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "ListingType":
        """Convert a string to a ListingType, defaulting to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        normalized = value.lower().strip()
        if normalized in ("fixed", "fixed_price", "buy_now"):
            return cls.FIXED
        if normalized == "auction":
            return cls.AUCTION
        return cls.UNKNOWN


def suggest_next_bids(
    current_bid: Decimal | None,
    price: Decimal | None,
    increments: tuple[Decimal, ...] = STANDARD_BID_INCREMENTS,
) -> list[Decimal]:
    """Return suggested bid amounts above the going price.

    The base is the current bid, or the listing price when nobody has bid
    yet. These are hints only; the server decides whether a bid is valid.
    """
    base = current_bid if current_bid is not None else price
    if base is None:
        return []
    return [(base + step).quantize(_CENT) for step in increments]


def is_hot_listing(
    *,
    bid_count: int,
    watch_count: int,
    view_count: int,
    created: datetime | None,
    now: datetime | None = None,
) -> bool:
    """Whether a listing is recent and drawing unusual engagement.

    A listing with an unknown creation date counts as recent.
    """
    if created is not None:
        now = now or datetime.now(timezone.utc)
        if now - created > HOT_RECENCY:
            return False
    return (
        bid_count >= HOT_MIN_BIDS
        or watch_count >= HOT_MIN_WATCHERS
        or view_count >= HOT_MIN_VIEWS
    )


__all__ = [
    "HOT_RECENCY",
    "ListingType",
    "STANDARD_BID_INCREMENTS",
    "is_hot_listing",
    "suggest_next_bids",
]
