"""Domain models package.

Pure negotiation rules for listings, offers and orders. Nothing here performs
I/O; the services consult these tables before calling the gateway.
"""

from .listing import ListingType, is_hot_listing, suggest_next_bids
from .offer import (
    OfferAction,
    OfferStatus,
    OfferTransitionError,
    Perspective,
    available_actions,
    effective_status,
    next_status,
)
from .order import OrderStatus

__all__ = [
    "ListingType",
    "OfferAction",
    "OfferStatus",
    "OfferTransitionError",
    "OrderStatus",
    "Perspective",
    "available_actions",
    "effective_status",
    "is_hot_listing",
    "next_status",
    "suggest_next_bids",
]
