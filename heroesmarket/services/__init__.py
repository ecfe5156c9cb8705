"""Service layer modules for HeroesMarket."""

from .bidding import BidAttempt, BiddingService  # noqa: F401
from .checkout import (  # noqa: F401
    CheckoutOrchestrator,
    CheckoutProgress,
    CheckoutStage,
    PaymentConfirmer,
)
from .offers import OfferNegotiator  # noqa: F401
from .pagination import collect_all, iter_pages  # noqa: F401
from .session import SessionService  # noqa: F401

__all__ = [
    "BidAttempt",
    "BiddingService",
    "CheckoutOrchestrator",
    "CheckoutProgress",
    "CheckoutStage",
    "OfferNegotiator",
    "PaymentConfirmer",
    "SessionService",
    "collect_all",
    "iter_pages",
]
