"""Resource clients: one stateless, typed wrapper per endpoint family."""

from .accounts import AccountsClient
from .base import ResourceClient
from .bids import AutoBidsClient, BidsClient
from .collections import CollectionTransferClient
from .listings import ListingsClient
from .offers import OffersClient
from .orders import OrdersClient
from .payments import PaymentsClient

__all__ = [
    "AccountsClient",
    "AutoBidsClient",
    "BidsClient",
    "CollectionTransferClient",
    "ListingsClient",
    "OffersClient",
    "OrdersClient",
    "PaymentsClient",
    "ResourceClient",
]
