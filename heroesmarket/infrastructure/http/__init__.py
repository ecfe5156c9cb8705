"""HTTP adapters for HeroesMarket.

This package provides the authenticated marketplace gateway, its error
taxonomy and the tolerant decoding helpers shared by the wire models.
"""

from .client import MarketplaceGateway, extract_error_message, raise_for_status
from .errors import (
    ClientRejectedError,
    DecodingFailedError,
    GatewayError,
    InvalidRequestError,
    NetworkFailureError,
    NotFoundError,
    ServerFailureError,
    UnauthorizedError,
    UnexpectedStatusError,
)

__all__ = [
    "ClientRejectedError",
    "DecodingFailedError",
    "GatewayError",
    "InvalidRequestError",
    "MarketplaceGateway",
    "NetworkFailureError",
    "NotFoundError",
    "ServerFailureError",
    "UnauthorizedError",
    "UnexpectedStatusError",
    "extract_error_message",
    "raise_for_status",
]
