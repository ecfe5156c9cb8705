"""Shared plumbing for the resource clients."""

from __future__ import annotations

from heroesmarket.infrastructure.http import InvalidRequestError, MarketplaceGateway
from heroesmarket.infrastructure.observability import get_logger


class ResourceClient:
    """Base class for stateless wrappers over the gateway.

    Resource clients map one endpoint to one typed call. They hold nothing but
    the gateway and never translate its errors.
    """

    def __init__(self, gateway: MarketplaceGateway) -> None:
        self._gateway = gateway
        self._logger = get_logger(self.__class__.__module__)

    @property
    def gateway(self) -> MarketplaceGateway:
        return self._gateway


def page_query(page: int, **filters: object) -> dict[str, object]:
    """Build a paginated query; ``None`` filters are dropped by the gateway."""
    if page < 1:
        raise InvalidRequestError(f"Page must be >= 1, got {page}")
    return {"page": page, **filters}
