"""Base service class with shared logging setup.

Services sit on top of the resource clients and add sequencing or guard
semantics. They never translate gateway errors into other kinds.
"""

from __future__ import annotations

from heroesmarket.infrastructure.observability import get_logger


class BaseService:
    """Base class for service layer implementations.

    Collaborators are passed in explicitly so tests can substitute fakes:

        negotiator = OfferNegotiator(OffersClient(gateway))
        negotiator = OfferNegotiator(AsyncMock(spec=OffersClient))
    """

    def __init__(self) -> None:
        self._logger = get_logger(self.__class__.__module__)
