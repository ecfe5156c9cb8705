"""Direct and proxy bidding on top of the bid and listing clients."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from heroesmarket.domain.models import suggest_next_bids
from heroesmarket.infrastructure.http import (
    ClientRejectedError,
    GatewayError,
    MarketplaceGateway,
    NotFoundError,
)
from heroesmarket.infrastructure.observability import log_context, record_bid
from heroesmarket.services.base import BaseService
from heroesmarket.services.dto import AutoBid, Bid, ListingDetail, Page, format_amount
from heroesmarket.services.marketplace import AutoBidsClient, BidsClient, ListingsClient
from heroesmarket.services.pagination import collect_all

# Cancelling an auto-bid that is already gone or inactive.
_ALREADY_INACTIVE_STATUSES = (409,)


@dataclass
class BidAttempt:
    """Outcome of one bid attempt plus the listing as it looks afterwards."""

    listing_id: int
    amount: str
    bid: Bid | None = None
    listing: ListingDetail | None = None
    error: GatewayError | None = None
    refresh_error: GatewayError | None = None

    @property
    def ok(self) -> bool:
        return self.bid is not None and self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class BiddingService(BaseService):
    """Places bids and manages standing auto-bids.

    The server decides whether a bid is valid; this service only suggests
    amounts and always re-reads the listing after an attempt because other
    bidders may have moved the price in the meantime.
    """

    def __init__(
        self,
        bids: BidsClient,
        auto_bids: AutoBidsClient,
        listings: ListingsClient,
    ) -> None:
        super().__init__()
        self.bids = bids
        self.auto_bids = auto_bids
        self.listings = listings

    @classmethod
    def from_gateway(cls, gateway: MarketplaceGateway) -> "BiddingService":
        return cls(BidsClient(gateway), AutoBidsClient(gateway), ListingsClient(gateway))

    @staticmethod
    def suggested_bids(listing: ListingDetail) -> list[Decimal]:
        return suggest_next_bids(listing.current_bid_decimal, listing.price_decimal)

    async def place_bid(self, listing_id: int, amount: Decimal | str) -> BidAttempt:
        """Submit a bid and re-fetch the listing, whatever the outcome.

        Invalid amounts raise :class:`InvalidRequestError` before any call.
        Gateway failures are returned on the attempt unchanged.
        """
        normalized = format_amount(amount)
        attempt = BidAttempt(listing_id=listing_id, amount=normalized)

        with log_context(listing_id=listing_id):
            self._logger.info("Placing bid of %s", normalized)
            try:
                attempt.bid = await self.bids.place_bid(listing_id, normalized)
            except ClientRejectedError as exc:
                self._logger.info("Bid rejected: %s", exc.user_message)
                attempt.error = exc
                record_bid("rejected")
            except GatewayError as exc:
                self._logger.warning("Bid failed: %s", exc)
                attempt.error = exc
                record_bid("failed")
            else:
                record_bid("accepted")

            try:
                attempt.listing = await self.listings.get_listing(listing_id)
            except GatewayError as exc:
                self._logger.warning("Could not refresh listing after bid: %s", exc)
                attempt.refresh_error = exc

        return attempt

    async def set_auto_bid(self, listing_id: int, max_amount: Decimal | str) -> AutoBid:
        with log_context(listing_id=listing_id):
            auto_bid = await self.auto_bids.set_auto_bid(listing_id, max_amount)
            self._logger.info("Auto-bid %d set up to %s", auto_bid.id, auto_bid.max_amount)
            return auto_bid

    async def list_auto_bids(self, page: int = 1) -> Page[AutoBid]:
        return await self.auto_bids.get_auto_bids(page)

    async def all_auto_bids(self) -> list[AutoBid]:
        return await collect_all(self.auto_bids.get_auto_bids)

    async def cancel_auto_bid(self, auto_bid_id: int) -> bool:
        """Cancel an auto-bid; returns ``False`` if it was already inactive."""
        with log_context(auto_bid_id=auto_bid_id):
            try:
                await self.auto_bids.cancel_auto_bid(auto_bid_id)
            except NotFoundError:
                self._logger.info("Auto-bid already gone")
                return False
            except ClientRejectedError as exc:
                if exc.status_code not in _ALREADY_INACTIVE_STATUSES:
                    raise
                self._logger.info("Auto-bid already inactive")
                return False
            self._logger.info("Auto-bid cancelled")
            return True


__all__ = ["BidAttempt", "BiddingService"]
