"""Direct bid and proxy (auto) bid endpoints."""

from __future__ import annotations

from decimal import Decimal

from heroesmarket.services.dto import AutoBid, AutoBidRequest, Bid, BidRequest, Page, format_amount

from .base import ResourceClient, page_query


class BidsClient(ResourceClient):
    async def place_bid(self, listing_id: int, amount: Decimal | str) -> Bid:
        body = BidRequest(amount=format_amount(amount))
        return await self._gateway.execute(
            "POST", f"/marketplace/listings/{listing_id}/bid/", body=body, response_model=Bid
        )


class AutoBidsClient(ResourceClient):
    async def set_auto_bid(self, listing_id: int, max_amount: Decimal | str) -> AutoBid:
        body = AutoBidRequest(max_amount=format_amount(max_amount))
        return await self._gateway.execute(
            "POST",
            f"/marketplace/listings/{listing_id}/autobid/",
            body=body,
            response_model=AutoBid,
        )

    async def get_auto_bids(self, page: int = 1) -> Page[AutoBid]:
        return await self._gateway.execute(
            "GET",
            "/marketplace/auctions/autobid/",
            query=page_query(page),
            response_model=Page[AutoBid],
        )

    async def cancel_auto_bid(self, auto_bid_id: int) -> None:
        await self._gateway.execute_void("DELETE", f"/marketplace/auctions/autobid/{auto_bid_id}/")
