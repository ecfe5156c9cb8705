"""Offer and counter-offer endpoints."""

from __future__ import annotations

from decimal import Decimal

from heroesmarket.services.dto import Offer, OfferRequest, Page, format_amount

from .base import ResourceClient, page_query


class OffersClient(ResourceClient):
    async def make_offer(
        self, listing_id: int, amount: Decimal | str, message: str | None = None
    ) -> Offer:
        body = OfferRequest(amount=format_amount(amount), message=message)
        return await self._gateway.execute(
            "POST", f"/marketplace/listings/{listing_id}/offer/", body=body, response_model=Offer
        )

    async def get_offers(self, page: int = 1) -> Page[Offer]:
        return await self._gateway.execute(
            "GET", "/marketplace/offers/", query=page_query(page), response_model=Page[Offer]
        )

    async def accept_offer(self, offer_id: int) -> None:
        await self._gateway.execute_void("POST", f"/marketplace/offers/{offer_id}/accept/")

    async def decline_offer(self, offer_id: int) -> None:
        await self._gateway.execute_void("POST", f"/marketplace/offers/{offer_id}/decline/")

    async def counter_offer(
        self, offer_id: int, amount: Decimal | str, message: str | None = None
    ) -> Offer:
        body = OfferRequest(amount=format_amount(amount), message=message)
        return await self._gateway.execute(
            "POST", f"/marketplace/offers/{offer_id}/counter/", body=body, response_model=Offer
        )

    async def accept_counter_offer(self, offer_id: int) -> None:
        await self._gateway.execute_void("POST", f"/marketplace/offers/{offer_id}/accept-counter/")

    async def decline_counter_offer(self, offer_id: int) -> None:
        await self._gateway.execute_void("POST", f"/marketplace/offers/{offer_id}/decline-counter/")
