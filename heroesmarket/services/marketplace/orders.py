"""Order lifecycle endpoints: listing, shipping, receipt and review."""

from __future__ import annotations

from typing import Literal

from heroesmarket.infrastructure.http import InvalidRequestError
from heroesmarket.services.dto import Order, Page, Review, ReviewRequest, ShipRequest

from .base import ResourceClient, page_query

OrderRole = Literal["bought", "sold"]


class OrdersClient(ResourceClient):
    async def get_orders(self, page: int = 1, order_type: OrderRole = "bought") -> Page[Order]:
        return await self._gateway.execute(
            "GET",
            "/marketplace/orders/",
            query=page_query(page, type=order_type),
            response_model=Page[Order],
        )

    async def get_order(self, order_id: int) -> Order:
        return await self._gateway.execute(
            "GET", f"/marketplace/orders/{order_id}/", response_model=Order
        )

    async def mark_shipped(
        self,
        order_id: int,
        *,
        tracking_number: str | None = None,
        carrier: str | None = None,
    ) -> Order:
        body = ShipRequest(tracking_number=tracking_number, tracking_carrier=carrier)
        return await self._gateway.execute(
            "POST", f"/marketplace/orders/{order_id}/ship/", body=body, response_model=Order
        )

    async def mark_received(self, order_id: int) -> Order:
        return await self._gateway.execute(
            "POST", f"/marketplace/orders/{order_id}/received/", response_model=Order
        )

    async def leave_review(self, order_id: int, rating: int, comment: str | None = None) -> Review:
        if not 1 <= rating <= 5:
            raise InvalidRequestError(f"Rating must be between 1 and 5, got {rating}")
        body = ReviewRequest(rating=rating, comment=comment)
        return await self._gateway.execute(
            "POST", f"/marketplace/orders/{order_id}/review/", body=body, response_model=Review
        )
