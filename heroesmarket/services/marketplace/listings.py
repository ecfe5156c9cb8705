"""Listing, watch-list, auction and listing-image endpoints."""

from __future__ import annotations

from heroesmarket.services.dto import (
    AuctionEvent,
    Listing,
    ListingCreateRequest,
    ListingDetail,
    ListingImage,
    ListingUpdateRequest,
    Page,
    format_amount,
)

from .base import ResourceClient, page_query


class ListingsClient(ResourceClient):
    async def get_listings(
        self,
        page: int = 1,
        *,
        category: int | None = None,
        search: str | None = None,
        listing_type: str | None = None,
        condition: str | None = None,
        min_price: str | None = None,
        max_price: str | None = None,
        sort: str | None = None,
    ) -> Page[Listing]:
        query = page_query(
            page,
            category=category,
            search=search or None,
            listing_type=listing_type,
            condition=condition,
            min_price=min_price,
            max_price=max_price,
            ordering=sort,
        )
        return await self._gateway.execute(
            "GET", "/marketplace/listings/", query=query, response_model=Page[Listing]
        )

    async def get_listing(self, listing_id: int) -> ListingDetail:
        return await self._gateway.execute(
            "GET", f"/marketplace/listings/{listing_id}/", response_model=ListingDetail
        )

    async def get_saved_listings(self, page: int = 1) -> Page[Listing]:
        return await self._gateway.execute(
            "GET", "/marketplace/saved/", query=page_query(page), response_model=Page[Listing]
        )

    async def save_listing(self, listing_id: int) -> None:
        await self._gateway.execute_void("POST", f"/marketplace/listings/{listing_id}/save/")

    async def unsave_listing(self, listing_id: int) -> None:
        await self._gateway.execute_void("DELETE", f"/marketplace/listings/{listing_id}/save/")

    async def create_listing(
        self,
        *,
        title: str,
        description: str,
        price: str,
        category_id: int,
        listing_type: str = "fixed",
        condition: str | None = None,
        grading_company: str | None = None,
        grade: str | None = None,
        cert_number: str | None = None,
        starting_bid: str | None = None,
        reserve_price: str | None = None,
        end_date: str | None = None,
    ) -> Listing:
        body = ListingCreateRequest(
            title=title,
            description=description,
            price=format_amount(price),
            category_id=category_id,
            listing_type=listing_type,
            condition=condition,
            grading_company=grading_company,
            grade=grade,
            cert_number=cert_number,
            starting_bid=format_amount(starting_bid) if starting_bid is not None else None,
            reserve_price=format_amount(reserve_price) if reserve_price is not None else None,
            end_date=end_date,
        )
        return await self._gateway.execute(
            "POST", "/marketplace/listings/", body=body, response_model=Listing
        )

    async def update_listing(
        self,
        listing_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        price: str | None = None,
    ) -> Listing:
        body = ListingUpdateRequest(
            title=title,
            description=description,
            price=format_amount(price) if price is not None else None,
        )
        return await self._gateway.execute(
            "PATCH", f"/marketplace/listings/{listing_id}/", body=body, response_model=Listing
        )

    async def delete_listing(self, listing_id: int) -> None:
        await self._gateway.execute_void("DELETE", f"/marketplace/listings/{listing_id}/")

    async def publish_listing(self, listing_id: int) -> Listing:
        return await self._gateway.execute(
            "POST", f"/marketplace/listings/{listing_id}/publish/", response_model=Listing
        )

    async def upload_listing_image(
        self, listing_id: int, image: bytes, *, is_primary: bool = False
    ) -> ListingImage:
        return await self._gateway.upload(
            f"/marketplace/listings/{listing_id}/images/",
            content=image,
            filename="listing_image.jpg",
            field_name="image",
            query={"is_primary": True} if is_primary else None,
            response_model=ListingImage,
        )

    async def delete_listing_image(self, listing_id: int, image_id: int) -> None:
        await self._gateway.execute_void(
            "DELETE", f"/marketplace/listings/{listing_id}/images/{image_id}/"
        )

    # -------------------- auctions --------------------
    async def get_auctions(self, page: int = 1) -> Page[Listing]:
        return await self._gateway.execute(
            "GET", "/marketplace/auctions/", query=page_query(page), response_model=Page[Listing]
        )

    async def get_auction_events(self, page: int = 1) -> Page[AuctionEvent]:
        return await self._gateway.execute(
            "GET",
            "/marketplace/auctions/events/",
            query=page_query(page),
            response_model=Page[AuctionEvent],
        )

    async def get_ending_soon(self, page: int = 1) -> Page[Listing]:
        return await self._gateway.execute(
            "GET",
            "/marketplace/auctions/ending-soon/",
            query=page_query(page),
            response_model=Page[Listing],
        )
