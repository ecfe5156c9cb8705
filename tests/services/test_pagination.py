from __future__ import annotations

import asyncio

import httpx

from heroesmarket.services import collect_all, iter_pages
from heroesmarket.services.dto import Page
from heroesmarket.services.marketplace import ListingsClient


def _pages(total: int, per_page: int):
    pages = []
    for start in range(0, total, per_page):
        ids = list(range(start + 1, min(start + per_page, total) + 1))
        pages.append(
            Page[int](count=total, next="more" if ids[-1] < total else None, results=ids)
        )
    return pages


def test_collect_all_returns_exactly_count_items():
    pages = _pages(7, 3)
    requested = []

    async def fetch(page: int) -> Page[int]:
        requested.append(page)
        return pages[page - 1]

    items = asyncio.run(collect_all(fetch))

    assert items == list(range(1, 8))
    assert requested == [1, 2, 3]


def test_iter_pages_honours_max_pages():
    pages = _pages(10, 2)

    async def fetch(page: int) -> Page[int]:
        return pages[page - 1]

    async def _test():
        return [page async for page in iter_pages(fetch, start_page=2, max_pages=2)]

    fetched = asyncio.run(_test())
    assert [page.results for page in fetched] == [[3, 4], [5, 6]]


def test_following_listing_pages_over_http(make_gateway, signed_in_store, listing_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        next_url = f"{request.url.copy_with(query=None)}?page={page + 1}" if page < 2 else None
        return httpx.Response(
            200,
            json={
                "count": 3,
                "next": next_url,
                "results": [listing_payload(id=i) for i in ((1, 2) if page == 1 else (3,))],
            },
        )

    async def _test():
        async with make_gateway(handler, signed_in_store) as gateway:
            client = ListingsClient(gateway)
            return await collect_all(lambda page: client.get_listings(page, search="mantle"))

    listings = asyncio.run(_test())
    assert [listing.id for listing in listings] == [1, 2, 3]
