"""Helpers for walking paginated list endpoints."""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, TypeVar

from heroesmarket.services.dto import Page

T = TypeVar("T")

FetchPage = Callable[[int], Awaitable[Page[T]]]


async def iter_pages(
    fetch_page: FetchPage[T],
    start_page: int = 1,
    max_pages: int | None = None,
) -> AsyncIterator[Page[T]]:
    """Yield pages from ``fetch_page`` until the server reports no next page.

    Args:
        fetch_page: Coroutine function taking a 1-based page number.
        start_page: First page to request.
        max_pages: Optional cap on the number of pages fetched.
    """
    page_number = start_page
    fetched = 0
    while True:
        page = await fetch_page(page_number)
        yield page
        fetched += 1
        if not page.has_next:
            return
        if max_pages is not None and fetched >= max_pages:
            return
        page_number += 1


async def collect_all(fetch_page: FetchPage[T], start_page: int = 1) -> list[T]:
    """Concatenate the results of every page."""
    items: list[T] = []
    async for page in iter_pages(fetch_page, start_page):
        items.extend(page.results)
    return items


__all__ = ["FetchPage", "collect_all", "iter_pages"]
