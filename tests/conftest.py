from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from heroesmarket.app.config import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from heroesmarket.infrastructure.credentials import InMemoryCredentialStore
from heroesmarket.infrastructure.http import MarketplaceGateway
from heroesmarket.infrastructure.observability import get_registry

API_ROOT = "https://api.test/api/v1"


@pytest.fixture(autouse=True)
def _reset_metrics():
    get_registry().reset()
    yield
    get_registry().reset()


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def signed_in_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore(
        {ACCESS_TOKEN_KEY: "access-1", REFRESH_TOKEN_KEY: "refresh-1"}
    )


@pytest.fixture
def make_gateway() -> Callable[..., MarketplaceGateway]:
    def factory(handler, store, **kwargs) -> MarketplaceGateway:
        return MarketplaceGateway(
            store,
            base_url=API_ROOT,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return factory


@pytest.fixture
def listing_payload() -> Callable[..., dict]:
    def factory(**overrides: Any) -> dict:
        payload = {
            "id": 42,
            "title": "1952 Topps Mickey Mantle",
            "description": "PSA 5",
            "price": "100.00",
            "current_bid": None,
            "listing_type": "auction",
            "status": "active",
            "seller": {"username": "cardshop", "rating": 4.9},
            "bid_count": 0,
            "watch_count": 3,
            "view_count": 40,
            "created": "2026-10-01T12:00:00Z",
            "images": [],
        }
        payload.update(overrides)
        return payload

    return factory


@pytest.fixture
def offer_payload() -> Callable[..., dict]:
    def factory(**overrides: Any) -> dict:
        payload = {
            "id": 3,
            "listing": {"id": 9, "title": "Action Comics #1 reprint", "price": "100.00"},
            "amount": "70.00",
            "message": "Would you take 70?",
            "status": "pending",
            "is_from_buyer": False,
            "counter_amount": None,
            "expires_at": None,
            "created": "2026-10-18T09:30:00Z",
        }
        payload.update(overrides)
        return payload

    return factory


@pytest.fixture
def order_payload() -> Callable[..., dict]:
    def factory(**overrides: Any) -> dict:
        payload = {
            "id": 501,
            "order_number": "HM-501",
            "listing": {"id": 9, "title": "Action Comics #1 reprint", "price": "80.00"},
            "buyer": {"username": "collector"},
            "seller": {"username": "cardshop"},
            "total": "87.50",
            "status": "paid",
            "status_display": "Paid",
            "created": "2026-10-18T10:00:00Z",
        }
        payload.update(overrides)
        return payload

    return factory


@pytest.fixture
def profile_payload() -> Callable[..., dict]:
    def factory(**overrides: Any) -> dict:
        payload = {
            "id": 7,
            "username": "collector",
            "email": "collector@example.com",
            "rating": 4.8,
            "rating_count": 12,
            "created": "2025-01-02",
        }
        payload.update(overrides)
        return payload

    return factory
