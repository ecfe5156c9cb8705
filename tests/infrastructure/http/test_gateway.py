"""Tests for the marketplace gateway: auth headers, renewal and error mapping."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from heroesmarket.app.config import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from heroesmarket.infrastructure.credentials import InMemoryCredentialStore
from heroesmarket.infrastructure.http import (
    ClientRejectedError,
    DecodingFailedError,
    InvalidRequestError,
    MarketplaceGateway,
    NetworkFailureError,
    NotFoundError,
    ServerFailureError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from heroesmarket.infrastructure.observability import get_registry
from heroesmarket.services.dto import ListingDetail

RENEWAL_PATH = "/api/v1/auth/token/refresh/"
LISTING_PATH = "/api/v1/marketplace/listings/42/"


class TestRequestBuilding:
    """Headers, URLs and bodies of outgoing requests."""

    def test_no_authorization_header_without_session(self, make_gateway, store):
        """Anonymous requests never carry a bearer header."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"count": 0, "results": []})

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute("GET", "/marketplace/listings/", query={"page": 1})

        asyncio.run(_test())

        assert len(seen) == 1
        assert "authorization" not in seen[0].headers
        assert seen[0].headers["accept"] == "application/json"
        assert seen[0].headers["content-type"] == "application/json"

    def test_bearer_header_with_session(self, make_gateway, signed_in_store):
        """A stored access credential is sent as a bearer token."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                await gateway.execute("GET", "/accounts/me/")

        asyncio.run(_test())

        assert seen[0].headers["authorization"] == "Bearer access-1"

    def test_query_drops_none_and_renders_booleans(self, make_gateway, store):
        """None filters are omitted; booleans use lowercase literals."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute(
                    "GET",
                    "/marketplace/listings/",
                    query={"page": 2, "search": None, "is_primary": True},
                )

        asyncio.run(_test())

        params = seen[0].url.params
        assert params["page"] == "2"
        assert params["is_primary"] == "true"
        assert "search" not in params

    def test_body_omits_none_fields(self, make_gateway, store):
        """Mapping bodies drop None values before encoding."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute_void(
                    "POST", "/marketplace/listings/9/offer/", body={"amount": "80.00", "message": None}
                )

        asyncio.run(_test())

        assert json.loads(seen[0].content) == {"amount": "80.00"}

    def test_invalid_base_url_rejected(self, store):
        """A base URL without scheme or host is an invalid request."""
        with pytest.raises(InvalidRequestError):
            MarketplaceGateway(store, base_url="not a url")

    def test_relative_path_rejected(self, make_gateway, store):
        """Paths must be absolute; nothing is sent otherwise."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute("GET", "marketplace/listings/")

        with pytest.raises(InvalidRequestError):
            asyncio.run(_test())
        assert calls == []

    def test_context_manager_closes_client(self, make_gateway, store):
        """Leaving the context closes the underlying httpx client."""

        async def _test():
            async with make_gateway(lambda r: httpx.Response(200), store) as gateway:
                assert gateway._client is not None
            assert gateway._client is None

        asyncio.run(_test())


class TestSessionRenewal:
    """Renewal on 401, replay and single-flight behavior."""

    def test_renews_once_and_replays_request(self, make_gateway, signed_in_store, listing_payload):
        """A 401 triggers one renewal and one replay with the new credential."""
        calls: list[tuple[str, str | None]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.url.path, request.headers.get("authorization")))
            if request.url.path == RENEWAL_PATH:
                assert json.loads(request.content) == {"refresh": "refresh-1"}
                assert "authorization" not in request.headers
                return httpx.Response(200, json={"access": "access-2"})
            if request.headers.get("authorization") == "Bearer access-1":
                return httpx.Response(401, json={"detail": "Token expired"})
            return httpx.Response(200, json=listing_payload())

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                return await gateway.execute(
                    "GET", "/marketplace/listings/42/", response_model=ListingDetail
                )

        listing = asyncio.run(_test())

        assert listing.id == 42
        assert calls == [
            (LISTING_PATH, "Bearer access-1"),
            (RENEWAL_PATH, None),
            (LISTING_PATH, "Bearer access-2"),
        ]
        assert signed_in_store.get(ACCESS_TOKEN_KEY) == "access-2"
        assert signed_in_store.get(REFRESH_TOKEN_KEY) == "refresh-1"

    def test_rotated_refresh_credential_is_stored(self, make_gateway, signed_in_store):
        """When the server rotates the renewal credential both are replaced."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == RENEWAL_PATH:
                return httpx.Response(200, json={"access": "access-2", "refresh": "refresh-2"})
            if request.headers["authorization"] == "Bearer access-1":
                return httpx.Response(401)
            return httpx.Response(200, json={})

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                await gateway.execute("GET", "/accounts/me/")

        asyncio.run(_test())

        assert signed_in_store.get(ACCESS_TOKEN_KEY) == "access-2"
        assert signed_in_store.get(REFRESH_TOKEN_KEY) == "refresh-2"

    def test_failed_renewal_clears_both_credentials(self, make_gateway, signed_in_store):
        """A refused renewal ends the session: Unauthorized and an empty store."""
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            if request.url.path == RENEWAL_PATH:
                return httpx.Response(401, json={"detail": "Token is invalid or expired"})
            return httpx.Response(401)

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                await gateway.execute("GET", "/marketplace/listings/42/")

        with pytest.raises(UnauthorizedError):
            asyncio.run(_test())

        assert calls == [LISTING_PATH, RENEWAL_PATH]
        assert signed_in_store.get(ACCESS_TOKEN_KEY) is None
        assert signed_in_store.get(REFRESH_TOKEN_KEY) is None
        counter = get_registry().counter("session_renewals_total")
        assert counter.get({"outcome": "rejected"}) == 1

    def test_missing_refresh_credential_clears_session(self, make_gateway):
        """Without a renewal credential no renewal call is made."""
        store = InMemoryCredentialStore({ACCESS_TOKEN_KEY: "access-1"})
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(401)

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute("GET", "/accounts/me/")

        with pytest.raises(UnauthorizedError):
            asyncio.run(_test())

        assert calls == ["/api/v1/accounts/me/"]
        assert store.get(ACCESS_TOKEN_KEY) is None

    def test_malformed_renewal_body_is_rejection(self, make_gateway, signed_in_store):
        """A 2xx renewal without an access credential counts as refused."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == RENEWAL_PATH:
                return httpx.Response(200, json={"unexpected": True})
            return httpx.Response(401)

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                await gateway.execute("GET", "/accounts/me/")

        with pytest.raises(UnauthorizedError):
            asyncio.run(_test())
        assert signed_in_store.get(ACCESS_TOKEN_KEY) is None

    def test_second_401_after_renewal_is_not_renewed_again(self, make_gateway, signed_in_store):
        """Renewal happens at most once per original request."""
        renewals = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == RENEWAL_PATH:
                renewals.append(request)
                return httpx.Response(200, json={"access": "access-2"})
            return httpx.Response(401)

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                await gateway.execute("GET", "/accounts/me/")

        with pytest.raises(UnauthorizedError):
            asyncio.run(_test())
        assert len(renewals) == 1

    def test_renewal_network_failure_keeps_credentials(self, make_gateway, signed_in_store):
        """A connectivity failure during renewal is not a session end."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == RENEWAL_PATH:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(401)

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                await gateway.execute("GET", "/accounts/me/")

        with pytest.raises(NetworkFailureError):
            asyncio.run(_test())
        assert signed_in_store.get(ACCESS_TOKEN_KEY) == "access-1"
        assert signed_in_store.get(REFRESH_TOKEN_KEY) == "refresh-1"

    def test_login_style_requests_skip_renewal(self, make_gateway, signed_in_store):
        """With renewal disabled a 401 maps straight to Unauthorized."""
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(401, json={"detail": "No active account"})

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                await gateway.execute(
                    "POST", "/auth/token/", body={"username": "a", "password": "b"},
                    renew_on_unauthorized=False,
                )

        with pytest.raises(UnauthorizedError):
            asyncio.run(_test())
        assert calls == ["/api/v1/auth/token/"]
        assert signed_in_store.get(ACCESS_TOKEN_KEY) == "access-1"

    def test_concurrent_401s_share_one_renewal(self, make_gateway, signed_in_store):
        """Requests that hit 401 together converge on a single renewal."""
        renewals: list[httpx.Request] = []
        replays: list[str] = []

        async def _test():
            arrived = 0
            both_sent = asyncio.Event()

            async def handler(request: httpx.Request) -> httpx.Response:
                nonlocal arrived
                if request.url.path == RENEWAL_PATH:
                    renewals.append(request)
                    await asyncio.sleep(0)
                    return httpx.Response(200, json={"access": "access-2"})
                if request.headers["authorization"] == "Bearer access-1":
                    arrived += 1
                    if arrived == 2:
                        both_sent.set()
                    await both_sent.wait()
                    return httpx.Response(401)
                replays.append(request.url.path)
                return httpx.Response(200, json={"ok": True})

            async with make_gateway(handler, signed_in_store) as gateway:
                return await asyncio.gather(
                    gateway.execute("GET", "/marketplace/listings/1/"),
                    gateway.execute("GET", "/marketplace/listings/2/"),
                )

        results = asyncio.run(_test())

        assert results == [{"ok": True}, {"ok": True}]
        assert len(renewals) == 1
        assert sorted(replays) == [
            "/api/v1/marketplace/listings/1/",
            "/api/v1/marketplace/listings/2/",
        ]
        counter = get_registry().counter("session_renewals_total")
        assert counter.get({"outcome": "renewed"}) == 1
        assert counter.get({"outcome": "shared"}) == 1


class TestErrorClassification:
    """Status codes, decoding and transport failures."""

    @staticmethod
    def _run(make_gateway, store, response: httpx.Response, response_model=None):
        async def _test():
            async with make_gateway(lambda request: response, store) as gateway:
                return await gateway.execute(
                    "POST", "/marketplace/listings/7/bid/", body={"amount": "150.00"},
                    response_model=response_model,
                )

        return asyncio.run(_test())

    def test_client_error_carries_server_message(self, make_gateway, store):
        """A 400 surfaces the server's detail verbatim."""
        response = httpx.Response(400, json={"detail": "Bid must exceed current bid of 150.00"})
        with pytest.raises(ClientRejectedError) as excinfo:
            self._run(make_gateway, store, response)
        assert excinfo.value.status_code == 400
        assert excinfo.value.user_message == "Bid must exceed current bid of 150.00"

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"error": "Listing closed"}, "Listing closed"),
            ({"message": "Too low"}, "Too low"),
            (["not", "an", "object"], "HTTP error 409"),
        ],
    )
    def test_client_error_message_fallbacks(self, make_gateway, store, payload, expected):
        with pytest.raises(ClientRejectedError) as excinfo:
            self._run(make_gateway, store, httpx.Response(409, json=payload))
        assert excinfo.value.user_message == expected

    def test_not_found(self, make_gateway, store):
        with pytest.raises(NotFoundError) as excinfo:
            self._run(make_gateway, store, httpx.Response(404))
        assert excinfo.value.user_message == "Resource not found"

    def test_server_failure_is_not_retried(self, make_gateway, store):
        """5xx responses are reported once, never replayed."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute("GET", "/marketplace/orders/")

        with pytest.raises(ServerFailureError) as excinfo:
            asyncio.run(_test())
        assert len(calls) == 1
        assert excinfo.value.status_code == 503
        assert excinfo.value.retryable is True

    def test_unclassified_status(self, make_gateway, store):
        with pytest.raises(UnexpectedStatusError) as excinfo:
            self._run(make_gateway, store, httpx.Response(302))
        assert excinfo.value.status_code == 302

    def test_invalid_json_is_decoding_failure(self, make_gateway, store):
        """A 2xx with a non-JSON body is a decoding error, not an HTTP error."""
        with pytest.raises(DecodingFailedError):
            self._run(make_gateway, store, httpx.Response(200, text="<html>oops</html>"))

    def test_shape_mismatch_is_decoding_failure(self, make_gateway, store):
        with pytest.raises(DecodingFailedError):
            self._run(
                make_gateway, store, httpx.Response(200, json={"id": "x"}), ListingDetail
            )

    def test_connect_error_is_network_failure(self, make_gateway, store):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("dns failure", request=request)

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute("GET", "/marketplace/listings/")

        with pytest.raises(NetworkFailureError):
            asyncio.run(_test())
        counter = get_registry().counter("api_requests_total")
        assert counter.get(
            {"endpoint": "/marketplace/listings/", "method": "GET", "status": "network_error"}
        ) == 1

    def test_request_timeout_is_network_failure(self, make_gateway, store):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async def _test():
            async with make_gateway(handler, store) as gateway:
                await gateway.execute("GET", "/marketplace/listings/")

        with pytest.raises(NetworkFailureError):
            asyncio.run(_test())

    def test_resource_timeout_is_network_failure(self, make_gateway, store):
        """The overall budget bounds a slow request even without an httpx timeout."""

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json={})

        async def _test():
            gateway = make_gateway(handler, store, request_timeout=0.01, resource_timeout=0.05)
            async with gateway:
                await gateway.execute("GET", "/marketplace/listings/")

        with pytest.raises(NetworkFailureError):
            asyncio.run(_test())


class TestUploadsAndDownloads:
    """Multipart uploads and raw downloads."""

    def test_upload_sends_multipart_file_part(self, make_gateway, signed_in_store):
        """Uploads use multipart/form-data with the named file part."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 5, "url": "https://cdn.test/5.jpg"})

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                return await gateway.upload(
                    "/marketplace/listings/42/images/",
                    content=b"\xff\xd8jpeg-bytes",
                    filename="listing_image.jpg",
                    query={"is_primary": True},
                    fields={"caption": "front"},
                )

        payload = asyncio.run(_test())

        request = seen[0]
        assert payload["id"] == 5
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert request.headers["authorization"] == "Bearer access-1"
        assert request.url.params["is_primary"] == "true"
        body = request.content
        assert b'name="image"; filename="listing_image.jpg"' in body
        assert b"Content-Type: image/jpeg" in body
        assert b"\xff\xd8jpeg-bytes" in body
        assert b'name="caption"' in body

    def test_execute_raw_returns_bytes(self, make_gateway, signed_in_store):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"name,grade\nMantle,5\n")

        async def _test():
            async with make_gateway(handler, signed_in_store) as gateway:
                return await gateway.execute_raw("/collections/3/export/", query={"export_format": "csv"})

        assert asyncio.run(_test()) == b"name,grade\nMantle,5\n"
