"""Marketplace gateway with transparent session renewal.

This module centralises every HTTP call made against the marketplace API. It
owns a lazily created :class:`httpx.AsyncClient`, injects the stored access
credential as a bearer header, and on a 401 renews the session once before
replaying the request. Renewal is single-flight: concurrent requests that hit
a 401 together wait on one lock, and whoever gets it second finds the access
credential already replaced and simply retries.

Failures are classified into the :mod:`.errors` taxonomy; nothing is retried
here except the single post-renewal replay.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, TypeVar
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, ValidationError

from heroesmarket.app.config import (
    ACCESS_TOKEN_KEY,
    DEFAULT_API_BASE_URL,
    DEFAULT_RENEWAL_PATH,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RESOURCE_TIMEOUT,
    REFRESH_TOKEN_KEY,
    MarketSettings,
)
from heroesmarket.infrastructure.credentials import (
    CredentialStore,
    SessionTokens,
    clear_session,
    save_session,
)
from heroesmarket.infrastructure.observability import (
    Timer,
    get_logger,
    record_api_request,
    record_session_renewal,
)

from .errors import (
    ClientRejectedError,
    DecodingFailedError,
    InvalidRequestError,
    NetworkFailureError,
    NotFoundError,
    ServerFailureError,
    UnauthorizedError,
    UnexpectedStatusError,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

QueryParams = Mapping[str, Any]


def _encode_query(query: QueryParams | None) -> list[tuple[str, str]]:
    """Drop ``None`` values and render the rest the way the API expects."""
    if not query:
        return []
    params: list[tuple[str, str]] = []
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, bool):
            params.append((key, "true" if value else "false"))
        else:
            params.append((key, str(value)))
    return params


def _encode_body(body: BaseModel | Mapping[str, Any] | None) -> Any:
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True)
    return {key: value for key, value in body.items() if value is not None}


def extract_error_message(response: httpx.Response) -> str | None:
    """Best-effort extraction of the server's message from a 4xx body."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    for key in ("detail", "error", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def raise_for_status(response: httpx.Response) -> None:
    """Map an HTTP status onto the gateway error taxonomy."""
    status = response.status_code
    if 200 <= status < 300:
        return
    if status == 401:
        raise UnauthorizedError()
    if status == 404:
        raise NotFoundError()
    if 400 <= status < 500:
        raise ClientRejectedError(status, extract_error_message(response))
    if 500 <= status < 600:
        raise ServerFailureError(status)
    raise UnexpectedStatusError(status)


class MarketplaceGateway:
    """Authenticated JSON gateway to the marketplace API.

    The gateway is safe to share between concurrent tasks on one event loop.
    It holds no session state of its own; the credential store is the single
    source of truth and is only written during renewal.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        renewal_path: str = DEFAULT_RENEWAL_PATH,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        resource_timeout: float = DEFAULT_RESOURCE_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str = "",
    ) -> None:
        from heroesmarket import __version__

        parsed = urlsplit(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidRequestError(f"Invalid base URL: {base_url!r}")

        self.base_url = base_url.rstrip("/")
        self.renewal_path = renewal_path
        self.request_timeout = request_timeout
        self.resource_timeout = max(resource_timeout, request_timeout)
        self.user_agent = user_agent or f"heroesmarket-client/{__version__}"
        self._store = credential_store
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._renewal_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: MarketSettings,
        credential_store: CredentialStore,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "MarketplaceGateway":
        return cls(
            credential_store,
            base_url=settings.api_base_url,
            renewal_path=settings.renewal_path,
            request_timeout=settings.request_timeout_seconds,
            resource_timeout=settings.resource_timeout_seconds,
            transport=transport,
        )

    @property
    def credential_store(self) -> CredentialStore:
        return self._store

    # -------------------- lifecycle --------------------
    async def __aenter__(self) -> "MarketplaceGateway":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.request_timeout),
                transport=self._transport,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------- request building --------------------
    def _build_url(self, path: str) -> str:
        if not path.startswith("/"):
            raise InvalidRequestError(f"Path must be absolute: {path!r}")
        return self.base_url + path

    def _headers(self, token: str | None, *, json_content: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_content:
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        *,
        token: str | None,
        params: list[tuple[str, str]],
        json_body: Any = None,
        files: Mapping[str, Any] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        client = self._get_client()
        try:
            request = client.build_request(
                method,
                self._build_url(path),
                params=params or None,
                json=json_body,
                files=files,
                data=data,
                headers=self._headers(token, json_content=files is None),
            )
        except httpx.InvalidURL as exc:
            raise InvalidRequestError(f"Invalid URL for {path!r}: {exc}") from exc

        with Timer() as timer:
            try:
                response = await client.send(request)
            except httpx.TimeoutException as exc:
                record_api_request(path, method, None, timer.elapsed)
                logger.warning("%s %s timed out", method, path)
                raise NetworkFailureError(f"Request timed out: {method} {path}") from exc
            except httpx.TransportError as exc:
                record_api_request(path, method, None, timer.elapsed)
                logger.warning("%s %s failed: %s", method, path, exc)
                raise NetworkFailureError(f"Network error: {exc}") from exc
        record_api_request(path, method, response.status_code, timer.elapsed)
        logger.debug(
            "%s %s -> %d (%.3fs)", method, path, response.status_code, timer.elapsed
        )
        return response

    async def _dispatch(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]],
        json_body: Any = None,
        files: Mapping[str, Any] | None = None,
        data: Mapping[str, str] | None = None,
        renew_on_unauthorized: bool = True,
    ) -> httpx.Response:
        token = self._store.get(ACCESS_TOKEN_KEY)
        response = await self._send(
            method, path, token=token, params=params,
            json_body=json_body, files=files, data=data,
        )
        if response.status_code == 401 and renew_on_unauthorized:
            if not await self.renew_session(stale_token=token):
                raise UnauthorizedError("Session expired and could not be renewed")
            response = await self._send(
                method, path, token=self._store.get(ACCESS_TOKEN_KEY), params=params,
                json_body=json_body, files=files, data=data,
            )
        raise_for_status(response)
        return response

    async def _perform(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Run one logical request (plus renewal and replay) within the resource timeout."""
        try:
            return await asyncio.wait_for(
                self._dispatch(method, path, **kwargs), timeout=self.resource_timeout
            )
        except asyncio.TimeoutError as exc:
            raise NetworkFailureError(
                f"{method} {path} exceeded {self.resource_timeout:.0f}s"
            ) from exc

    # -------------------- renewal --------------------
    async def renew_session(self, stale_token: str | None = None) -> bool:
        """Exchange the renewal credential for a new access credential.

        ``stale_token`` is the access credential the failed request carried.
        If the store already holds a different one, another request renewed
        while this one waited and no network call is made.

        Returns ``False`` (after clearing both credentials) when there is no
        renewal credential or the server refuses it. A network failure during
        renewal propagates as :class:`NetworkFailureError` and leaves the
        stored credentials untouched.
        """
        async with self._renewal_lock:
            current = self._store.get(ACCESS_TOKEN_KEY)
            if current is not None and current != stale_token:
                record_session_renewal("shared")
                return True

            refresh = self._store.get(REFRESH_TOKEN_KEY)
            if not refresh:
                logger.warning("Session expired and no renewal credential is stored")
                clear_session(self._store)
                record_session_renewal("missing")
                return False

            response = await self._send(
                "POST",
                self.renewal_path,
                token=None,
                params=[],
                json_body={"refresh": refresh},
            )
            tokens: SessionTokens | None = None
            if 200 <= response.status_code < 300:
                try:
                    tokens = SessionTokens.model_validate(response.json())
                except (ValueError, ValidationError) as exc:
                    logger.warning("Renewal response could not be parsed: %s", exc)

            if tokens is None:
                logger.warning(
                    "Session renewal rejected (status %d); clearing credentials",
                    response.status_code,
                )
                clear_session(self._store)
                record_session_renewal("rejected")
                return False

            save_session(self._store, tokens.access, tokens.refresh)
            record_session_renewal("renewed")
            logger.info("Session renewed")
            return True

    # -------------------- public API --------------------
    def _decode(self, response: httpx.Response, response_model: type[ModelT] | None) -> Any:
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodingFailedError(f"Response is not valid JSON: {exc}") from exc
        if response_model is None:
            return payload
        try:
            return response_model.model_validate(payload)
        except ValidationError as exc:
            raise DecodingFailedError(
                f"Failed to decode {response_model.__name__}: {exc}"
            ) from exc

    async def execute(
        self,
        method: str,
        path: str,
        *,
        query: QueryParams | None = None,
        body: BaseModel | Mapping[str, Any] | None = None,
        response_model: type[ModelT] | None = None,
        renew_on_unauthorized: bool = True,
    ) -> Any:
        """Send a JSON request and decode the response.

        With ``response_model`` the body is validated into that model,
        otherwise the parsed JSON is returned as-is.

        Raises:
            GatewayError: one of the taxonomy subclasses.
        """
        response = await self._perform(
            method.upper(),
            path,
            params=_encode_query(query),
            json_body=_encode_body(body),
            renew_on_unauthorized=renew_on_unauthorized,
        )
        return self._decode(response, response_model)

    async def execute_void(
        self,
        method: str,
        path: str,
        *,
        query: QueryParams | None = None,
        body: BaseModel | Mapping[str, Any] | None = None,
        renew_on_unauthorized: bool = True,
    ) -> None:
        """Send a JSON request whose response body is not needed."""
        await self._perform(
            method.upper(),
            path,
            params=_encode_query(query),
            json_body=_encode_body(body),
            renew_on_unauthorized=renew_on_unauthorized,
        )

    async def execute_raw(self, path: str, *, query: QueryParams | None = None) -> bytes:
        """GET a resource and return the undecoded body (file downloads)."""
        response = await self._perform("GET", path, params=_encode_query(query))
        return response.content

    async def upload(
        self,
        path: str,
        *,
        content: bytes,
        filename: str,
        field_name: str = "image",
        content_type: str = "image/jpeg",
        query: QueryParams | None = None,
        fields: Mapping[str, str] | None = None,
        response_model: type[ModelT] | None = None,
    ) -> Any:
        """POST a multipart/form-data body with one file part plus scalar fields."""
        files = {field_name: (filename, content, content_type)}
        response = await self._perform(
            "POST",
            path,
            params=_encode_query(query),
            files=files,
            data=dict(fields) if fields else None,
        )
        return self._decode(response, response_model)


__all__ = [
    "MarketplaceGateway",
    "extract_error_message",
    "raise_for_status",
]
