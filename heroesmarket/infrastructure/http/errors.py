"""Error taxonomy reported by the marketplace gateway.

Every gateway failure is a :class:`GatewayError` subclass. Resource clients
and the negotiation services let these propagate unchanged, so callers can
branch on the kind: ``UnauthorizedError`` means the session has ended,
``ClientRejectedError`` carries the server's message, ``ServerFailureError``
and ``NetworkFailureError`` are worth a retry.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for all gateway failures."""

    user_message = "Request failed"
    retryable = False

    def __str__(self) -> str:
        detail = super().__str__()
        return detail or self.user_message


class InvalidRequestError(GatewayError):
    """Malformed URL or input, detected before any network call."""

    user_message = "Invalid request"


class UnauthorizedError(GatewayError):
    """The session could not be renewed; stored credentials are gone."""

    user_message = "Please log in again"


class NotFoundError(GatewayError):
    user_message = "Resource not found"


class ClientRejectedError(GatewayError):
    """4xx response other than 401/404."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"HTTP error {status_code}")
        self.status_code = status_code
        self.message = message

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return self.message or f"HTTP error {self.status_code}"


class ServerFailureError(GatewayError):
    """5xx response. Not retried by the gateway."""

    user_message = "Server error. Please try again later."
    retryable = True

    def __init__(self, status_code: int = 500) -> None:
        super().__init__(f"Server error {status_code}")
        self.status_code = status_code


class UnexpectedStatusError(GatewayError):
    """Any status outside the classified ranges (1xx, 3xx, >= 600)."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP error {status_code}")
        self.status_code = status_code

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"HTTP error {self.status_code}"


class DecodingFailedError(GatewayError):
    """The server answered but the body could not be parsed."""

    user_message = "Failed to parse response"


class NetworkFailureError(GatewayError):
    """Connectivity failure or timeout; no HTTP status available."""

    user_message = "Network error"
    retryable = True


__all__ = [
    "ClientRejectedError",
    "DecodingFailedError",
    "GatewayError",
    "InvalidRequestError",
    "NetworkFailureError",
    "NotFoundError",
    "ServerFailureError",
    "UnauthorizedError",
    "UnexpectedStatusError",
]
