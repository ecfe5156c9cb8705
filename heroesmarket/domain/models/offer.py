"""Offer negotiation state machine.

An offer moves through a small, strict transition table. The seller acts on a
``pending`` offer (accept, decline, counter); the buyer acts on a
``countered`` one (accept or decline the counter). ``accepted`` and
``declined`` are terminal. The server stays authoritative; this table only
decides which calls are worth making.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum


class OfferStatus(str, Enum):
    """Enumeration of offer states."""

    PENDING = "pending"
    COUNTERED = "countered"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "OfferStatus":
        """Convert a string to an OfferStatus, defaulting to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.lower().strip())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (OfferStatus.ACCEPTED, OfferStatus.DECLINED)


class OfferAction(str, Enum):
    """Negotiation actions, named after their endpoints."""

    ACCEPT = "accept"
    DECLINE = "decline"
    COUNTER = "counter"
    ACCEPT_COUNTER = "accept-counter"
    DECLINE_COUNTER = "decline-counter"


class Perspective(str, Enum):
    """Which side of the offer the current user is on."""

    BUYER = "buyer"
    SELLER = "seller"

    @classmethod
    def for_offer(cls, is_from_buyer: bool) -> "Perspective":
        # The API sets is_from_buyer relative to the requesting user.
        return cls.BUYER if is_from_buyer else cls.SELLER


TRANSITIONS: dict[tuple[OfferStatus, OfferAction], OfferStatus] = {
    (OfferStatus.PENDING, OfferAction.ACCEPT): OfferStatus.ACCEPTED,
    (OfferStatus.PENDING, OfferAction.DECLINE): OfferStatus.DECLINED,
    (OfferStatus.PENDING, OfferAction.COUNTER): OfferStatus.COUNTERED,
    (OfferStatus.COUNTERED, OfferAction.ACCEPT_COUNTER): OfferStatus.ACCEPTED,
    (OfferStatus.COUNTERED, OfferAction.DECLINE_COUNTER): OfferStatus.DECLINED,
}

ACTIONS_BY_PERSPECTIVE: dict[tuple[OfferStatus, Perspective], tuple[OfferAction, ...]] = {
    (OfferStatus.PENDING, Perspective.SELLER): (
        OfferAction.ACCEPT,
        OfferAction.COUNTER,
        OfferAction.DECLINE,
    ),
    (OfferStatus.COUNTERED, Perspective.BUYER): (
        OfferAction.ACCEPT_COUNTER,
        OfferAction.DECLINE_COUNTER,
    ),
}


class OfferTransitionError(ValueError):
    """Raised before any network call when an action is not allowed."""

    def __init__(self, status: OfferStatus, action: OfferAction) -> None:
        if status.is_terminal:
            reason = f"offer is already {status.value}"
        else:
            reason = f"not allowed while offer is {status.value}"
        super().__init__(f"Cannot {action.value}: {reason}")
        self.status = status
        self.action = action


def effective_status(
    status: OfferStatus,
    expires_at: datetime | None,
    now: datetime | None = None,
) -> OfferStatus:
    """Status as it should be shown: an expired counter reads as declined."""
    if status is OfferStatus.COUNTERED and expires_at is not None:
        now = now or datetime.now(timezone.utc)
        if expires_at <= now:
            return OfferStatus.DECLINED
    return status


def next_status(status: OfferStatus, action: OfferAction) -> OfferStatus:
    """Return the status ``action`` leads to, or raise OfferTransitionError."""
    try:
        return TRANSITIONS[(status, action)]
    except KeyError:
        raise OfferTransitionError(status, action) from None


def available_actions(status: OfferStatus, perspective: Perspective) -> tuple[OfferAction, ...]:
    return ACTIONS_BY_PERSPECTIVE.get((status, perspective), ())


__all__ = [
    "ACTIONS_BY_PERSPECTIVE",
    "OfferAction",
    "OfferStatus",
    "OfferTransitionError",
    "Perspective",
    "TRANSITIONS",
    "available_actions",
    "effective_status",
    "next_status",
]
