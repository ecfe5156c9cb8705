"""Order status progression."""

from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    """Enumeration of order states.

    Orders progress ``pending`` → ``paid`` → ``shipped`` → ``delivered`` →
    ``completed``; ``cancelled`` is reachable from the early states.
    """

    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "OrderStatus":
        """Convert a string to an OrderStatus, defaulting to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        normalized = value.lower().strip()
        if normalized == "canceled":
            return cls.CANCELLED
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @property
    def is_open(self) -> bool:
        return self in (
            OrderStatus.PENDING,
            OrderStatus.PAID,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        )

    @property
    def awaits_payment(self) -> bool:
        return self is OrderStatus.PENDING

    @property
    def can_review(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.COMPLETED)


__all__ = ["OrderStatus"]
