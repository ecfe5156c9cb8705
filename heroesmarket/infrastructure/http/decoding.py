"""Tolerant decoding helpers shared by all wire models.

The marketplace emits timestamps in several shapes depending on the endpoint
(DRF's default with microseconds, plain ISO-8601, bare dates). They are all
normalised here so the models can declare a single ``Timestamp`` type.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator

# Tried in order after datetime.fromisoformat has failed.
TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d",
)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a wire timestamp into an aware :class:`datetime`.

    Naive values are assumed to be UTC. Raises ``ValueError`` for strings that
    match none of the accepted formats.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        parsed = _parse_timestamp_string(value.strip())
    else:
        raise ValueError(f"Cannot decode date: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_timestamp_string(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"Cannot decode date: {text}")


def parse_amount(value: Any) -> Decimal | None:
    """Convert a wire money string to :class:`Decimal`; unparseable ⇒ ``None``."""
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _none_to_default(default: Any):
    def validator(value: Any) -> Any:
        return default if value is None else value

    return validator


Timestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Optional timestamp accepting every format the marketplace emits."""

Count = Annotated[int, BeforeValidator(_none_to_default(0))]
"""Counter that reads a missing or ``null`` value as 0."""

Flag = Annotated[bool, BeforeValidator(_none_to_default(False))]
"""Boolean that reads a missing or ``null`` value as ``False``."""


__all__ = [
    "Count",
    "Flag",
    "TIMESTAMP_FORMATS",
    "Timestamp",
    "parse_amount",
    "parse_timestamp",
]
