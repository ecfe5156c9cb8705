"""Simple in-process metrics collection for HeroesMarket.

Counters and histograms are kept in memory so an embedding application can
log them periodically or expose them however it likes. The gateway records
every request; the negotiation services record their outcomes.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Mapping

LabelKey = tuple[tuple[str, str | None], ...]


def _labels_to_key(labels: Mapping[str, str | None] | None) -> LabelKey:
    if labels is None:
        return ()
    return tuple(sorted(labels.items()))


def _key_to_str(key: LabelKey) -> str:
    return ",".join(f"{k}={v}" for k, v in key) if key else "default"


# ---------------------------------------------------------------------------
# Metric storage
# ---------------------------------------------------------------------------


@dataclass
class Counter:
    """A monotonically increasing counter."""

    name: str
    help_text: str = ""
    _values: dict[LabelKey, float] = field(default_factory=lambda: defaultdict(float))
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def inc(
        self, value: float = 1.0, labels: Mapping[str, str | None] | None = None
    ) -> None:
        key = _labels_to_key(labels)
        with self._lock:
            self._values[key] += value

    def get(self, labels: Mapping[str, str | None] | None = None) -> float:
        key = _labels_to_key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            return {_key_to_str(key): value for key, value in self._values.items()}


@dataclass
class Histogram:
    """Accumulates observations and reports count, sum and average."""

    name: str
    help_text: str = ""
    _observations: dict[LabelKey, list[float]] = field(
        default_factory=lambda: defaultdict(list)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def observe(
        self, value: float, labels: Mapping[str, str | None] | None = None
    ) -> None:
        key = _labels_to_key(labels)
        with self._lock:
            self._observations[key].append(value)

    def get_stats(
        self, labels: Mapping[str, str | None] | None = None
    ) -> dict[str, float]:
        key = _labels_to_key(labels)
        with self._lock:
            return self._stats(self._observations.get(key, []))

    def snapshot(self) -> dict[str, dict[str, float]]:
        with self._lock:
            return {
                _key_to_str(key): self._stats(values)
                for key, values in self._observations.items()
            }

    @staticmethod
    def _stats(values: list[float]) -> dict[str, float]:
        if not values:
            return {"count": 0, "sum": 0.0, "avg": 0.0}
        total = sum(values)
        return {"count": len(values), "sum": total, "avg": total / len(values)}


class MetricRegistry:
    """Registry for all metrics of the process."""

    def __init__(self) -> None:
        self._counters: dict[str, Counter] = {}
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, help_text: str = "") -> Counter:
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(name=name, help_text=help_text)
            return self._counters[name]

    def histogram(self, name: str, help_text: str = "") -> Histogram:
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = Histogram(name=name, help_text=help_text)
            return self._histograms[name]

    def all_counters(self) -> dict[str, Counter]:
        with self._lock:
            return dict(self._counters)

    def all_histograms(self) -> dict[str, Histogram]:
        with self._lock:
            return dict(self._histograms)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


_registry = MetricRegistry()


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def get_registry() -> MetricRegistry:
    return _registry


def increment_counter(
    name: str,
    value: float = 1.0,
    labels: Mapping[str, str | None] | None = None,
    help_text: str = "",
) -> None:
    """Increment a counter by name, creating it on first use."""
    _registry.counter(name, help_text).inc(value, labels)


def observe_histogram(
    name: str,
    value: float,
    labels: Mapping[str, str | None] | None = None,
    help_text: str = "",
) -> None:
    """Record an observation in a histogram, creating it on first use."""
    _registry.histogram(name, help_text).observe(value, labels)


class Timer:
    """Context manager measuring wall-clock duration of a block.

    ``elapsed`` is live while the block runs and frozen once it exits.
    """

    def __init__(self) -> None:
        self._start: float = 0.0
        self._end: float | None = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *args: object) -> None:
        self._end = time.perf_counter()

    @property
    def elapsed(self) -> float:
        end = self._end if self._end is not None else time.perf_counter()
        return end - self._start


# ---------------------------------------------------------------------------
# Predefined metrics
# ---------------------------------------------------------------------------

API_REQUESTS = "api_requests_total"
API_REQUEST_DURATION = "api_request_duration_seconds"
SESSION_RENEWALS = "session_renewals_total"
BIDS = "bids_total"
OFFER_ACTIONS = "offer_actions_total"
CHECKOUT_STEPS = "checkout_steps_total"


def record_api_request(
    endpoint: str, method: str, status_code: int | None, duration: float
) -> None:
    """Record a gateway request with its outcome and duration.

    ``status_code`` is ``None`` when no response was received.
    """
    status = str(status_code) if status_code is not None else "network_error"
    increment_counter(
        API_REQUESTS,
        labels={"endpoint": endpoint, "method": method, "status": status},
        help_text="Total API requests",
    )
    observe_histogram(
        API_REQUEST_DURATION,
        duration,
        labels={"endpoint": endpoint, "method": method},
        help_text="API request duration in seconds",
    )


def record_session_renewal(outcome: str) -> None:
    """Record a renewal attempt: 'renewed', 'shared', 'rejected' or 'missing'."""
    increment_counter(
        SESSION_RENEWALS, labels={"outcome": outcome}, help_text="Session renewals"
    )


def record_bid(outcome: str) -> None:
    increment_counter(BIDS, labels={"outcome": outcome}, help_text="Bid attempts")


def record_offer_action(action: str, outcome: str) -> None:
    increment_counter(
        OFFER_ACTIONS,
        labels={"action": action, "outcome": outcome},
        help_text="Offer negotiation actions",
    )


def record_checkout_step(step: str, outcome: str) -> None:
    increment_counter(
        CHECKOUT_STEPS,
        labels={"step": step, "outcome": outcome},
        help_text="Checkout saga steps",
    )


# ---------------------------------------------------------------------------
# Export utilities
# ---------------------------------------------------------------------------


def get_metrics_summary() -> dict[str, object]:
    """Return a summary of all metrics for logging or CLI display."""
    return {
        "counters": {
            name: counter.snapshot()
            for name, counter in _registry.all_counters().items()
        },
        "histograms": {
            name: histogram.snapshot()
            for name, histogram in _registry.all_histograms().items()
        },
    }
