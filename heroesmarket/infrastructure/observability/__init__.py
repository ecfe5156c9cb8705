"""Observability and logging facades."""

from .logging import (
    configure_logging,
    current_log_context,
    get_logger,
    log_context,
    log_exception,
)
from .metrics import (
    Timer,
    get_metrics_summary,
    get_registry,
    increment_counter,
    observe_histogram,
    record_api_request,
    record_bid,
    record_checkout_step,
    record_offer_action,
    record_session_renewal,
)

__all__ = [
    # Logging
    "configure_logging",
    "current_log_context",
    "get_logger",
    "log_context",
    "log_exception",
    # Metrics
    "Timer",
    "get_metrics_summary",
    "get_registry",
    "increment_counter",
    "observe_histogram",
    "record_api_request",
    "record_bid",
    "record_checkout_step",
    "record_offer_action",
    "record_session_renewal",
]
