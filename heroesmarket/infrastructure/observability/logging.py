"""Logging utilities for HeroesMarket.

This module provides centralised logging configuration and helpers for
structured, contextual logging throughout the client. Context fields such as
``listing_id`` or ``order_id`` are attached with :func:`log_context` and are
appended to every message emitted inside the block.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator


# ---------------------------------------------------------------------------
# Context variables for structured logging
# ---------------------------------------------------------------------------

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Field names whose values must never reach a log line.
_REDACTED_FIELDS = frozenset({"access", "refresh", "token", "password", "client_secret"})


def _render_context(ctx: dict[str, Any]) -> str:
    parts = []
    for key, value in ctx.items():
        if key in _REDACTED_FIELDS:
            value = "***"
        parts.append(f"{key}={value}")
    return " ".join(parts)


class ContextualFormatter(logging.Formatter):
    """Formatter that appends the active context fields to log messages."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        ctx = _log_context.get()
        if ctx:
            return f"{message} [{_render_context(ctx)}]"
        return message


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Temporarily add context fields to all log messages.

    Usage::

        with log_context(listing_id=42, offer_id=3):
            logger.info("Countering offer")  # message includes context

    Fields are merged with any existing context and restored on exit. Since
    the context lives in a :class:`~contextvars.ContextVar`, concurrent
    asyncio tasks each see their own fields.
    """
    current = _log_context.get()
    merged = {**current, **fields}
    token = _log_context.set(merged)
    try:
        yield
    finally:
        _log_context.reset(token)


def current_log_context() -> dict[str, Any]:
    """Return a copy of the fields currently bound by :func:`log_context`."""
    return dict(_log_context.get())


# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_configured = False


def configure_logging(
    level: int = logging.INFO,
    third_party_level: int = logging.WARNING,
) -> None:
    """Configure application-wide logging.

    Call this once at startup (CLI main, embedding application, etc.) to set
    up consistent logging across the client.

    Args:
        level: Log level for application loggers (default INFO).
        third_party_level: Log level for third-party libraries (default WARNING).
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ContextualFormatter(_LOG_FORMAT))
    root.addHandler(handler)

    # httpx logs every request line at INFO, including full URLs
    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(third_party_level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given name.

    If configure_logging() has not been called, a basic fallback configuration
    is applied to ensure the logger is usable.
    """
    logger = logging.getLogger(name)
    if not _configured and not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(ContextualFormatter(_LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------


def log_exception(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """Log an exception with context fields.

    Args:
        logger: Logger instance.
        message: Human-readable message describing the error.
        exc: The exception that was raised.
        **context: Additional context fields to include.
    """
    with log_context(**context):
        logger.error("%s: %s", message, exc, exc_info=exc)
