"""Tests for the logging facade and in-process metrics."""

from __future__ import annotations

import logging
import time

import pytest

from heroesmarket.infrastructure.observability import (
    Timer,
    current_log_context,
    get_logger,
    get_metrics_summary,
    get_registry,
    increment_counter,
    log_context,
    log_exception,
    observe_histogram,
    record_api_request,
)
from heroesmarket.infrastructure.observability.logging import ContextualFormatter


class TestLogContext:
    def test_nested_context_merges_and_restores(self):
        with log_context(listing_id=42):
            with log_context(offer_id=3):
                assert current_log_context() == {"listing_id": 42, "offer_id": 3}
            assert current_log_context() == {"listing_id": 42}
        assert current_log_context() == {}

    def test_formatter_appends_context(self):
        formatter = ContextualFormatter("%(message)s")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "Placing bid", None, None)
        with log_context(listing_id=7):
            assert formatter.format(record) == "Placing bid [listing_id=7]"

    def test_formatter_redacts_credentials(self):
        formatter = ContextualFormatter("%(message)s")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "Renewed", None, None)
        with log_context(refresh="secret-value", user="collector"):
            rendered = formatter.format(record)
        assert "secret-value" not in rendered
        assert "user=collector" in rendered

    def test_log_exception_includes_context(self, caplog):
        logger = get_logger("heroesmarket.tests")
        with caplog.at_level(logging.ERROR, logger="heroesmarket.tests"):
            log_exception(logger, "Processor failed", RuntimeError("card declined"), order_id=501)
        assert "Processor failed: card declined" in caplog.text


class TestMetrics:
    def test_counter_labels(self):
        increment_counter("bids_total", labels={"outcome": "accepted"})
        increment_counter("bids_total", labels={"outcome": "accepted"})
        increment_counter("bids_total", labels={"outcome": "rejected"})
        counter = get_registry().counter("bids_total")
        assert counter.get({"outcome": "accepted"}) == 2
        assert counter.get({"outcome": "rejected"}) == 1
        assert counter.get({"outcome": "failed"}) == 0

    def test_histogram_stats(self):
        for value in (0.1, 0.3, 0.2):
            observe_histogram("latency", value)
        stats = get_registry().histogram("latency").get_stats()
        assert stats["count"] == 3
        assert stats["avg"] == pytest.approx(0.2)

    def test_record_api_request_without_response(self):
        record_api_request("/marketplace/offers/", "GET", None, 0.5)
        summary = get_metrics_summary()
        counters = summary["counters"]["api_requests_total"]
        assert counters == {
            "endpoint=/marketplace/offers/,method=GET,status=network_error": 1.0
        }
        assert "api_request_duration_seconds" in summary["histograms"]

    def test_timer_is_live_inside_block(self):
        with Timer() as timer:
            time.sleep(0.01)
            inside = timer.elapsed
        assert inside > 0
        assert timer.elapsed >= inside
        frozen = timer.elapsed
        time.sleep(0.01)
        assert timer.elapsed == frozen
