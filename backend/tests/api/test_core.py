"""Tests for app.core -- logging helpers and rate limiting."""

from __future__ import annotations

import json
import logging

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from app.core.logging import JSONFormatter, progress_logger, request_id_var
from app.core.rate_limit import RateLimiter


def _request(ip: str = "10.0.0.1", forwarded: str | None = None) -> Request:
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "headers": headers, "client": (ip, 1234)})


class TestJSONFormatter:

    def test_fields_and_request_id(self):
        record = logging.LogRecord("engine.simulation.runner", logging.INFO, __file__, 1, "ran %d", (5,), None)
        record.strategy = "self-consumption"
        token = request_id_var.set("abc123")
        try:
            entry = json.loads(JSONFormatter().format(record))
        finally:
            request_id_var.reset(token)
        assert entry["message"] == "ran 5"
        assert entry["level"] == "INFO"
        assert entry["request_id"] == "abc123"
        assert entry["strategy"] == "self-consumption"
        assert "battery_kwh" not in entry


class TestProgressLogger:

    def test_logs_at_milestones(self, caplog):
        report = progress_logger("simulate self-consumption", step_pct=50)
        with caplog.at_level(logging.DEBUG, logger="sunstore.progress"):
            for i in range(0, 101, 10):
                report(i, 100)
        messages = [r.getMessage() for r in caplog.records]
        assert messages == [
            "simulate self-consumption: 50/100 intervals (50%)",
            "simulate self-consumption: 100/100 intervals (100%)",
        ]


class TestRateLimiter:

    def test_blocks_after_limit(self):
        limiter = RateLimiter(max_requests=2, window_seconds=60)
        limiter.check(_request())
        limiter.check(_request())
        with pytest.raises(HTTPException) as exc:
            limiter.check(_request())
        assert exc.value.status_code == 429
        # Other clients are unaffected
        limiter.check(_request("10.0.0.2"))

    def test_forwarded_for_and_reset(self):
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.check(_request(forwarded="203.0.113.7, 10.0.0.1"))
        with pytest.raises(HTTPException):
            limiter.check(_request("10.9.9.9", forwarded="203.0.113.7"))
        limiter.reset()
        limiter.check(_request(forwarded="203.0.113.7"))
