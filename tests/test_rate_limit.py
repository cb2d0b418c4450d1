"""Tests for the fixed-window rate limiter and client identity resolution."""

from unittest.mock import MagicMock

import pytest

from sourcevalidator.api.rate_limit import (
    RateLimiter,
    client_identifier,
    request_client_identifier,
)


# ── RateLimiter ──────────────────────────────────────────────────────


class TestRateLimiter:
    def test_first_request_allowed(self, limiter, fake_clock):
        result = limiter.check("1.2.3.4")
        assert result.allowed is True
        assert result.remaining == 9
        assert result.reset_time == fake_clock.current + 60

    def test_remaining_strictly_decreases_until_blocked(self, limiter):
        remaining = []
        for _ in range(10):
            result = limiter.check("client")
            assert result.allowed is True
            remaining.append(result.remaining)

        assert remaining == list(range(9, -1, -1))

        blocked = limiter.check("client")
        assert blocked.allowed is False
        assert blocked.remaining == 0

    def test_blocked_request_does_not_change_record(self, limiter, fake_clock):
        for _ in range(10):
            first_reset = limiter.check("client").reset_time
        fake_clock.advance(5)
        for _ in range(3):
            blocked = limiter.check("client")
            assert blocked.allowed is False
            assert blocked.reset_time == first_reset

    def test_reset_time_not_extended_within_window(self, limiter, fake_clock):
        first = limiter.check("client")
        fake_clock.advance(30)
        second = limiter.check("client")
        assert second.reset_time == first.reset_time

    def test_window_expiry_starts_fresh(self, limiter, fake_clock):
        for _ in range(11):
            limiter.check("client")
        fake_clock.advance(61)

        result = limiter.check("client")
        assert result.allowed is True
        assert result.remaining == 9
        assert result.reset_time == fake_clock.current + 60

    def test_boundary_instant_still_in_window(self, limiter, fake_clock):
        for _ in range(10):
            limiter.check("client")
        fake_clock.advance(60)  # now == reset_time, not past it
        assert limiter.check("client").allowed is False

    def test_keys_are_independent(self, limiter):
        for _ in range(10):
            limiter.check("a")
        assert limiter.check("a").allowed is False
        assert limiter.check("b").allowed is True

    def test_per_call_overrides(self, limiter):
        assert limiter.check("x", max_requests=1, window_seconds=5).allowed is True
        assert limiter.check("x", max_requests=1, window_seconds=5).allowed is False

    def test_zero_limit_always_blocks(self, fake_clock):
        limiter = RateLimiter(max_requests=0, window_seconds=60, clock=fake_clock)
        assert limiter.check("x").allowed is False

    def test_retry_after_rounds_up(self, limiter, fake_clock):
        for _ in range(10):
            limiter.check("client")
        fake_clock.advance(20.5)
        blocked = limiter.check("client")
        assert limiter.retry_after(blocked) == 40

    def test_retry_after_at_least_one_second(self, limiter, fake_clock):
        for _ in range(10):
            limiter.check("client")
        fake_clock.advance(60)
        blocked = limiter.check("client")
        assert limiter.retry_after(blocked) == 1

    def test_reset_clears_all_clients(self, limiter):
        for _ in range(10):
            limiter.check("client")
        limiter.reset()
        assert limiter.check("client").remaining == 9


# ── Client identity ──────────────────────────────────────────────────


class TestClientIdentifier:
    def test_forwarded_for_first_hop(self):
        headers = {"x-forwarded-for": " 203.0.113.7 , 10.0.0.1", "x-real-ip": "10.0.0.2"}
        assert client_identifier(headers, "127.0.0.1") == "203.0.113.7"

    def test_real_ip_when_no_forwarded_for(self):
        assert client_identifier({"x-real-ip": "198.51.100.4"}, "127.0.0.1") == "198.51.100.4"

    def test_empty_forwarded_for_falls_through(self):
        headers = {"x-forwarded-for": " , 10.0.0.1", "x-real-ip": "198.51.100.4"}
        assert client_identifier(headers, None) == "198.51.100.4"

    def test_remote_address_fallback(self):
        assert client_identifier({}, "192.0.2.9") == "192.0.2.9"

    def test_unknown_when_nothing_available(self):
        assert client_identifier({}, None) == "unknown"
        assert client_identifier({}, "") == "unknown"

    @pytest.mark.parametrize("client,expected", [(None, "unknown"), ("192.0.2.1", "192.0.2.1")])
    def test_from_request(self, client, expected):
        request = MagicMock()
        request.headers = {}
        request.client = MagicMock(host=client) if client else None
        assert request_client_identifier(request) == expected
