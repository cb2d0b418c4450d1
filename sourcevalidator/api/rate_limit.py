"""Simple in-memory rate limiter for the validation endpoint.

Fixed-window counters keyed by client identifier: the window opens on a
client's first request and is not extended by later ones. No external
dependencies.
"""

import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from threading import Lock

from fastapi import Request


@dataclass
class RateLimitRecord:
    """Request count for one client within its current window."""

    count: int
    reset_time: float


@dataclass
class RateLimitResult:
    """Outcome of a single rate-limit check."""

    allowed: bool
    remaining: int
    reset_time: float


class RateLimiter:
    """Fixed-window rate limiter keyed by client identifier."""

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window = window_seconds
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = Lock()

    def check(
        self,
        identifier: str,
        max_requests: int | None = None,
        window_seconds: float | None = None,
    ) -> RateLimitResult:
        """Count one request for ``identifier`` and report whether it is allowed."""
        limit = self.max_requests if max_requests is None else max_requests
        window = self.window if window_seconds is None else window_seconds
        now = self._clock()

        with self._lock:
            record = self._records.get(identifier)
            if record is not None and now > record.reset_time:
                del self._records[identifier]
                record = None

            if record is None:
                record = RateLimitRecord(count=0, reset_time=now + window)

            if record.count >= limit:
                return RateLimitResult(
                    allowed=False, remaining=0, reset_time=record.reset_time
                )

            record.count += 1
            self._records[identifier] = record

            return RateLimitResult(
                allowed=True,
                remaining=limit - record.count,
                reset_time=record.reset_time,
            )

    def retry_after(self, result: RateLimitResult) -> int:
        """Whole seconds until ``result``'s window resets (at least 1)."""
        return max(1, math.ceil(result.reset_time - self._clock()))

    def reset(self) -> None:
        """Forget every client's counters."""
        with self._lock:
            self._records.clear()


def client_identifier(headers: Mapping[str, str], remote_addr: str | None) -> str:
    """Best-effort client identity, honouring proxy headers.

    Priority: first X-Forwarded-For hop, then X-Real-IP, then the socket
    address, then ``"unknown"``.
    """
    forwarded = headers.get("x-forwarded-for") or ""
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop

    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    return remote_addr or "unknown"


def request_client_identifier(request: Request) -> str:
    """Extract the client identifier from a Starlette request."""
    remote = request.client.host if request.client else None
    return client_identifier(request.headers, remote)
