"""Fixed-window request throttles for the authentication endpoints."""

from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Protocol

from redis import Redis
from redis.exceptions import RedisError

from ..config import Settings

logger = logging.getLogger(__name__)


class Throttle(Protocol):
    def allow(self, key: str) -> bool: ...


class InMemoryThrottle:
    """Thread-safe per-key counter reset at the start of every window."""

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self._max_requests = max_requests
        self._window = window_seconds
        self._window_id: int | None = None
        self._counters: dict[str, int] = {}
        self._lock = Lock()

    def allow(self, key: str) -> bool:
        """Return ``True`` when ``key`` has budget left in the current window."""
        window = int(time.time() // self._window)
        with self._lock:
            if window != self._window_id:
                # only the current window is kept
                self._window_id = window
                self._counters.clear()
            count = self._counters.get(key, 0)
            if count >= self._max_requests:
                return False
            self._counters[key] = count + 1
            return True


class RedisThrottle:
    """Counter shared between processes through Redis ``INCR`` with a window expiry."""

    def __init__(
        self,
        client: Redis,
        *,
        max_requests: int,
        window_seconds: int,
        key_prefix: str = "throttle",
    ) -> None:
        self._client = client
        self._max_requests = max_requests
        self._window_ms = window_seconds * 1000
        self._key_prefix = key_prefix

    def allow(self, key: str) -> bool:
        window = int(time.time() * 1000) // self._window_ms
        redis_key = f"{self._key_prefix}:{key}:{window}"
        pipe = self._client.pipeline()
        pipe.incr(redis_key)
        pipe.pexpire(redis_key, self._window_ms)
        count, _ = pipe.execute()
        return int(count) <= self._max_requests


def build_throttle(settings: Settings) -> Throttle:
    """Instantiate the configured throttle backend, preferring Redis when reachable."""
    if settings.rate_limit_backend == "redis" and settings.redis_url:
        try:
            client = Redis.from_url(settings.redis_url)
            client.ping()
        except RedisError as exc:
            logger.warning("redis throttle unavailable, falling back to in-memory: %s", exc)
        else:
            logger.info("throttle configured for redis backend at %s", settings.redis_url)
            return RedisThrottle(
                client,
                max_requests=settings.rate_limit_requests,
                window_seconds=settings.rate_limit_window_seconds,
            )

    logger.info("throttle using in-memory backend")
    return InMemoryThrottle(
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
