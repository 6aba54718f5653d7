"""Sliding-window rate limiter for the metered places API.

Counters are persisted through a key-value store so the quota survives
restarts. Processes sharing one state directory are not coordinated: each
loads its own snapshot and the last writer wins.
"""

import json
import logging
import math
import time
from typing import Any, Callable

from travel_advisor_mcp.models import RateLimitStats
from travel_advisor_mcp.storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "apiRateLimit"


class RateLimiter:
    """Admit at most ``max_requests`` granted requests in any trailing window.

    ``can_make_request`` is a pure check. Callers record a request with
    ``record_request`` only after the upstream call succeeded, so failed
    calls do not consume quota.
    """

    def __init__(
        self,
        store: KeyValueStore,
        max_requests: int = 15,
        window_ms: int = 60 * 60 * 1000,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        self._store = store
        self._max_requests = max_requests
        self._window_ms = window_ms
        self._storage_key = storage_key
        self._clock = clock
        self._requests: list[int] = []
        self._window_start: int = self._now_ms()
        self._load()

    def _now_ms(self) -> int:
        return round(self._clock() * 1000)

    def _load(self) -> None:
        now = self._now_ms()
        try:
            raw = self._store.get_item(self._storage_key)
            if raw is None:
                return
            data = json.loads(raw)
            window_start = data["windowStart"]
            if not math.isfinite(window_start):
                raise ValueError(f"windowStart is not finite: {window_start!r}")
            window_start = int(window_start)
            stored_requests = data["requests"]
            if not isinstance(stored_requests, list):
                raise TypeError("requests must be a list")
        except (StorageError, ValueError, TypeError, KeyError, OverflowError) as exc:
            logger.error("Discarding unreadable rate limit state: %s", exc)
            try:
                self._store.remove_item(self._storage_key)
            except StorageError as remove_exc:
                logger.warning("Failed to remove rate limit state: %s", remove_exc)
            return

        # Each request ages out on its own; windowStart is kept only as metadata
        self._requests = self._sanitize(stored_requests, now)
        if 0 <= now - window_start <= self._window_ms:
            self._window_start = window_start

    def _sanitize(self, stored: list[Any], now: int) -> list[int]:
        """Keep in-window, non-future numeric timestamps, newest ``max_requests`` only."""
        kept = sorted(
            int(ts)
            for ts in stored
            if isinstance(ts, (int, float)) and not isinstance(ts, bool)
            and 0 <= now - ts < self._window_ms
        )
        return kept[-self._max_requests:]

    def _save(self) -> None:
        payload = {"requests": self._requests, "windowStart": self._window_start}
        try:
            self._store.set_item(self._storage_key, json.dumps(payload))
        except StorageError as exc:
            logger.error("Failed to persist rate limit state: %s", exc)

    def _prune(self, now: int) -> None:
        self._requests = [ts for ts in self._requests if now - ts < self._window_ms]

    @property
    def limit(self) -> int:
        return self._max_requests

    def can_make_request(self) -> bool:
        self._prune(self._now_ms())
        return len(self._requests) < self._max_requests

    def record_request(self) -> None:
        self._requests.append(self._now_ms())
        self._save()

    def get_remaining_requests(self) -> int:
        self._prune(self._now_ms())
        return max(0, self._max_requests - len(self._requests))

    def get_time_until_reset(self) -> int:
        """Milliseconds until the oldest recorded request leaves the window."""
        now = self._now_ms()
        self._prune(now)
        if not self._requests:
            return 0
        return max(0, min(self._requests) + self._window_ms - now)

    def get_stats(self) -> RateLimitStats:
        reset_in = self.get_time_until_reset()
        return RateLimitStats(
            remaining=self.get_remaining_requests(),
            limit=self._max_requests,
            reset_in=reset_in,
            reset_in_minutes=math.ceil(reset_in / 60000),
        )

    def reset(self) -> None:
        self._requests = []
        self._window_start = self._now_ms()
        self._save()
        logger.info("Rate limit reset")
