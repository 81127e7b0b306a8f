"""Rate Limiter — fixed-window request counter per client id with bounded memory.

Invariants:
    - A record's count never exceeds max_requests inside one window
    - len(store) never exceeds max_store_size
    - Expired records are swept at most once per cleanup interval, lazily on a call
    - At capacity, a genuinely new key evicts the least-recently-accessed 25% (min 1)
    - No awaits inside: every call is atomic when made from the event loop
      thread (api/dependencies.enforce_rate_limit is async for this reason)

Design Decisions:
    - Process-local and best-effort: no cross-instance sharing, resets on restart
    - Clock injected (callable returning seconds) so tests control time
    - Owned by the application (app.state) and injected, never a module global
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_MAX_REQUESTS = 10
DEFAULT_MAX_STORE_SIZE = 1000
DEFAULT_CLEANUP_INTERVAL_SECONDS = 300.0
EVICTION_FRACTION = 0.25


@dataclass
class RateLimitRecord:
    """Per-client window state."""
    count: int
    reset_at: float
    last_access: float


class RateLimiter:
    """Bounded in-memory fixed-window limiter."""

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        max_store_size: int = DEFAULT_MAX_STORE_SIZE,
        cleanup_interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests < 1 or max_store_size < 1 or window_seconds <= 0:
            raise ValueError("rate limiter bounds must be positive")
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.max_store_size = max_store_size
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self._clock = clock
        self._store: dict[str, RateLimitRecord] = {}
        self.last_cleanup = clock()

    def is_rate_limited(self, client_id: str) -> bool:
        """Count one request for client_id; True if it must be rejected."""
        now = self._clock()
        self._cleanup_if_due(now)

        record = self._store.get(client_id)
        if record is None or now > record.reset_at:
            if record is None and len(self._store) >= self.max_store_size:
                self._evict_oldest()
            self._store[client_id] = RateLimitRecord(
                count=1, reset_at=now + self.window_seconds, last_access=now,
            )
            return False

        record.last_access = now
        if record.count < self.max_requests:
            record.count += 1
            return False
        return True

    def retry_after(self, client_id: str) -> int:
        """Whole seconds until client_id's current window resets (0 if none)."""
        record = self._store.get(client_id)
        if record is None:
            return 0
        return max(0, math.ceil(record.reset_at - self._clock()))

    def stats(self) -> dict:
        """Store statistics for monitoring."""
        return {
            "size": len(self._store),
            "max_size": self.max_store_size,
            "last_cleanup": self.last_cleanup,
        }

    def force_cleanup(self) -> None:
        """Sweep expired records now, regardless of the interval."""
        now = self._clock()
        self._cleanup(now)
        self.last_cleanup = now

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._store

    def _cleanup_if_due(self, now: float) -> None:
        if now - self.last_cleanup < self.cleanup_interval_seconds:
            return
        self._cleanup(now)
        self.last_cleanup = now

    def _cleanup(self, now: float) -> None:
        expired = [
            client_id for client_id, record in self._store.items()
            if now > record.reset_at + self.window_seconds
        ]
        for client_id in expired:
            del self._store[client_id]
        if expired:
            logger.debug(f"Rate limiter swept {len(expired)} expired records")

    def _evict_oldest(self) -> None:
        to_remove = max(1, int(len(self._store) * EVICTION_FRACTION))
        oldest = sorted(self._store.items(), key=lambda item: item[1].last_access)
        for client_id, _ in oldest[:to_remove]:
            del self._store[client_id]
        logger.info(
            f"Rate limiter at capacity, evicted {to_remove} records",
            extra={"outcome": "evicted"},
        )
