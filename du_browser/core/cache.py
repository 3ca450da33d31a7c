"""Time-bounded cache of computed directory reports."""

import logging
import threading
from collections import deque
from typing import Deque, Dict, Optional, Tuple

from .clock import RealClock
from .models import Report


class PathCache:
    """Maps absolute directory paths to their most recently computed report.

    Every record expires ``ttl_seconds`` after insertion, independently of
    other records. Safe for concurrent use from request threads.
    """

    def __init__(self, ttl_seconds: float = 30.0, clock=None):
        """Initialize path cache.

        Args:
            ttl_seconds: Lifetime of each record, in seconds.
            clock: Time source with a ``now()`` method. Defaults to RealClock.
        """
        self.ttl_seconds = ttl_seconds
        self.clock = clock or RealClock()
        self._records: Dict[str, Tuple[float, Report]] = {}
        # (expires_at, key) in insertion order; one TTL keeps it sorted by expiry
        self._expiry: Deque[Tuple[float, str]] = deque()
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def get(self, key: str) -> Optional[Report]:
        """Return the cached report for ``key`` or None if absent or expired."""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            expires_at, report = record
            if self.clock.now() >= expires_at:
                del self._records[key]
                return None
            return report

    def set(self, key: str, report: Report) -> None:
        """Store ``report`` under ``key``, replacing any previous record."""
        with self._lock:
            now = self.clock.now()
            self._purge_expired(now)
            expires_at = now + self.ttl_seconds
            self._records[key] = (expires_at, report)
            self._expiry.append((expires_at, key))

    def _purge_expired(self, now: float) -> None:
        evicted = 0
        while self._expiry and now >= self._expiry[0][0]:
            expires_at, key = self._expiry.popleft()
            record = self._records.get(key)
            # A later set of the same key leaves a stale marker behind
            if record is not None and record[0] == expires_at:
                del self._records[key]
                evicted += 1
        if evicted:
            self.logger.debug(f"Evicted {evicted} expired cache records")

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
