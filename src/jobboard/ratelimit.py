# src/jobboard/ratelimit.py
"""
Sliding-window request counter per client.

On every check: drop timestamps older than the window, record this request,
and reject if the client is now over the limit. Rejected requests are
recorded too, so hammering doesn't shorten the wait.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Dict, List, Optional

from jobboard.errors import RateLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 60
DEFAULT_WINDOW = 60.0


def client_id_from(forwarded_for: Optional[str], remote_addr: Optional[str]) -> str:
    """First address of X-Forwarded-For, else the socket address."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return remote_addr or "unknown"


class RateLimiter:
    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window: float = DEFAULT_WINDOW,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def check(self, client_id: str) -> None:
        """Raises RateLimitExceeded when client_id is over the limit."""
        with self._lock:
            now = self._clock()
            cutoff = now - self.window
            hits = [t for t in self._hits.get(client_id, []) if t > cutoff]
            hits.append(now)
            self._hits[client_id] = hits
            self._prune(cutoff)

            if len(hits) > self.limit:
                # once this hit leaves the window the count is back at the limit
                freeing = hits[len(hits) - self.limit]
                retry_after = max(1, math.ceil(freeing + self.window - now))
                logger.info("rate limit hit for %s (%d in window)", client_id, len(hits))
                raise RateLimitExceeded(client_id, retry_after)

    def _prune(self, cutoff: float) -> None:
        # forget clients whose whole window has passed
        stale = [cid for cid, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for cid in stale:
            del self._hits[cid]

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
