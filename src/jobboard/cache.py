# src/jobboard/cache.py
"""
Process-local TTL cache for search payloads.

Entries expire lazily: a lookup that finds an old entry deletes it and
reports a miss. Nothing sweeps in the background.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from jobboard.models import SearchParameters

logger = logging.getLogger(__name__)

HIT = "HIT"
MISS = "MISS"
BYPASS = "BYPASS"

DEFAULT_TTL = 24 * 60 * 60


@dataclass
class CacheEntry:
    key: str
    timestamp: float
    payload: Dict[str, Any]


def cache_key(params: SearchParameters, generation: int) -> str:
    """
    Every normalized parameter plus the vocabulary generation, so a change in
    the relevance terms starts a fresh set of keys.
    """
    return "|".join([
        params.query.casefold(),
        params.location.casefold(),
        "strict:1" if params.strict else "strict:0",
        f"limit:{params.limit}",
        f"page:{params.page}",
        f"radius:{params.radius:g}",
        "curated:1" if params.curated_only else "curated:0",
        f"terms:{generation}",
    ])


class SearchCache:
    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        *,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp >= self.ttl:
                del self._entries[key]
                logger.debug("cache entry expired: %s", key)
                return None
            return copy.deepcopy(entry.payload)

    def set(self, key: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                # dicts keep insertion order; drop the oldest
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = CacheEntry(key=key, timestamp=self._clock(), payload=copy.deepcopy(payload))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
