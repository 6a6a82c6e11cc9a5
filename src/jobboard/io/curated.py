# src/jobboard/io/curated.py
"""
The curated-jobs boundary.

Persistence lives elsewhere; the search service only needs two reads.
Implementations should not raise, but the service guards them anyway.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol

from jobboard.models import JobRecord
from jobboard.pipeline.normalize import normalize_curated

logger = logging.getLogger(__name__)


class CuratedStore(Protocol):
    def list_visible_jobs(self, limit: int) -> List[JobRecord]:
        ...

    def list_active_source_queries(self) -> List[str]:
        ...


def rows_to_jobs(rows: Iterable[Dict], limit: int) -> List[JobRecord]:
    """Normalize visible rows, newest first, capped at limit."""
    jobs: List[JobRecord] = []
    for row in rows:
        job = normalize_curated(row)
        if job is not None:
            jobs.append(job)
    jobs.sort(key=lambda j: j.get("published_at") or "", reverse=True)
    return jobs[:limit]


class InMemoryCuratedStore:
    """Curated rows kept in a list. Handy for tests and local runs without Sheets."""

    def __init__(self, rows: Optional[Iterable[Dict]] = None, source_queries: Optional[Iterable[str]] = None):
        self.rows: List[Dict] = list(rows or [])
        self.source_queries: List[str] = list(source_queries or [])

    def list_visible_jobs(self, limit: int) -> List[JobRecord]:
        visible = [r for r in self.rows if r.get("visible", True)]
        return rows_to_jobs(visible, limit)

    def list_active_source_queries(self) -> List[str]:
        return list(self.source_queries)
