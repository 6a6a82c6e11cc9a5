# src/jobboard/pipeline/rank.py
"""
Order merged jobs for display.

Non-strict (default): soft score, highest first.
    +3    location phrase found (location + description)
    +1    per location token found
    +100  curated (always above any non-curated job)
Equal scores: a job that states some location goes before one that states
none; otherwise the incoming order is kept (sorted() is stable).

Strict: drop jobs that don't match the location, keep the incoming order.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from jobboard.models import MAX_LIMIT, JobRecord
from jobboard.pipeline.location import (
    Location,
    contains_phrase,
    location_haystack,
    matches_location,
    matching_tokens,
)

PHRASE_POINTS = 3
TOKEN_POINTS = 1
CURATED_POINTS = 100


def location_score(job: JobRecord, loc: Location) -> int:
    if loc.empty:
        return 0
    hay = location_haystack(job)
    score = PHRASE_POINTS if contains_phrase(hay, loc) else 0
    return score + TOKEN_POINTS * matching_tokens(hay, loc)


def score_job(job: JobRecord, loc: Location) -> int:
    return location_score(job, loc) + (CURATED_POINTS if job.get("curated") else 0)


def rank_jobs(jobs: Sequence[JobRecord], loc: Location, *, strict: bool = False) -> List[JobRecord]:
    if strict:
        if loc.empty:
            return list(jobs)
        return [j for j in jobs if matches_location(location_haystack(j), loc)]

    def sort_key(job: JobRecord) -> Tuple[int, int]:
        has_location = 1 if (job.get("location") or "").strip() else 0
        return score_job(job, loc), has_location

    return sorted(jobs, key=sort_key, reverse=True)


def paginate(jobs: Sequence[JobRecord], limit: int, page: int = 1) -> List[JobRecord]:
    """Slice one page after ranking. limit is capped at MAX_LIMIT."""
    size = max(1, min(limit, MAX_LIMIT))
    start = (max(1, page) - 1) * size
    return list(jobs[start:start + size])
