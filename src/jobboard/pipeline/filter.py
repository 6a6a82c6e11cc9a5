# src/jobboard/pipeline/filter.py
from typing import Iterable, List

from jobboard.models import JobRecord
from jobboard.pipeline.query import QueryTokens


def with_link(jobs: Iterable[JobRecord]) -> List[JobRecord]:
    """
    Keep only jobs that have a 'link'. No link means no dedup key, so the
    record can't take part in merge or ranking.
    """
    out: List[JobRecord] = []
    for j in jobs:
        if not (j.get("link") or "").strip():
            continue
        out.append(j)
    return out


def matching_query(jobs: Iterable[JobRecord], tokens: QueryTokens) -> List[JobRecord]:
    """
    Keep jobs whose title + description satisfy the parsed query.
    An empty query keeps everything.
    """
    if tokens.empty:
        return list(jobs)
    return [
        j for j in jobs
        if tokens.matches(f"{j.get('title') or ''} {j.get('description') or ''}")
    ]
