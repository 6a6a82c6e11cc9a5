# src/jobboard/pipeline/merge.py
"""
Merge external and curated jobs into one list, deduplicated by link.

Rules when two records share a link:
- `curated` is OR-ed (once curated, always curated)
- `source` keeps the provider tag ("adzuna"/"jsearch") over "curated",
  so we still know where the listing was found
- non-empty curated metadata (title, company, ...) wins over provider text

Dedup is by exact link string only. Two providers pointing at the same job
through different tracking URLs stay two records; `find_near_duplicates`
exists to *report* those, not to merge them.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from rapidfuzz import fuzz

from jobboard.models import SOURCE_CURATED, JobRecord

# Fields where a curated row's value replaces the provider's.
CURATED_FIELDS = ("title", "company", "location", "description", "tags")


def merge_pair(existing: JobRecord, incoming: JobRecord) -> JobRecord:
    """Combine two records with the same link (returns a new dict)."""
    merged: JobRecord = dict(existing)  # type: ignore[assignment]
    if incoming.get("curated"):
        for key in CURATED_FIELDS:
            if incoming.get(key):
                merged[key] = incoming[key]  # type: ignore[literal-required]
    merged["curated"] = bool(existing.get("curated")) or bool(incoming.get("curated"))

    old_src = existing.get("source") or SOURCE_CURATED
    new_src = incoming.get("source") or SOURCE_CURATED
    merged["source"] = old_src if old_src != SOURCE_CURATED else new_src
    return merged


def merge_jobs(external: Iterable[JobRecord], curated: Iterable[JobRecord]) -> List[JobRecord]:
    """
    External records go in first, then curated ones merge on top.
    Output order = first time each link was seen.
    """
    by_link: Dict[str, JobRecord] = {}
    for job in list(external) + list(curated):
        link = job.get("link") or ""
        if not link:
            continue
        if link in by_link:
            by_link[link] = merge_pair(by_link[link], job)
        else:
            by_link[link] = dict(job)  # type: ignore[assignment]
    return list(by_link.values())


# simple normalizer to improve matching
def _key(job: JobRecord) -> str:
    title = (job.get("title") or "").lower().strip()
    if not title:
        return ""
    return f"{title} @ {(job.get('company') or '').lower().strip()}"


def find_near_duplicates(jobs: List[JobRecord], threshold: int = 92) -> List[Tuple[JobRecord, JobRecord, float]]:
    """
    Pairs of records with different links whose title + company look the same.
    Diagnostic only; merge_jobs never uses this.
    """
    keys = [_key(j) for j in jobs]
    out: List[Tuple[JobRecord, JobRecord, float]] = []
    for i in range(len(jobs)):
        for k in range(i + 1, len(jobs)):
            if not keys[i] or not keys[k] or jobs[i].get("link") == jobs[k].get("link"):
                continue
            score = fuzz.token_sort_ratio(keys[i], keys[k], score_cutoff=threshold)
            if score:
                out.append((jobs[i], jobs[k], score))
    return out
