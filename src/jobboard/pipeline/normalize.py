# src/jobboard/pipeline/normalize.py
"""
Convert raw provider responses into our standardized JobRecord dicts.

Each provider nests things differently (Adzuna puts the company under
company.display_name, JSearch flattens everything with a job_ prefix).
This module flattens both into the same shape and bounds the description.
"""
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from jobboard.models import (
    MAX_DESCRIPTION_CHARS,
    SOURCE_ADZUNA,
    SOURCE_JSEARCH,
    JobRecord,
    utc_now_iso,
)

# JSearch highlight sections we fold into the description, in this order.
HIGHLIGHT_KEYS = ("Qualifications", "Responsibilities", "Benefits")


def normalize_whitespace(text: Optional[str]) -> str:
    return " ".join(str(text or "").split())


def strip_html(text: Optional[str]) -> str:
    """Provider HTML to plain text: tags dropped, entities decoded, spaces collapsed."""
    if not text:
        return ""
    return normalize_whitespace(BeautifulSoup(str(text), "html.parser").get_text(" ", strip=True))


def truncate(text: Optional[str], limit: int = MAX_DESCRIPTION_CHARS) -> str:
    return str(text or "")[:limit]


def _published(raw) -> str:
    # Adzuna: "2025-09-26T07:20:13Z"; JSearch: same, or missing entirely
    if not raw:
        return utc_now_iso()
    return str(raw)


def normalize_adzuna(results_json: Dict) -> List[JobRecord]:
    """
    Transform an Adzuna search response into JobRecords.

    Jobs without a redirect_url are skipped: without a link we can't dedup
    or send anyone anywhere.
    """
    out: List[JobRecord] = []
    results = results_json.get("results") if isinstance(results_json, dict) else None
    if not isinstance(results, list):
        return out

    for x in results:
        if not isinstance(x, dict):
            continue
        link = x.get("redirect_url") or x.get("apply_url") or ""
        if not link:
            continue
        out.append({
            # Adzuna ids are numeric; fall back to the link when missing
            "id": str(x.get("id") or link),
            "title": normalize_whitespace(x.get("title")),
            # company/location both live under .display_name
            "company": normalize_whitespace((x.get("company") or {}).get("display_name")),
            "location": normalize_whitespace((x.get("location") or {}).get("display_name")),
            "description": truncate(strip_html(x.get("description"))),
            "link": link,
            "source": SOURCE_ADZUNA,
            "published_at": _published(x.get("created")),
            "curated": False,
        })
    return out


def jsearch_snippet(job: Dict) -> str:
    """
    Collapse JSearch's job_highlights into one line:
    up to three bullets per section joined with " • ", sections joined with " | ".
    Falls back to the full job_description when there are no highlights.
    """
    highlights = job.get("job_highlights") or {}
    blocks: List[str] = []
    if isinstance(highlights, dict):
        for key in HIGHLIGHT_KEYS:
            items = highlights.get(key)
            if isinstance(items, list) and items:
                blocks.append(" • ".join(normalize_whitespace(i) for i in items[:3]))
    snippet = " | ".join(b for b in blocks if b)
    return truncate(snippet or strip_html(job.get("job_description")))


def normalize_jsearch(results_json: Dict) -> List[JobRecord]:
    """Transform a JSearch (RapidAPI) response into JobRecords."""
    out: List[JobRecord] = []
    items = results_json.get("data") if isinstance(results_json, dict) else None
    if not isinstance(items, list):
        return out

    for j in items:
        if not isinstance(j, dict):
            continue
        link = j.get("job_apply_link") or j.get("job_google_link") or ""
        if not link:
            continue
        out.append({
            "id": str(j.get("job_id") or link),
            "title": normalize_whitespace(j.get("job_title")),
            "company": normalize_whitespace(j.get("employer_name")),
            "location": normalize_whitespace(j.get("job_city") or j.get("job_location")),
            "description": jsearch_snippet(j),
            "link": link,
            "source": SOURCE_JSEARCH,
            "published_at": _published(j.get("job_posted_at_datetime_utc")),
            "curated": False,
        })
    return out


def normalize_curated(row: Dict) -> Optional[JobRecord]:
    """
    Turn one curated-store row into a JobRecord (curated=True).
    Returns None for rows without a link.
    """
    link = normalize_whitespace(row.get("link") or row.get("url"))
    if not link:
        return None
    tags = row.get("tags") or []
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",") if t.strip()]
    return {
        "id": str(row.get("id") or link),
        "title": normalize_whitespace(row.get("title")),
        "company": normalize_whitespace(row.get("company")),
        "location": normalize_whitespace(row.get("location")),
        "description": truncate(strip_html(row.get("description"))),
        "link": link,
        "source": normalize_whitespace(row.get("source")).lower() or "curated",
        "published_at": _published(row.get("published_at")),
        "curated": True,
        "tags": list(tags),
    }
