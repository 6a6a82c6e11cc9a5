# src/jobboard/models.py
"""
Lightweight typed containers for job search.

Job records stay plain dicts with type hints (a `TypedDict`), exactly as they
come out of normalization. The request/response side uses small dataclasses
because those need to be hashable or carry behavior.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, TypedDict

# Upper bound on any description we hand back to callers.
MAX_DESCRIPTION_CHARS = 2000

# Hard cap on results per page, whatever the caller asks for.
MAX_LIMIT = 200
DEFAULT_LIMIT = 50

SOURCE_ADZUNA = "adzuna"
SOURCE_JSEARCH = "jsearch"
SOURCE_CURATED = "curated"


class JobRecord(TypedDict, total=False):
    """
    One normalized job posting.

    Notes:
    - At runtime this is just a dict: {"id": "123", "title": "Welder", ...}.
    - `link` is the dedup key. Records without one never reach merge/ranking.
    - `curated` is sticky: once a record is merged with a curated row it stays curated.
    """

    # Provider id, or the link when the provider gives none
    id: str

    title: str
    company: str

    # Free-text display location ("San Francisco, CA")
    location: str

    # Plain text, at most MAX_DESCRIPTION_CHARS
    description: str

    # Canonical apply/detail URL
    link: str

    # "adzuna", "jsearch" or "curated"
    source: str

    # ISO-8601 timestamp
    published_at: str

    curated: bool

    # Free-form labels (curated store only)
    tags: List[str]


def utc_now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")


@dataclass
class ProviderResult:
    """
    What a provider client hands back: jobs on success, an empty list plus a
    short error string when anything went wrong. Clients never raise.
    """

    source: str
    jobs: List[JobRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def degraded(cls, source: str, error: str) -> "ProviderResult":
        return cls(source=source, jobs=[], error=error)


@dataclass(frozen=True)
class SearchParameters:
    query: str = ""
    location: str = ""
    strict: bool = False
    limit: int = DEFAULT_LIMIT
    page: int = 1
    radius: float = 0
    curated_only: bool = False

    @classmethod
    def build(
        cls,
        query: Optional[str] = "",
        location: Optional[str] = "",
        *,
        strict: bool = False,
        limit: Any = DEFAULT_LIMIT,
        page: Any = 1,
        radius: Any = 0,
        curated_only: bool = False,
    ) -> "SearchParameters":
        """
        Normalize raw request values: trim text, collapse whitespace,
        clamp limit to 1..MAX_LIMIT, page to >= 1, radius to >= 0.
        Junk numbers fall back to the defaults instead of raising.
        """
        return cls(
            query=" ".join(str(query or "").split()),
            location=" ".join(str(location or "").split()),
            strict=bool(strict),
            limit=max(1, min(MAX_LIMIT, _as_int(limit, DEFAULT_LIMIT))),
            page=max(1, _as_int(page, 1)),
            radius=max(0.0, _as_float(radius, 0.0)),
            curated_only=bool(curated_only),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchOutcome:
    """The response payload plus how the cache treated it (HIT / MISS / BYPASS)."""

    payload: Dict[str, Any]
    cache_status: str


def _as_int(value: Any, default: int) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
