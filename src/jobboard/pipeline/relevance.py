# src/jobboard/pipeline/relevance.py
"""
Domain relevance filter: keep fabrication / maker-trade jobs, drop the rest.

Scoring (per record, haystack = title + description + company):
- multi-word term found as a substring        -> +2
- single-word term found on a word boundary   -> +1
  (plurals like "welders" count, and so do pieces of compound tokens
  like "cnc-machinist")
- keep if score > 0, unless a negative term matches and score < 2

The vocabulary is the static list plus terms pulled from the active source
queries. Every change to it bumps `generation`, which callers fold into
cache keys so stale results age out on their own.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Callable, FrozenSet, Iterable, List, Optional, Tuple

from jobboard.models import JobRecord
from jobboard.pipeline.query import tokenize_query

logger = logging.getLogger(__name__)

DEFAULT_TERMS: Tuple[str, ...] = (
    "welder", "welding", "fabricator", "fabrication", "cnc", "machinist",
    "model maker", "prototype", "composite", "additive", "3d printing",
    "woodworker", "metal shop", "shop manager", "ceramic", "kiln",
    "millwright", "sheet metal", "metalworker", "blacksmith", "toolmaker",
)

# Occupations that keep showing up for maker-ish queries but aren't the trade.
NEGATIVE_TERMS: Tuple[str, ...] = (
    "nurse", "nursing", "cashier", "barista", "bartender", "server",
    "dishwasher", "housekeeper", "caregiver", "pharmacist", "dental",
    "receptionist", "call center", "retail associate", "delivery driver",
)

# Words from source queries that never make useful vocabulary.
_STOPWORDS = frozenset({"and", "the", "for", "with", "job", "jobs", "near", "remote"})

_WORD_RE = re.compile(r"[a-z0-9][a-z0-9\-/+.]*")

REFRESH_SECONDS = 120.0


def _haystack(job: JobRecord) -> str:
    return f"{job.get('title') or ''} {job.get('description') or ''} {job.get('company') or ''}".casefold()


def _words(haystack: str) -> List[str]:
    return [w.strip(".-/+") for w in _WORD_RE.findall(haystack)]


def _word_matches(term: str, word: str) -> bool:
    if word == term or word in (term + "s", term + "es"):
        return True
    # compound / hyphenated tokens: "cnc-machinist", "welder/fabricator"
    if any(sep in word for sep in "-/"):
        return term in word
    return False


def term_matches(term: str, haystack: str, words: Optional[List[str]] = None) -> bool:
    if " " in term:
        return term in haystack
    return any(_word_matches(term, w) for w in (words if words is not None else _words(haystack)))


def derive_terms(queries: Iterable[str]) -> FrozenSet[str]:
    """Turn source queries like 'welder OR "metal fabricator"' into vocabulary terms."""
    terms = set()
    for q in queries:
        for token in tokenize_query(q).all_tokens():
            if len(token) >= 3 and token not in _STOPWORDS:
                terms.add(token)
    return frozenset(terms)


class RelevanceFilter:
    """
    Holds the current vocabulary and filters job lists against it.

    `source_queries` is called on refresh; if it raises, the vocabulary falls
    back to the static terms. Thread-safe.
    """

    def __init__(
        self,
        source_queries: Optional[Callable[[], Iterable[str]]] = None,
        *,
        static_terms: Iterable[str] = DEFAULT_TERMS,
        negative_terms: Iterable[str] = NEGATIVE_TERMS,
        refresh_seconds: float = REFRESH_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._source_queries = source_queries
        self.static_terms = frozenset(t.casefold() for t in static_terms)
        self.negative_terms = frozenset(t.casefold() for t in negative_terms)
        self.refresh_seconds = refresh_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._terms: FrozenSet[str] = self.static_terms
        self._last_refresh: Optional[float] = None
        self.generation = 0

    @property
    def terms(self) -> FrozenSet[str]:
        return self._terms

    def refresh(self, force: bool = False) -> int:
        """
        Rebuild the vocabulary if the refresh window elapsed (or force=True).
        Returns the current generation. Never raises.

        The source queries are read outside the lock; callers that arrive
        while a read is in flight keep the current vocabulary.
        """
        with self._lock:
            now = self._clock()
            due = self._last_refresh is None or now - self._last_refresh >= self.refresh_seconds
            if not (force or due):
                return self.generation
            # claim this window so concurrent callers don't read too
            self._last_refresh = now

        dynamic: FrozenSet[str] = frozenset()
        if self._source_queries is not None:
            try:
                dynamic = derive_terms(self._source_queries())
            except Exception:
                logger.warning("source query refresh failed; using static terms only", exc_info=True)

        with self._lock:
            terms = self.static_terms | dynamic
            if terms != self._terms:
                self._terms = terms
                self.generation += 1
                logger.info("relevance vocabulary now %d terms (generation %d)", len(terms), self.generation)
            return self.generation

    def score(self, job: JobRecord) -> Tuple[int, bool]:
        """(positive score, whether a negative term matched)"""
        hay = _haystack(job)
        words = _words(hay)
        positive = 0
        for term in self._terms:
            if term_matches(term, hay, words):
                positive += 2 if " " in term else 1
        negative = any(term_matches(t, hay, words) for t in self.negative_terms)
        return positive, negative

    def keep(self, job: JobRecord) -> bool:
        positive, negative = self.score(job)
        if positive <= 0:
            return False
        # negatives only knock out weak matches
        return not (negative and positive < 2)

    def filter(self, jobs: Iterable[JobRecord]) -> List[JobRecord]:
        return [j for j in jobs if self.keep(j)]
