# src/jobboard/service.py
"""
SearchService: the whole search pipeline behind one call.

    rate limit -> vocabulary refresh -> cache lookup
      -> providers + curated read (concurrently)
      -> relevance filter -> query filter (curated) -> merge -> rank -> page
      -> cache store

Build one per process and hand it to whatever serves requests. Cache,
limiter, relevance filter, providers and store are all injectable.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from jobboard.cache import BYPASS, HIT, MISS, SearchCache, cache_key
from jobboard.clients.adzuna import search_adzuna
from jobboard.clients.jsearch import search_jsearch
from jobboard.config import Settings
from jobboard.errors import SearchFailed
from jobboard.io.curated import CuratedStore
from jobboard.models import JobRecord, ProviderResult, SearchOutcome, SearchParameters
from jobboard.pipeline.filter import matching_query, with_link
from jobboard.pipeline.location import normalize_location
from jobboard.pipeline.merge import merge_jobs
from jobboard.pipeline.query import tokenize_query
from jobboard.pipeline.rank import paginate, rank_jobs
from jobboard.pipeline.relevance import RelevanceFilter
from jobboard.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

# (source name, search function); order here is the merge order
Provider = Tuple[str, Callable[[str, str, Settings], ProviderResult]]

DEFAULT_PROVIDERS: Sequence[Provider] = (
    ("adzuna", search_adzuna),
    ("jsearch", search_jsearch),
)


def _remaining(ends_at: float) -> float:
    return max(0.0, ends_at - time.monotonic())


class SearchService:
    def __init__(
        self,
        settings: Settings,
        store: CuratedStore,
        *,
        providers: Optional[Sequence[Provider]] = None,
        cache: Optional[SearchCache] = None,
        limiter: Optional[RateLimiter] = None,
        relevance: Optional[RelevanceFilter] = None,
    ):
        self.settings = settings
        self.store = store
        self.providers = list(DEFAULT_PROVIDERS if providers is None else providers)
        self.cache = cache if cache is not None else SearchCache(ttl=settings.cache_ttl)
        self.limiter = limiter if limiter is not None else RateLimiter(settings.rate_limit, settings.rate_window)
        if relevance is None:
            relevance = RelevanceFilter(store.list_active_source_queries, refresh_seconds=settings.terms_refresh)
        self.relevance = relevance

    # ---- public ----------------------------------------------------------------

    def search(
        self,
        params: SearchParameters,
        client_id: str,
        *,
        bypass_cache: bool = False,
        refresh_terms: bool = False,
    ) -> SearchOutcome:
        """
        Run one search. Raises RateLimitExceeded before doing any work when
        the client is over its budget, and SearchFailed for pipeline faults.
        Provider and curated-store failures only shrink the result.
        """
        self.limiter.check(client_id)

        generation = self.relevance.refresh(force=refresh_terms)
        key = cache_key(params, generation)

        if not bypass_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("cache hit: %s", key)
                # key is case-insensitive; echo this request's own params
                cached["params"] = params.as_dict()
                return SearchOutcome(payload=cached, cache_status=HIT)

        external, curated = self._gather(params)
        try:
            payload = self._build_payload(params, external, curated, generation)
        except Exception as e:
            logger.exception("search pipeline failed")
            raise SearchFailed() from e

        if bypass_cache:
            return SearchOutcome(payload=payload, cache_status=BYPASS)
        self.cache.set(key, payload)
        return SearchOutcome(payload=payload, cache_status=MISS)

    # ---- internals -------------------------------------------------------------

    def _read_curated(self) -> List[JobRecord]:
        try:
            return self.store.list_visible_jobs(self.settings.curated_read_limit)
        except Exception:
            logger.warning("curated store read failed; continuing without curated jobs", exc_info=True)
            return []

    def _gather(self, params: SearchParameters) -> Tuple[List[ProviderResult], List[JobRecord]]:
        """Call every provider and the curated store at once; wait for all."""
        providers = [] if params.curated_only else self.providers
        # per-call timeout plus retry backoff headroom
        deadline = self.settings.provider_timeout * self.settings.provider_retries + 2

        ends_at = time.monotonic() + deadline
        pool = ThreadPoolExecutor(max_workers=len(providers) + 1, thread_name_prefix="jobsearch")
        try:
            curated_future = pool.submit(self._read_curated)
            futures = [
                (name, pool.submit(fn, params.query, params.location, self.settings))
                for name, fn in providers
            ]

            results: List[ProviderResult] = []
            for name, future in futures:
                try:
                    results.append(future.result(timeout=_remaining(ends_at)))
                except FutureTimeout:
                    logger.warning("%s did not answer within %.0fs", name, deadline)
                    results.append(ProviderResult.degraded(name, "timeout"))
                except Exception:
                    logger.warning("%s raised; treating as empty", name, exc_info=True)
                    results.append(ProviderResult.degraded(name, "error"))

            try:
                curated = curated_future.result(timeout=_remaining(ends_at))
            except FutureTimeout:
                logger.warning("curated store did not answer within %.0fs", deadline)
                curated = []
        finally:
            # don't block the response on a straggler
            pool.shutdown(wait=False, cancel_futures=True)
        return results, curated

    def _build_payload(
        self,
        params: SearchParameters,
        results: List[ProviderResult],
        curated: List[JobRecord],
        generation: int,
    ) -> Dict[str, Any]:
        external = with_link(j for r in results for j in r.jobs)
        relevant = self.relevance.filter(external)

        tokens = tokenize_query(params.query)
        curated_hits = matching_query(with_link(curated), tokens)

        merged = merge_jobs(relevant, curated_hits)
        ranked = rank_jobs(merged, normalize_location(params.location), strict=params.strict)
        page = paginate(ranked, params.limit, params.page)

        return {
            "jobs": page,
            "total_count": len(ranked),
            "original_count": len(external),
            "filtered": {"before": len(external), "after": len(relevant)},
            "curated_count": len(curated_hits),
            "providers": {r.source: ("ok" if r.ok else "degraded") for r in results},
            "params": params.as_dict(),
            "terms_generation": generation,
        }
