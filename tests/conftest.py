from __future__ import annotations

import pytest

from jobboard.cache import SearchCache
from jobboard.config import Settings
from jobboard.io.curated import InMemoryCuratedStore
from jobboard.models import ProviderResult
from jobboard.pipeline.relevance import RelevanceFilter
from jobboard.ratelimit import RateLimiter
from jobboard.service import SearchService


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_job(link: str, title: str = "", **fields):
    job = {
        "id": fields.pop("id", link),
        "title": title,
        "company": "",
        "location": "",
        "description": "",
        "link": link,
        "source": "adzuna",
        "published_at": "2025-01-01T00:00:00+00:00",
        "curated": False,
    }
    job.update(fields)
    return job


def static_provider(name, jobs, calls=None):
    def search(query, location, settings):
        if calls is not None:
            calls.append((name, query, location))
        return ProviderResult(source=name, jobs=[dict(j) for j in jobs])

    return (name, search)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(provider_timeout=2.0, provider_retries=1)


@pytest.fixture
def build_service(settings, clock):
    """Factory: SearchService with fake providers, in-memory store and the fake clock."""

    def _build(providers=(), curated_rows=(), source_queries=(), **overrides):
        store = overrides.get("store")
        if store is None:
            store = InMemoryCuratedStore(curated_rows, source_queries)
        cache = overrides.get("cache")
        if cache is None:
            cache = SearchCache(ttl=settings.cache_ttl, clock=clock)
        limiter = overrides.get("limiter")
        if limiter is None:
            limiter = RateLimiter(settings.rate_limit, settings.rate_window, clock=clock)
        relevance = overrides.get("relevance")
        if relevance is None:
            relevance = RelevanceFilter(
                store.list_active_source_queries, refresh_seconds=settings.terms_refresh, clock=clock
            )
        return SearchService(
            settings,
            store,
            providers=list(providers),
            cache=cache,
            limiter=limiter,
            relevance=relevance,
        )

    return _build
