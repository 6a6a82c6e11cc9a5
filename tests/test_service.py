import json
import time

import pytest
from conftest import make_job, static_provider

from jobboard.errors import RateLimitExceeded, SearchFailed
from jobboard.models import ProviderResult, SearchParameters

E2E_QUERY = 'welder OR "metal fabricator"'


def _e2e_service(build_service, calls=None):
    chicago = make_job(
        "https://adzuna.example/chicago",
        "Metal Fabricator",
        location="Chicago, IL",
        description="Metal fabricator for structural steel",
        source="adzuna",
    )
    nowhere = make_job(
        "https://jsearch.example/unknown",
        "Metal Fabricator",
        location="",
        description="Metal fabricator, all shifts",
        source="jsearch",
    )
    barista = make_job("https://adzuna.example/barista", "Barista", location="San Francisco, CA")
    curated_row = {
        "link": "https://curated.example/welder",
        "title": "Production Welder",
        "location": "Reno, NV",
        "description": "MIG welder for trailer frames",
        "visible": True,
    }
    hidden_row = {"link": "https://curated.example/hidden", "title": "Welder", "visible": False}
    return build_service(
        providers=[
            static_provider("jsearch", [nowhere], calls),
            static_provider("adzuna", [chicago, barista], calls),
        ],
        curated_rows=[curated_row, hidden_row],
    )


def test_end_to_end_curated_then_located_then_unlocated(build_service):
    service = _e2e_service(build_service)
    params = SearchParameters.build(E2E_QUERY, "San Francisco, CA")

    outcome = service.search(params, "client")

    links = [j["link"] for j in outcome.payload["jobs"]]
    assert links == [
        "https://curated.example/welder",
        "https://adzuna.example/chicago",
        "https://jsearch.example/unknown",
    ]
    assert outcome.payload["jobs"][0]["curated"] is True
    assert outcome.payload["original_count"] == 3
    assert outcome.payload["filtered"] == {"before": 3, "after": 2}
    assert outcome.payload["params"]["query"] == E2E_QUERY
    assert outcome.cache_status == "MISS"


def test_providers_get_query_and_location(build_service):
    calls = []
    service = _e2e_service(build_service, calls)

    service.search(SearchParameters.build("welder", "Austin"), "client")

    assert sorted(calls) == [("adzuna", "welder", "Austin"), ("jsearch", "welder", "Austin")]


def test_repeat_search_is_a_byte_identical_hit(build_service):
    calls = []
    service = _e2e_service(build_service, calls)
    params = SearchParameters.build(E2E_QUERY, "San Francisco, CA")

    first = service.search(params, "client")
    second = service.search(params, "client")

    assert (first.cache_status, second.cache_status) == ("MISS", "HIT")
    assert json.dumps(first.payload, sort_keys=True) == json.dumps(second.payload, sort_keys=True)
    assert len(calls) == 2  # providers hit once each


def test_bypass_never_reads_or_writes_cache(build_service):
    calls = []
    service = _e2e_service(build_service, calls)
    params = SearchParameters.build("welder", "")

    assert service.search(params, "c", bypass_cache=True).cache_status == "BYPASS"
    assert service.search(params, "c", bypass_cache=True).cache_status == "BYPASS"
    assert service.search(params, "c").cache_status == "MISS"
    assert service.search(params, "c", bypass_cache=True).cache_status == "BYPASS"
    assert service.search(params, "c").cache_status == "HIT"
    assert len(calls) == 2 * 4


def test_vocabulary_change_invalidates_cached_results(build_service, clock):
    calls = []
    service = _e2e_service(build_service, calls)
    params = SearchParameters.build("welder", "")

    service.search(params, "c")
    service.store.source_queries.append("boilermaker")
    clock.advance(service.settings.terms_refresh)

    assert service.search(params, "c").cache_status == "MISS"


def test_refresh_terms_flag_forces_vocabulary_reload(build_service):
    service = _e2e_service(build_service)
    params = SearchParameters.build("welder", "")
    service.search(params, "c")

    service.store.source_queries.append("boilermaker")
    outcome = service.search(params, "c", refresh_terms=True)

    assert outcome.cache_status == "MISS"
    assert "boilermaker" in service.relevance.terms


def test_rate_limit_runs_before_cache(build_service, clock):
    service = _e2e_service(build_service)
    params = SearchParameters.build("welder", "")

    for _ in range(60):
        service.search(params, "abuser")
    with pytest.raises(RateLimitExceeded):
        service.search(params, "abuser")

    clock.advance(61)
    assert service.search(params, "abuser").cache_status == "HIT"


def test_failing_provider_degrades_to_other_results(build_service):
    def broken(query, location, settings):
        raise RuntimeError("provider bug")

    ok = static_provider("adzuna", [make_job("https://a/1", "Welder")])
    service = build_service(providers=[("jsearch", broken), ok])

    outcome = service.search(SearchParameters.build("welder"), "c")

    assert [j["link"] for j in outcome.payload["jobs"]] == ["https://a/1"]
    assert outcome.payload["providers"] == {"jsearch": "degraded", "adzuna": "ok"}


def test_slow_provider_times_out(build_service, settings):
    def slow(query, location, settings):
        time.sleep(settings.provider_timeout * settings.provider_retries + 3)
        return ProviderResult(source="slow", jobs=[make_job("https://slow/1", "Welder")])

    fast = static_provider("adzuna", [make_job("https://a/1", "Welder")])
    service = build_service(providers=[("slow", slow), fast])

    started = time.monotonic()
    outcome = service.search(SearchParameters.build("welder"), "c")

    assert time.monotonic() - started < settings.provider_timeout * settings.provider_retries + 3
    assert [j["link"] for j in outcome.payload["jobs"]] == ["https://a/1"]


def test_curated_store_failure_degrades(build_service):
    class BrokenStore:
        def list_visible_jobs(self, limit):
            raise ConnectionError("db down")

        def list_active_source_queries(self):
            raise ConnectionError("db down")

    service = build_service(
        providers=[static_provider("adzuna", [make_job("https://a/1", "Welder")])],
        store=BrokenStore(),
    )

    outcome = service.search(SearchParameters.build("welder"), "c")

    assert [j["link"] for j in outcome.payload["jobs"]] == ["https://a/1"]
    assert outcome.payload["curated_count"] == 0


def test_curated_only_skips_providers(build_service):
    calls = []
    service = _e2e_service(build_service, calls)

    outcome = service.search(SearchParameters.build("welder", curated_only=True), "c")

    assert calls == []
    assert [j["source"] for j in outcome.payload["jobs"]] == ["curated"]


def test_curated_rows_must_match_query_unless_empty(build_service):
    rows = [
        {"link": "https://c/1", "title": "Welder"},
        {"link": "https://c/2", "title": "Ceramics Tech", "description": "kiln loading"},
    ]
    service = build_service(curated_rows=rows)

    kiln = service.search(SearchParameters.build("kiln"), "c")
    everything = service.search(SearchParameters.build(""), "c")

    assert [j["link"] for j in kiln.payload["jobs"]] == ["https://c/2"]
    assert len(everything.payload["jobs"]) == 2


def test_strict_search_only_returns_location_matches(build_service):
    jobs = [
        make_job("https://a/1", "Welder", location="San Francisco, CA"),
        make_job("https://a/2", "Welder", location="Chicago, IL"),
        make_job("https://a/3", "Welder", description="Shop near San Francisco, California"),
    ]
    rows = [{"link": "https://c/1", "title": "Welder", "location": "Reno, NV"}]
    service = build_service(providers=[static_provider("adzuna", jobs)], curated_rows=rows)

    outcome = service.search(SearchParameters.build("welder", "San Francisco, CA", strict=True), "c")

    assert [j["link"] for j in outcome.payload["jobs"]] == ["https://a/1", "https://a/3"]


def test_pipeline_fault_is_generic(build_service, monkeypatch):
    import jobboard.service as service_module

    service = _e2e_service(build_service)

    def explode(*args, **kwargs):
        raise ZeroDivisionError("secret internals")

    monkeypatch.setattr(service_module, "rank_jobs", explode)

    with pytest.raises(SearchFailed) as info:
        service.search(SearchParameters.build("welder"), "c")
    assert str(info.value) == "Search failed"


def test_paging_applies_after_ranking(build_service):
    jobs = [make_job(f"https://a/{i}", "Welder") for i in range(5)]
    rows = [{"link": "https://c/1", "title": "Welder"}]
    service = build_service(providers=[static_provider("adzuna", jobs)], curated_rows=rows)

    page1 = service.search(SearchParameters.build("welder", limit=2, page=1), "c")
    page2 = service.search(SearchParameters.build("welder", limit=2, page=2), "c")

    assert [j["link"] for j in page1.payload["jobs"]] == ["https://c/1", "https://a/0"]
    assert [j["link"] for j in page2.payload["jobs"]] == ["https://a/1", "https://a/2"]
    assert page1.payload["total_count"] == 6


def test_injected_cache_is_used_and_expires_after_ttl(build_service, clock, settings):
    from jobboard.cache import SearchCache

    cache = SearchCache(ttl=settings.cache_ttl, clock=clock)
    service = build_service(
        providers=[static_provider("adzuna", [make_job("https://a/1", "Welder")])],
        cache=cache,
    )
    params = SearchParameters.build("welder")

    assert service.cache is cache
    assert service.search(params, "c").cache_status == "MISS"
    assert len(cache) == 1

    clock.advance(settings.cache_ttl - 1)
    assert service.search(params, "c").cache_status == "HIT"

    clock.advance(1)
    assert service.search(params, "c").cache_status == "MISS"


def test_hit_echoes_the_callers_own_params(build_service):
    service = _e2e_service(build_service)

    service.search(SearchParameters.build("Welder", "Reno"), "c")
    outcome = service.search(SearchParameters.build("welder", "reno"), "c")

    assert outcome.cache_status == "HIT"
    assert outcome.payload["params"]["query"] == "welder"
    assert outcome.payload["params"]["location"] == "reno"
