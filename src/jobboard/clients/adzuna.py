# src/jobboard/clients/adzuna.py

"""
Plain-function client for Adzuna's Jobs API.

- `adzuna_search` does one HTTP call and returns Adzuna's raw JSON (may raise).
- `search_adzuna` is what the search service calls: it never raises and
  returns normalized JobRecords wrapped in a ProviderResult.
"""

from __future__ import annotations
from typing import Dict, Optional
import logging

from jobboard.clients.base import get_json, guarded_search
from jobboard.config import Settings
from jobboard.models import SOURCE_ADZUNA, ProviderResult
from jobboard.pipeline.normalize import normalize_adzuna

logger = logging.getLogger(__name__)

# Adzuna caps results_per_page; 100 is the most we ask for in one go.
RESULTS_PER_PAGE = 100


# ---- Internal helpers ---------------------------------------------------------

def _base_url(country: str, page: int) -> str:
    """
    Build the Adzuna search URL for a country + page number.
    Adzuna paginates with integer pages: /search/1, /search/2, ...
    """
    return f"https://api.adzuna.com/v1/api/jobs/{country}/search/{page}"


# ---- Public API ----------------------------------------------------------------

def adzuna_search(
    app_id: str,
    app_key: str,
    query: str,
    *,
    where: Optional[str] = None,
    country: str = "us",
    page: int = 1,
    results_per_page: int = RESULTS_PER_PAGE,
    timeout: float = 8.0,
    attempts: int = 2,
) -> Dict:
    """
    Fetch ONE page of search results from Adzuna and return the raw JSON (dict).

    - query maps to Adzuna's `what`, location to `where`.
    - Raises httpx errors; callers that must not fail use `search_adzuna`.
    """
    params: Dict[str, str] = {
        "app_id": app_id,
        "app_key": app_key,
        "results_per_page": str(results_per_page),
    }
    if query:
        params["what"] = query
    if where:
        params["where"] = where

    return get_json(_base_url(country, page), params, timeout=timeout, attempts=attempts)


def search_adzuna(query: str, location: str, settings: Settings) -> ProviderResult:
    """
    Search Adzuna and normalize. Missing credentials -> empty result, no network.
    """
    if not settings.has_adzuna:
        logger.debug("adzuna credentials missing; skipping provider")
        return ProviderResult(source=SOURCE_ADZUNA)

    return guarded_search(
        SOURCE_ADZUNA,
        lambda: adzuna_search(
            settings.adzuna_app_id,
            settings.adzuna_app_key,
            query,
            where=location or None,
            country=settings.adzuna_country,
            timeout=settings.provider_timeout,
            attempts=settings.provider_retries,
        ),
        normalize_adzuna,
    )
