# src/jobboard/clients/jsearch.py

"""
Client for JSearch (RapidAPI), a broad web job-search API.

Same split as the Adzuna client: `jsearch_search` returns raw JSON and may
raise, `search_jsearch` never raises.
"""

from __future__ import annotations
from typing import Dict, Optional
import logging

from jobboard.clients.base import get_json, guarded_search
from jobboard.config import Settings
from jobboard.models import SOURCE_JSEARCH, ProviderResult
from jobboard.pipeline.normalize import normalize_jsearch

logger = logging.getLogger(__name__)


def jsearch_search(
    api_key: str,
    query: str,
    *,
    location: Optional[str] = None,
    host: str = "jsearch.p.rapidapi.com",
    page: int = 1,
    num_pages: int = 1,
    timeout: float = 8.0,
    attempts: int = 2,
) -> Dict:
    """Fetch one page from JSearch's /search endpoint (raw JSON, may raise)."""
    params: Dict[str, str] = {"page": str(page), "num_pages": str(num_pages)}
    if query:
        params["query"] = query
    if location:
        params["location"] = location

    headers = {"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": host}
    return get_json(f"https://{host}/search", params, headers=headers, timeout=timeout, attempts=attempts)


def search_jsearch(query: str, location: str, settings: Settings) -> ProviderResult:
    if not settings.has_jsearch:
        logger.debug("RAPIDAPI_KEY missing; skipping jsearch")
        return ProviderResult(source=SOURCE_JSEARCH)

    return guarded_search(
        SOURCE_JSEARCH,
        lambda: jsearch_search(
            settings.rapidapi_key,
            query,
            location=location or None,
            host=settings.rapidapi_host,
            timeout=settings.provider_timeout,
            attempts=settings.provider_retries,
        ),
        normalize_jsearch,
    )
