# src/jobboard/clients/base.py

"""
Shared HTTP plumbing for the provider clients.

Design goals:
- Keep *all* HTTP details (timeouts, retries, headers) in one place.
- Bounded: a slow provider costs at most `attempts * timeout` plus a short backoff.
- The provider modules turn any exception from here into an empty ProviderResult.
"""

from __future__ import annotations
from typing import Callable, Dict, Optional
import logging

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from jobboard.models import JobRecord, ProviderResult

logger = logging.getLogger(__name__)


def default_headers() -> Dict[str, str]:
    return {"User-Agent": "jobboard/0.1 (+https://example.com)", "Accept": "application/json"}


def _is_transient(exc: BaseException) -> bool:
    # Network hiccups and 5xx/429 are worth one more try; 4xx auth errors are not.
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code == 429 or code >= 500
    return isinstance(exc, httpx.TransportError)


@retry(
    wait=wait_exponential(multiplier=0.25, min=0.25, max=2),
    stop=stop_after_attempt(2),
    retry=retry_if_exception(_is_transient),
    reraise=True,
)
def _get_json(url: str, params: Dict[str, str], headers: Dict[str, str], timeout: float) -> Dict:
    with httpx.Client(timeout=timeout, headers=headers) as client:
        resp = client.get(url, params=params)
        resp.raise_for_status()  # raises httpx.HTTPStatusError for 4xx/5xx
        return resp.json()


def get_json(
    url: str,
    params: Dict[str, str],
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 8.0,
    attempts: int = 2,
) -> Dict:
    """
    One GET with a hard timeout and up to `attempts` tries on transient errors.
    Raises whatever the last attempt raised.
    """
    fetch = _get_json.retry_with(stop=stop_after_attempt(max(1, attempts)))
    return fetch(url, params, {**default_headers(), **(headers or {})}, timeout)


def guarded_search(
    source: str,
    fetch: Callable[[], Dict],
    normalize: Callable[[Dict], list[JobRecord]],
) -> ProviderResult:
    """
    Run fetch -> normalize and convert every failure into a degraded result.
    Error strings stay short and never include credentials or full URLs.
    """
    try:
        raw = fetch()
    except httpx.HTTPStatusError as e:
        logger.warning("%s search failed: HTTP %s", source, e.response.status_code)
        return ProviderResult.degraded(source, f"HTTP {e.response.status_code}")
    except httpx.TimeoutException:
        logger.warning("%s search timed out", source)
        return ProviderResult.degraded(source, "timeout")
    except httpx.HTTPError as e:
        logger.warning("%s search failed: %s", source, type(e).__name__)
        return ProviderResult.degraded(source, type(e).__name__)
    except ValueError:
        # resp.json() on a non-JSON body
        logger.warning("%s returned a non-JSON payload", source)
        return ProviderResult.degraded(source, "malformed payload")

    try:
        jobs = normalize(raw)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning("%s payload could not be normalized: %s", source, e)
        return ProviderResult.degraded(source, "malformed payload")

    logger.info("%s returned %d jobs", source, len(jobs))
    return ProviderResult(source=source, jobs=jobs)
