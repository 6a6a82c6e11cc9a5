# src/jobboard/api.py
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

from jobboard.config import Settings, get_settings
from jobboard.errors import RateLimitExceeded, SearchFailed
from jobboard.io.curated import InMemoryCuratedStore
from jobboard.io.sheets import SheetsCuratedStore
from jobboard.models import SearchParameters
from jobboard.ratelimit import client_id_from
from jobboard.service import SearchService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}


def build_service(settings: Settings) -> SearchService:
    """One SearchService per process; Sheets-backed when a sheet id is configured."""
    if settings.sheet_id:
        store = SheetsCuratedStore(settings.sheet_id, settings.service_account_file)
    else:
        logger.warning("JOBBOARD_SHEET_ID not set; curated jobs disabled")
        store = InMemoryCuratedStore()
    return SearchService(settings, store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the search service on startup unless one was injected (tests)."""
    if getattr(app.state, "service", None) is None:
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level)
        logger.info("Initializing search service...")
        app.state.service = build_service(settings)
    yield
    logger.info("Shutting down search service")


app = FastAPI(
    title="Job Board Search",
    description="Aggregated job search across Adzuna, JSearch and curated listings.",
    version="0.1.0",
    lifespan=lifespan,
)


def get_service(request: Request) -> SearchService:
    return request.app.state.service


def _flag(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in _TRUE


def _client_id(request: Request) -> str:
    remote = request.client.host if request.client else None
    return client_id_from(request.headers.get("x-forwarded-for"), remote)


def _params(request: Request) -> SearchParameters:
    qp = request.query_params
    return SearchParameters.build(
        qp.get("query", qp.get("q", "")),
        qp.get("location", qp.get("loc", "")),
        strict=_flag(qp.get("strict")),
        limit=qp.get("limit", 50),
        page=qp.get("page", 1),
        radius=qp.get("radius", 0),
        curated_only=_flag(qp.get("curated_only")),
    )


@app.get("/api/jobs/search", tags=["Search"], summary="Search jobs across providers and curated listings")
def search_jobs(request: Request, service: SearchService = Depends(get_service)):
    """
    Query params: query|q, location|loc, strict, limit (<=200), page, radius,
    curated_only, nocache, refresh_terms.

    The cache status is returned both in the body ("cache") and as X-Cache.
    """
    qp = request.query_params
    try:
        outcome = service.search(
            _params(request),
            _client_id(request),
            bypass_cache=_flag(qp.get("nocache")),
            refresh_terms=_flag(qp.get("refresh_terms")),
        )
    except RateLimitExceeded as e:
        return JSONResponse(
            status_code=429,
            content={"error": "Too many requests", "retry_after": e.retry_after},
            headers={"Retry-After": str(e.retry_after)},
        )
    except SearchFailed:
        return JSONResponse(status_code=500, content={"error": "Search failed"})
    except Exception:
        logger.exception("unexpected search error")
        return JSONResponse(status_code=500, content={"error": "Search failed"})

    return JSONResponse(
        content={**outcome.payload, "cache": outcome.cache_status},
        headers={"X-Cache": outcome.cache_status},
    )


@app.get("/api/debug/search-check", tags=["Debug"])
def search_check(request: Request, service: SearchService = Depends(get_service)):
    """Run one search and report cache status and timing instead of the jobs."""
    params = _params(request)
    started = time.monotonic()
    try:
        outcome = service.search(params, _client_id(request))
    except RateLimitExceeded as e:
        return JSONResponse(
            status_code=429,
            content={"error": "Too many requests", "retry_after": e.retry_after},
            headers={"Retry-After": str(e.retry_after)},
        )
    except Exception:
        logger.exception("debug search check failed")
        return JSONResponse(status_code=500, content={"error": "Debug check failed"})

    return {
        "ok": True,
        "x_cache": outcome.cache_status,
        "duration_ms": int((time.monotonic() - started) * 1000),
        "total_count": outcome.payload.get("total_count", 0),
        "params": params.as_dict(),
    }


@app.get("/healthz", tags=["Health"])
def healthz():
    return {"ok": True}
