# src/jobboard/cli.py
"""
Command-line interface for the job search engine.

This module provides CLI commands to:
- Run a search through the full pipeline and print the JSON payload
- Check that the cache answers a repeated search
- Preview the active source queries that feed the relevance vocabulary
- Report near-duplicate postings the link-based dedup keeps apart
- Serve the HTTP API
"""

from dotenv import load_dotenv
load_dotenv(override=True)  # automatically looks for a .env file in the project root

import json
import logging
import typer

from jobboard.config import Settings
from jobboard.io.curated import InMemoryCuratedStore
from jobboard.io.sheets import SheetsCuratedStore
from jobboard.models import SearchParameters
from jobboard.pipeline.merge import find_near_duplicates, merge_jobs
from jobboard.service import SearchService

# Typer app instance for CLI commands
app = typer.Typer(help="Job search aggregator")

CLI_CLIENT_ID = "cli"


def _setup_logging(settings: Settings, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _store(settings: Settings):
    if settings.sheet_id:
        return SheetsCuratedStore(settings.sheet_id, settings.service_account_file)
    typer.echo("JOBBOARD_SHEET_ID not set; running without curated jobs.", err=True)
    return InMemoryCuratedStore()


def _service(verbose: bool = False) -> SearchService:
    settings = Settings.from_env()
    _setup_logging(settings, verbose)
    if not settings.has_adzuna and not settings.has_jsearch:
        typer.echo("No provider credentials (ADZUNA_APP_ID/ADZUNA_APP_KEY, RAPIDAPI_KEY); curated only.", err=True)
    return SearchService(settings, _store(settings))


@app.command()
def search(
    query: str,
    location: str = typer.Option("", "--location", "-l", help="City, state or both"),
    strict: bool = typer.Option(False, "--strict", help="Drop jobs that don't match the location"),
    limit: int = typer.Option(50, "--limit", help="Results per page (max 200)"),
    page: int = typer.Option(1, "--page"),
    curated_only: bool = typer.Option(False, "--curated-only", help="Skip external providers"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """
    Fetch providers + curated → filter → merge → rank, print the JSON payload.
    """
    service = _service(verbose)
    params = SearchParameters.build(query, location, strict=strict, limit=limit, page=page, curated_only=curated_only)
    outcome = service.search(params, CLI_CLIENT_ID, bypass_cache=True)
    typer.echo(json.dumps(outcome.payload, indent=2))


@app.command()
def cache_check(
    query: str,
    location: str = typer.Option("", "--location", "-l"),
):
    """
    Run the same search twice in one process; the second should be a cache HIT.
    """
    service = _service()
    params = SearchParameters.build(query, location)
    first = service.search(params, CLI_CLIENT_ID)
    second = service.search(params, CLI_CLIENT_ID)
    typer.echo(json.dumps({
        "first": first.cache_status,
        "second": second.cache_status,
        "identical": first.payload == second.payload,
        "total_count": second.payload.get("total_count", 0),
    }, indent=2))


@app.command()
def sources_preview():
    """
    Quick check: show the active source queries and the vocabulary they produce.
    """
    service = _service()
    queries = service.store.list_active_source_queries()
    service.relevance.refresh(force=True)
    typer.echo(json.dumps({
        "queries": queries[:5],
        "terms": sorted(service.relevance.terms),
        "generation": service.relevance.generation,
    }, indent=2))


@app.command()
def near_dupes(
    query: str,
    location: str = typer.Option("", "--location", "-l"),
    threshold: int = typer.Option(92, "--threshold", help="Fuzzy match threshold 0-100"),
):
    """
    List postings that look like the same job behind different links.
    Dedup is link-only on purpose; this just shows what it leaves behind.
    """
    service = _service()
    settings = service.settings
    jobs = []
    for _, fn in service.providers:
        jobs.extend(fn(query, location, settings).jobs)
    jobs = merge_jobs(jobs, [])

    pairs = find_near_duplicates(jobs, threshold=threshold)
    typer.echo(json.dumps([
        {
            "score": round(score, 1),
            "a": {"title": a.get("title"), "company": a.get("company"), "source": a.get("source"), "link": a.get("link")},
            "b": {"title": b.get("title"), "company": b.get("company"), "source": b.get("source"), "link": b.get("link")},
        }
        for a, b, score in pairs
    ], indent=2))


@app.command()
def sheets_debug():
    """
    List worksheet titles and IDs via gspread to verify private access.
    """
    settings = Settings.from_env()
    if not settings.sheet_id:
        raise SystemExit("Set JOBBOARD_SHEET_ID (in .env).")
    store = SheetsCuratedStore(settings.sheet_id, settings.service_account_file)
    for line in store.worksheet_titles():
        typer.echo(line)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("jobboard.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
