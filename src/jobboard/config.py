# src/jobboard/config.py
"""
Runtime settings, read from environment variables (and a local .env file).

Provider credentials are optional: a missing key just switches that provider
off, so the service can run on curated jobs alone.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


@dataclass(frozen=True)
class Settings:
    # Adzuna
    adzuna_app_id: str = ""
    adzuna_app_key: str = ""
    adzuna_country: str = "us"

    # JSearch (RapidAPI)
    rapidapi_key: str = ""
    rapidapi_host: str = "jsearch.p.rapidapi.com"

    # Upstream calls
    provider_timeout: float = 8.0
    provider_retries: int = 2

    # Cache / limiter / vocabulary refresh (seconds)
    cache_ttl: float = 24 * 60 * 60
    rate_limit: int = 60
    rate_window: float = 60.0
    terms_refresh: float = 120.0

    # Curated store (Google Sheets)
    sheet_id: Optional[str] = None
    service_account_file: str = "service_account_jobbot.json"
    curated_read_limit: int = 500

    log_level: str = "INFO"

    @property
    def has_adzuna(self) -> bool:
        return bool(self.adzuna_app_id and self.adzuna_app_key)

    @property
    def has_jsearch(self) -> bool:
        return bool(self.rapidapi_key)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(override=False)
        return cls(
            adzuna_app_id=os.getenv("ADZUNA_APP_ID", ""),
            adzuna_app_key=os.getenv("ADZUNA_APP_KEY", ""),
            adzuna_country=os.getenv("ADZUNA_COUNTRY", "us").lower(),
            rapidapi_key=os.getenv("RAPIDAPI_KEY", ""),
            rapidapi_host=os.getenv("RAPIDAPI_HOST", "jsearch.p.rapidapi.com"),
            provider_timeout=_env_float("JOBBOARD_PROVIDER_TIMEOUT", 8.0),
            provider_retries=max(1, _env_int("JOBBOARD_PROVIDER_RETRIES", 2)),
            cache_ttl=_env_float("JOBBOARD_CACHE_TTL", 24 * 60 * 60),
            rate_limit=_env_int("JOBBOARD_RATE_LIMIT", 60),
            rate_window=_env_float("JOBBOARD_RATE_WINDOW", 60.0),
            terms_refresh=_env_float("JOBBOARD_TERMS_REFRESH", 120.0),
            sheet_id=os.getenv("JOBBOARD_SHEET_ID") or None,
            service_account_file=os.getenv("JOBBOARD_SERVICE_ACCOUNT", "service_account_jobbot.json"),
            curated_read_limit=_env_int("JOBBOARD_CURATED_LIMIT", 500),
            log_level=os.getenv("JOBBOARD_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
