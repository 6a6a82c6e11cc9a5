# src/jobboard/io/sheets.py
"""
Curated store backed by a Google Sheet.

Tabs:
- "Jobs":    title, company, location, description, link, source, tags,
             published_at, visible
- "Sources": query, active

Public sheets are read through the CSV export URL; private ones fall back to
a gspread service account.
"""
from __future__ import annotations
import io
import logging
import httpx
import pandas as pd
from typing import Dict, List

import gspread

from jobboard.io.curated import rows_to_jobs
from jobboard.models import JobRecord

logger = logging.getLogger(__name__)

TAB_JOBS = "Jobs"
TAB_SOURCES = "Sources"

_TRUTHY = {"1", "true", "yes", "y", "x"}


def csv_export_url(sheet_id: str, tab: str) -> str:
    return f"https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={tab}"


def _truthy(value) -> bool:
    return str(value).strip().lower() in _TRUTHY


def _read_csv_via_httpx(url: str) -> pd.DataFrame:
    with httpx.Client(timeout=20, follow_redirects=True) as client:
        r = client.get(url)
        r.raise_for_status()
        return pd.read_csv(io.StringIO(r.text))


def _read_df_with_gspread(sheet_id: str, tab: str, service_account_file: str) -> pd.DataFrame:
    gc = gspread.service_account(filename=service_account_file)
    sh = gc.open_by_key(sheet_id)
    ws = sh.worksheet(tab)  # raises gspread.WorksheetNotFound
    return pd.DataFrame(ws.get_all_records())


class SheetsCuratedStore:
    def __init__(self, sheet_id: str, service_account_file: str = "service_account_jobbot.json"):
        self.sheet_id = sheet_id
        self.service_account_file = service_account_file

    def _read_tab(self, tab: str) -> pd.DataFrame:
        # Try public CSV first; on 401/403 use the service account
        url = csv_export_url(self.sheet_id, tab)
        try:
            return _read_csv_via_httpx(url)
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                return _read_df_with_gspread(self.sheet_id, tab, self.service_account_file)
            raise

    def _records(self, tab: str) -> List[Dict]:
        df = self._read_tab(tab)
        df.columns = [str(c).strip().lower() for c in df.columns]
        return df.fillna("").to_dict(orient="records")

    def list_visible_jobs(self, limit: int) -> List[JobRecord]:
        try:
            rows = self._records(TAB_JOBS)
        except (httpx.HTTPError, gspread.exceptions.GSpreadException, OSError, ValueError) as e:
            logger.warning("curated jobs unavailable: %s", type(e).__name__)
            return []
        # no "visible" column -> everything in the tab is published
        visible = [r for r in rows if "visible" not in r or _truthy(r["visible"])]
        return rows_to_jobs(visible, limit)

    def list_active_source_queries(self) -> List[str]:
        try:
            rows = self._records(TAB_SOURCES)
        except (httpx.HTTPError, gspread.exceptions.GSpreadException, OSError, ValueError) as e:
            logger.warning("source queries unavailable: %s", type(e).__name__)
            return []
        out = []
        for r in rows:
            query = str(r.get("query") or "").strip()
            if query and ("active" not in r or _truthy(r["active"])):
                out.append(query)
        return out

    def worksheet_titles(self) -> List[str]:
        """Debug helper: tab titles via gspread (needs the service account)."""
        gc = gspread.service_account(filename=self.service_account_file)
        sh = gc.open_by_key(self.sheet_id)
        return [f"{ws.title}  gid={ws.id}" for ws in sh.worksheets()]
