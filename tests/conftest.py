"""Shared fixtures: an in-memory Search Console source."""

from datetime import date
from typing import Any, Dict, List, Optional

import pytest

from app.analyzer.pipeline import SearchConsoleOperations
from app.core.capabilities import SearchConsoleSource
from app.models.gsc_models import QueryRow, SiteEntry


def make_rows(count: int, prefix: str = "/page-") -> List[QueryRow]:
    return [
        QueryRow(keys=(f"{prefix}{i}",), clicks=i, impressions=i * 10, ctr=0.1, position=1.5)
        for i in range(count)
    ]


class FakeSource(SearchConsoleSource):
    """Serves fixed rows per date range and records every request body."""

    def __init__(
        self,
        rows_by_start: Optional[Dict[str, List[QueryRow]]] = None,
        sites: Optional[List[SiteEntry]] = None,
        page_cap: Optional[int] = None,
    ):
        self.rows_by_start = rows_by_start or {}
        self.sites = sites or []
        self.page_cap = page_cap
        self.requests: List[Dict[str, Any]] = []
        self.inspections: List[tuple] = []
        self.error: Optional[Exception] = None

    async def list_sites(self) -> List[SiteEntry]:
        if self.error:
            raise self.error
        return list(self.sites)

    async def query_rows(self, site_url: str, body: Dict[str, Any]) -> List[QueryRow]:
        self.requests.append({"site_url": site_url, **body})
        if self.error:
            raise self.error
        rows = self.rows_by_start.get(body["startDate"], [])
        size = body["rowLimit"]
        if self.page_cap:
            size = min(size, self.page_cap)
        start = body["startRow"]
        return rows[start : start + size]

    async def inspect_url(self, site_url, inspection_url, language_code=None):
        self.inspections.append((site_url, inspection_url, language_code))
        if self.error:
            raise self.error
        return {"indexStatusResult": {"verdict": "PASS"}}


@pytest.fixture
def today() -> date:
    return date(2024, 3, 10)


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def ops(source: FakeSource, today: date) -> SearchConsoleOperations:
    return SearchConsoleOperations(source, today=lambda: today)
