"""GSC Connector — Operation Pipeline.

Runs the per-item data flow:
  validate parameters → resolve ranges → paginated fetch → (join & diff) → output rows

Items run one at a time in index order. A failing item either aborts the
batch or, with ``continue_on_fail``, becomes an error row.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.analyzer.comparison import join_rows
from app.analyzer.date_ranges import build_comparison_range, resolve_range
from app.analyzer.filters import build_filter_groups
from app.analyzer.pagination import fetch_all
from app.connectors.gsc.client import SearchConsoleAPIError
from app.core.capabilities import SearchConsoleSource
from app.core.errors import InputValidationError, OperationError
from app.core.logging import get_logger
from app.models.gsc_models import (
    ComparePeriodsParams,
    DateRange,
    InspectUrlParams,
    OperationItem,
    PageInsightsParams,
    QueryRow,
)

logger = get_logger("analyzer.pipeline")

_SITE_URL_PATTERN = re.compile(r"^(https?://|sc-domain:)")
_HTTP_URL_PATTERN = re.compile(r"^https?://\S+$")

P = TypeVar("P", bound=BaseModel)


def validate_site_url(site_url: str) -> str:
    """Reject property ids that are neither URL-prefix nor domain properties."""
    if not _SITE_URL_PATTERN.match(site_url or ""):
        raise InputValidationError(
            "Site URL must start with http://, https:// or sc-domain:"
        )
    return site_url


def _parse(model: Type[P], parameters: Dict[str, Any]) -> P:
    try:
        return model.model_validate(parameters)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first["loc"]) or "parameters"
        raise InputValidationError(f"Invalid {where}: {first['msg']}") from e


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _query_body(params: PageInsightsParams, date_range: DateRange) -> Dict[str, Any]:
    """Request body held constant across pages of one fetch."""
    body: Dict[str, Any] = {
        **date_range.as_body(),
        "dimensions": [d.value for d in params.dimensions],
        "searchType": params.search_type.value,
    }
    groups = build_filter_groups(params.filters, params.filter_group_type)
    if groups:
        body["dimensionFilterGroups"] = groups
    return body


def _tag(resource: str, operation: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"resource": resource, "operation": operation, **payload}


class SearchConsoleOperations:
    """The operations a workflow item can request."""

    def __init__(
        self,
        source: SearchConsoleSource,
        today: Callable[[], date] = _today,
    ):
        self.source = source
        self.today = today
        self._handlers: Dict[
            tuple[str, str], Callable[[Dict[str, Any]], Awaitable[List[Dict[str, Any]]]]
        ] = {
            ("site", "getSites"): self.get_sites,
            ("site", "getPageInsights"): self.get_page_insights,
            ("site", "comparePeriods"): self.compare_periods,
            ("url", "inspect"): self.inspect_url,
        }

    # ── Operations ──

    async def get_sites(self, parameters: Dict[str, Any]) -> List[Dict[str, Any]]:
        sites = await self.source.list_sites()
        return [_tag("site", "getSites", s.model_dump()) for s in sites]

    async def fetch_rows(
        self, params: PageInsightsParams, date_range: DateRange
    ) -> List[QueryRow]:
        remote_query = self.source.bind_query(
            params.site_url, _query_body(params, date_range)
        )
        return await fetch_all(remote_query, params.row_limit, params.page_size)

    async def get_page_insights(
        self, parameters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        params = _parse(PageInsightsParams, parameters)
        validate_site_url(params.site_url)
        date_range = resolve_range(
            params.range_mode, self.today(), params.start_date, params.end_date
        )
        # Filter errors must surface before any request
        _query_body(params, date_range)

        rows = await self.fetch_rows(params, date_range)
        return [
            _tag("site", "getPageInsights", {**row.model_dump(), "keys": list(row.keys)})
            for row in rows
        ]

    async def compare_periods(
        self, parameters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        params = _parse(ComparePeriodsParams, parameters)
        validate_site_url(params.site_url)
        today = self.today()
        range_a = resolve_range(
            params.range_mode, today, params.start_date, params.end_date
        )
        range_a, range_b = build_comparison_range(
            params.comparison_policy, range_a, today, params.custom_b
        )
        _query_body(params, range_a)

        rows_a = await self.fetch_rows(params, range_a)
        rows_b = await self.fetch_rows(params, range_b)
        records = join_rows(
            rows_a,
            rows_b,
            [d.value for d in params.dimensions],
            range_a,
            range_b,
            params.comparison_policy,
        )
        return [_tag("site", "comparePeriods", r.to_row()) for r in records]

    async def inspect_url(self, parameters: Dict[str, Any]) -> List[Dict[str, Any]]:
        params = _parse(InspectUrlParams, parameters)
        validate_site_url(params.site_url)
        if not _HTTP_URL_PATTERN.match(params.inspection_url):
            raise InputValidationError("Inspection URL must be an absolute http(s) URL")
        result = await self.source.inspect_url(
            params.site_url, params.inspection_url, params.language_code
        )
        return [
            _tag(
                "url",
                "inspect",
                {
                    "siteUrl": params.site_url,
                    "inspectionUrl": params.inspection_url,
                    "inspectionResult": result,
                },
            )
        ]

    # ── Dispatch ──

    async def run_item(self, item: OperationItem) -> List[Dict[str, Any]]:
        handler = self._handlers.get((item.resource, item.operation))
        if handler is None:
            raise InputValidationError(
                f"Unsupported operation {item.operation!r} for resource {item.resource!r}"
            )
        return await handler(item.parameters)

    async def execute(
        self,
        items: Sequence[OperationItem],
        continue_on_fail: bool = False,
    ) -> List[Dict[str, Any]]:
        """Run items sequentially and collect their output rows."""
        results: List[Dict[str, Any]] = []
        for index, item in enumerate(items):
            try:
                results.extend(await self.run_item(item))
            except (InputValidationError, SearchConsoleAPIError) as e:
                logger.error(
                    f"{item.resource}/{item.operation} failed: {e}",
                    extra={"item_index": index},
                )
                if not continue_on_fail:
                    raise OperationError(str(e), item_index=index) from e
                results.append(
                    _tag(item.resource, item.operation, {"error": str(e), "itemIndex": index})
                )
        logger.info(f"Executed {len(items)} items → {len(results)} rows")
        return results
