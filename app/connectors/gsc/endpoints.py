"""GSC Connector — Search Console API Endpoints.

One method per remote operation. Each validates the response shape and
returns typed models.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from pydantic import ValidationError

from app.config import settings
from app.connectors.gsc.client import SearchConsoleAPIError, SearchConsoleClient
from app.core.capabilities import SearchConsoleSource
from app.core.logging import get_logger
from app.models.gsc_models import QueryRow, SiteEntry

logger = get_logger("connector.endpoints")


def site_path(site_url: str) -> str:
    """Encode a property id as a single URL path segment.

    ``https://example.com/`` and ``sc-domain:example.com`` are both kept
    verbatim apart from percent-encoding.
    """
    return quote(site_url, safe="")


class SearchConsoleEndpoints(SearchConsoleSource):
    """Search Console operations bound to an authenticated client."""

    def __init__(self, client: SearchConsoleClient):
        self.client = client

    # ── Sites ──

    async def list_sites(self) -> List[SiteEntry]:
        url = f"{settings.gsc_base_url}/sites"
        result = await self.client.request("GET", url)
        entries = result.get("siteEntry")
        if not isinstance(entries, list):
            raise SearchConsoleAPIError(
                'Unexpected response format: "siteEntry" not found or not an array.'
            )
        sites = [SiteEntry.model_validate(e) for e in entries]
        logger.info(f"Fetched {len(sites)} sites", extra={"rows": len(sites)})
        return sites

    # ── Search Analytics ──

    async def query_rows(
        self, site_url: str, body: Dict[str, Any]
    ) -> List[QueryRow]:
        url = f"{settings.gsc_base_url}/sites/{site_path(site_url)}/searchAnalytics/query"
        result = await self.client.request("POST", url, json_body=body)

        # An empty range comes back without a "rows" key at all
        rows = result.get("rows", [])
        if not isinstance(rows, list):
            raise SearchConsoleAPIError(
                'Unexpected response format: "rows" is not an array.'
            )
        try:
            return [QueryRow.model_validate(r) for r in rows]
        except ValidationError as e:
            raise SearchConsoleAPIError(
                f"Unexpected response format: malformed row ({e.error_count()} errors)"
            ) from e

    # ── URL Inspection ──

    async def inspect_url(
        self,
        site_url: str,
        inspection_url: str,
        language_code: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"inspectionUrl": inspection_url, "siteUrl": site_url}
        if language_code:
            body["languageCode"] = language_code
        result = await self.client.request(
            "POST", settings.gsc_inspection_url, json_body=body
        )
        inspection = result.get("inspectionResult")
        if not isinstance(inspection, dict):
            raise SearchConsoleAPIError(
                'Unexpected response format: "inspectionResult" not found.'
            )
        return inspection
