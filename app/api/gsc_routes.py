"""GSC Connector — Search Console Routes."""

from typing import Any, AsyncIterator, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.analyzer.pipeline import SearchConsoleOperations
from app.connectors.gsc.client import SearchConsoleAPIError, SearchConsoleClient
from app.connectors.gsc.endpoints import SearchConsoleEndpoints
from app.core.errors import InputValidationError, OperationError
from app.core.logging import get_logger
from app.models.gsc_models import OperationItem

logger = get_logger("api.gsc")

router = APIRouter(prefix="/gsc", tags=["Search Console"])


# ── Request / Response Models ──


class ExecuteRequest(BaseModel):
    """Request body for POST /gsc/execute."""

    items: List[OperationItem]
    continue_on_fail: bool = False
    """Record failing items as error rows instead of aborting the batch."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"resource": "site", "operation": "getSites"},
                        {
                            "resource": "site",
                            "operation": "comparePeriods",
                            "parameters": {
                                "site_url": "sc-domain:example.com",
                                "range_mode": "last28d",
                                "comparison_policy": "previousYear",
                                "dimensions": ["page", "query"],
                            },
                        },
                    ],
                    "continue_on_fail": True,
                }
            ]
        }
    }


class RowsResponse(BaseModel):
    status: str = "success"
    count: int
    rows: List[Dict[str, Any]]


# ── Dependencies ──


async def get_operations() -> AsyncIterator[SearchConsoleOperations]:
    """Dependency — yields operations bound to a live client."""
    client = SearchConsoleClient()
    try:
        yield SearchConsoleOperations(SearchConsoleEndpoints(client))
    finally:
        await client.close()


async def _run(
    ops: SearchConsoleOperations, resource: str, operation: str, parameters: Dict[str, Any]
) -> RowsResponse:
    item = OperationItem(resource=resource, operation=operation, parameters=parameters)
    try:
        rows = await ops.run_item(item)
    except InputValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SearchConsoleAPIError as e:
        logger.error(f"{resource}/{operation} failed: {e}", extra={"status_code": e.status_code})
        raise HTTPException(status_code=502, detail=f"Search Console error: {str(e)}")
    return RowsResponse(count=len(rows), rows=rows)


# ── Endpoints ──


@router.get("/sites", response_model=RowsResponse)
async def list_sites(ops: SearchConsoleOperations = Depends(get_operations)):
    """List every property the configured token can access."""
    return await _run(ops, "site", "getSites", {})


@router.post("/page-insights", response_model=RowsResponse)
async def page_insights(
    parameters: Dict[str, Any],
    ops: SearchConsoleOperations = Depends(get_operations),
):
    """Fetch search-analytics rows for one property and date range."""
    return await _run(ops, "site", "getPageInsights", parameters)


@router.post("/compare", response_model=RowsResponse)
async def compare_periods(
    parameters: Dict[str, Any],
    ops: SearchConsoleOperations = Depends(get_operations),
):
    """Compare two periods row by row (diff is first range minus second)."""
    return await _run(ops, "site", "comparePeriods", parameters)


@router.post("/inspect", response_model=RowsResponse)
async def inspect_url(
    parameters: Dict[str, Any],
    ops: SearchConsoleOperations = Depends(get_operations),
):
    """Inspect the index status of one URL."""
    return await _run(ops, "url", "inspect", parameters)


@router.post("/execute", response_model=RowsResponse)
async def execute(
    request: ExecuteRequest,
    ops: SearchConsoleOperations = Depends(get_operations),
):
    """Run a batch of operation items in order."""
    try:
        rows = await ops.execute(request.items, request.continue_on_fail)
    except OperationError as e:
        status = 422 if isinstance(e.__cause__, InputValidationError) else 502
        raise HTTPException(
            status_code=status,
            detail={"item_index": e.item_index, "message": str(e)},
        )
    return RowsResponse(count=len(rows), rows=rows)
