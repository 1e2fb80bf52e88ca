"""GSC Connector — Paginated Fetcher.

searchAnalytics.query caps a single response at 25000 rows, so larger
reports are read with an increasing ``startRow`` until the target row count
is met or the source runs dry.
"""

from typing import List, Optional

from app.config import settings
from app.core.capabilities import RemoteQuery
from app.core.logging import get_logger
from app.models.gsc_models import QueryRow

logger = get_logger("analyzer.pagination")


def clamp_page_size(per_page: Optional[int]) -> int:
    """Clamp a requested page size into the range the API accepts."""
    if per_page is None:
        return settings.gsc_max_page_size
    return max(settings.gsc_min_page_size, min(per_page, settings.gsc_max_page_size))


async def fetch_all(
    remote_query: RemoteQuery,
    target_limit: int,
    per_page: Optional[int] = None,
) -> List[QueryRow]:
    """Collect up to ``target_limit`` rows across as many pages as needed.

    Stops on an empty page, on a short page (fewer rows than requested), or
    once enough rows are collected. Errors from any page propagate and
    discard what was collected so far.
    """
    if target_limit <= 0:
        return []

    page_size = clamp_page_size(per_page)
    collected: List[QueryRow] = []
    offset = 0
    pages = 0

    while True:
        remaining = target_limit - len(collected)
        row_limit = max(settings.gsc_min_page_size, min(page_size, remaining))
        page = await remote_query(row_limit, offset)
        pages += 1
        logger.debug(
            f"Page {pages}: requested {row_limit} from row {offset}, got {len(page)}"
        )

        if not page:
            break

        collected.extend(page)
        offset += len(page)

        if len(page) < row_limit:
            break
        if len(collected) >= target_limit:
            break

    logger.info(
        f"Fetched {len(collected)} rows in {pages} requests (limit {target_limit})",
        extra={"rows": len(collected)},
    )
    return collected[:target_limit]
