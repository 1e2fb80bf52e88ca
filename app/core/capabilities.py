"""GSC Connector — Remote Capabilities.

The core never talks HTTP directly. Operations receive a
``SearchConsoleSource`` and the paginator receives a ``RemoteQuery``, so
both can be swapped for in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.models.gsc_models import QueryRow, SiteEntry

# (row_limit, start_row) -> one page of rows
RemoteQuery = Callable[[int, int], Awaitable[List[QueryRow]]]


class SearchConsoleSource(ABC):
    """Abstract access to the three remote Search Console operations."""

    @abstractmethod
    async def list_sites(self) -> List[SiteEntry]:
        """Return every property visible to the credentials."""
        ...

    @abstractmethod
    async def query_rows(
        self, site_url: str, body: Dict[str, Any]
    ) -> List[QueryRow]:
        """Run a single searchAnalytics.query request.

        Args:
            site_url: Property id, URL-prefix or ``sc-domain:`` form.
            body: Full request body including ``rowLimit`` and ``startRow``.

        Returns:
            The rows of that page. Empty when the range holds no more data.
        """
        ...

    @abstractmethod
    async def inspect_url(
        self,
        site_url: str,
        inspection_url: str,
        language_code: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the ``inspectionResult`` object for one URL."""
        ...

    def bind_query(self, site_url: str, base_body: Dict[str, Any]) -> RemoteQuery:
        """Freeze a request body so only page size and offset vary."""

        async def remote_query(row_limit: int, start_row: int) -> List[QueryRow]:
            body = dict(base_body, rowLimit=row_limit, startRow=start_row)
            return await self.query_rows(site_url, body)

        return remote_query
