"""GSC Connector — Search Console API Client.

Handles authentication and error mapping. No retries at this layer: a
failed request fails the calling operation.
"""

from typing import Any, Dict, Optional

import httpx

from app.config import settings
from app.core.logging import get_logger

logger = get_logger("connector.client")

SCOPES = (
    "https://www.googleapis.com/auth/webmasters",
    "https://www.googleapis.com/auth/webmasters.readonly",
)


class SearchConsoleAPIError(Exception):
    """Raised when Search Console returns an error or an unexpected payload."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    """Pull the API's error text out of a failed response, if there is one.

    Google APIs answer with {"error": {"message": ...}}; OAuth endpoints
    sometimes with {"error": "invalid_token", "error_description": ...}.
    """
    if not response.headers.get("content-type", "").startswith("application/json"):
        return ""
    try:
        body = response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message", ""))
    if isinstance(error, str):
        description = body.get("error_description")
        return f"{error}: {description}" if description else error
    return ""


class SearchConsoleClient:
    """Async HTTP client for the Search Console APIs."""

    def __init__(
        self,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = access_token or settings.gsc_access_token
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=settings.gsc_request_timeout,
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {self.access_token}",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "SearchConsoleClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ── Core Request Method ──

    async def request(
        self,
        method: str,
        url: str,
        json_body: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Make one authenticated request and return the decoded JSON body."""
        client = await self._get_client()
        try:
            resp = await client.request(method, url, json=json_body)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_msg = _error_message(e.response) or str(e)
            logger.warning(
                f"Search Console returned {e.response.status_code}: {error_msg}",
                extra={"endpoint": url, "status_code": e.response.status_code},
            )
            raise SearchConsoleAPIError(error_msg, e.response.status_code) from e
        except httpx.RequestError as e:
            logger.warning(f"Request error: {e}", extra={"endpoint": url})
            raise SearchConsoleAPIError(f"Connection failed: {e}") from e

        if not resp.content:
            return {}
        try:
            payload = resp.json()
        except ValueError as e:
            raise SearchConsoleAPIError(
                "Unexpected response format: body is not JSON", resp.status_code
            ) from e
        if not isinstance(payload, dict):
            raise SearchConsoleAPIError(
                "Unexpected response format: expected a JSON object",
                resp.status_code,
            )
        return payload
