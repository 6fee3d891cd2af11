"""Listing Search Client — httpx client for the external property search API.

Invariants:
    - One POST per search; the answer is a PDF with one listing per page
    - Non-2xx, timeouts, connection errors and non-PDF bodies raise ExternalSearchError
    - The API key travels in X-API-Key and is never logged

Design Decisions:
    - Same lifecycle as the similarity client: one AsyncClient, closed by the runtime
    - Generous default timeout: the search service renders the PDF synchronously
"""

import logging

import httpx

from fango.core.errors import ExternalSearchError

logger = logging.getLogger(__name__)

_SEARCH_PATH = "/api/external/search-pdf"
_PDF_MAGIC = b"%PDF"


class HttpListingSearch:
    """ListingSearch over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers={"X-API-Key": api_key},
        )

    async def search(self, *, requirements: str, type_id: str | None) -> bytes:
        logger.info(f"Searching listings ({len(requirements)} chars of requirements)")
        try:
            response = await self._client.post(
                _SEARCH_PATH,
                json={"userRequirements": requirements, "typeId": type_id},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ExternalSearchError("timeout", str(e))
        except httpx.HTTPStatusError as e:
            raise ExternalSearchError(
                "http_error", f"{e.response.status_code}: {e.response.text[:200]}",
            )
        except httpx.HTTPError as e:
            raise ExternalSearchError("connection_error", str(e))

        if not response.content.startswith(_PDF_MAGIC):
            raise ExternalSearchError("malformed_response", "body is not a PDF")
        logger.info(f"Listing search returned {len(response.content)} bytes")
        return response.content

    async def close(self) -> None:
        await self._client.aclose()
