"""GolfCourseAPI search client.

GET {base}/v1/search?search_query=<q> with `Authorization: Key <key>`.
Failures surface as UpstreamCallError so the matcher can log them per query
and move on to the next planned query.
"""
from typing import Optional

import httpx

from catalog_adapter import parse_search_response
from errors import UpstreamCallError
from models import CatalogCandidate

_ERROR_BODY_CHARS = 200


class CatalogClient:
    """Thin synchronous wrapper over the catalog search endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self._api_key and self._api_key.strip())

    def search(self, query: str) -> list[CatalogCandidate]:
        url = f"{self.base_url}/v1/search"
        headers = {
            "Authorization": f"Key {self._api_key}",
            "Accept": "application/json",
        }
        try:
            resp = self._client.get(url, params={"search_query": query}, headers=headers)
        except httpx.HTTPError as e:
            print(f"  [Catalog] Request failed for '{query}': {type(e).__name__}: {e}")
            raise UpstreamCallError(f"{type(e).__name__}: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            print(f"  [Catalog] HTTP {resp.status_code} for '{query}'")
            raise UpstreamCallError(resp.text[:_ERROR_BODY_CHARS], status=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamCallError("Invalid JSON from GolfCourseAPI") from e

        return parse_search_response(payload)

    def close(self):
        if self._owns_client:
            self._client.close()
