"""
Async Notion REST client.

Implements the RemoteAPI contract used by the sync engine (create_record)
and the destination lookups used for routing (get_destination, search).

Every request fetches the bearer token from the authenticator first, so a
missing token surfaces as NotAuthenticated before any network traffic.
Responses are mapped as:

    2xx              → parsed JSON
    401              → NotAuthenticated (token revoked; retrying cannot help)
    other non-2xx    → RemoteError(status_code, body)
    transport error  → RemoteError(None, description)
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from kapture.errors import NotAuthenticated, RemoteError
from kapture.models.properties import PropertyValue, to_notion_properties
from kapture.sync.interfaces import Authenticator, Destination

logger = logging.getLogger(__name__)

NOTION_API_BASE_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"


def destination_from_database(data: Dict[str, Any]) -> Destination:
    """Build a Destination from a Notion database object."""
    title = "".join(
        part.get("plain_text", "") for part in data.get("title") or []
    )
    return Destination(
        id=data["id"],
        title=title or "Untitled",
        url=data.get("url"),
        properties=data.get("properties") or {},
    )


class NotionClient:
    """
    Thin async wrapper over the Notion REST API.

    One httpx.AsyncClient is created per request unless a client is injected
    (tests pass one built on httpx.MockTransport).
    """

    def __init__(
        self,
        authenticator: Authenticator,
        base_url: str = NOTION_API_BASE_URL,
        notion_version: str = NOTION_VERSION,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._auth = authenticator
        self._base_url = base_url.rstrip("/")
        self._notion_version = notion_version
        self._timeout = timeout
        self._http_client = http_client

    # ─── RemoteAPI ────────────────────────────────────────────────────────────

    async def create_record(
        self, destination_id: str, properties: Mapping[str, PropertyValue]
    ) -> str:
        """Create a page in a Notion database and return its page id."""
        body = {
            "parent": {"database_id": destination_id},
            "properties": to_notion_properties(properties),
        }
        page = await self._request("POST", "/pages", json=body)
        return page["id"]

    # ─── Destination lookups ──────────────────────────────────────────────────

    async def get_destination(self, destination_id: str) -> Destination:
        data = await self._request("GET", f"/databases/{destination_id}")
        return destination_from_database(data)

    async def search_destinations(self, query: str = "") -> List[Destination]:
        """List databases shared with the integration (first page only)."""
        body: Dict[str, Any] = {"filter": {"property": "object", "value": "database"}}
        if query:
            body["query"] = query
        data = await self._request("POST", "/search", json=body)
        return [destination_from_database(db) for db in data.get("results", [])]

    # ─── Internal helpers ─────────────────────────────────────────────────────

    def _headers(self) -> Dict[str, str]:
        token = self._auth.get_valid_token()  # raises NotAuthenticated
        return {
            "Authorization": f"Bearer {token}",
            "Notion-Version": self._notion_version,
            "Content-Type": "application/json",
        }

    async def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        headers = self._headers()
        url = f"{self._base_url}{path}"
        try:
            if self._http_client is not None:
                response = await self._http_client.request(
                    method, url, json=json, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise RemoteError(None, f"{method} {path} failed: {exc}") from exc

        if response.status_code == 401:
            raise NotAuthenticated("Notion rejected the saved token (HTTP 401).")
        if not response.is_success:
            logger.debug("Notion %s %s → %d", method, path, response.status_code)
            raise RemoteError(response.status_code, response.text or "Unknown error")
        return response.json()
