"""
StickyShare Backend — Hosted Storage Gateway Client
====================================================

What:  StorageGateway implementation speaking the hosted service's REST API.
How:   One shared httpx.AsyncClient; record calls go to the PostgREST-style
       endpoint, blob calls to the storage endpoint.
Who:   Created once in the application lifespan; used by NoteRepository,
       ImageService and the health check.

Wire format:
    Records   {base}/rest/v1/{table}
              GET    ?select=*&order=created_at.desc&id=eq.{id}&limit=1
              A 400 with code 22P02 on a filtered call means "no such row"
              POST   body=row, Prefer: return=representation → [row]
              DELETE ?id=eq.{id}, Prefer: return=representation → [rows]
    Blobs     POST   {base}/storage/v1/object/{bucket}/{key}   body=bytes
              GET    {base}/storage/v1/object/public/{bucket}/{key}
    Auth      apikey: {key} and Authorization: Bearer {key} on every call

No retries and no timeout unless `timeout_seconds` is configured; a stalled
request stays pending.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from stickyshare.services.gateway_base import GatewayError, StorageGateway

logger = logging.getLogger(__name__)


def _eq_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


# Postgres "invalid_text_representation": a filter value the column type
# cannot parse, e.g. id=eq.nope against a uuid column
INVALID_TEXT_REPRESENTATION = "22P02"


def _is_unparseable_filter(error: GatewayError) -> bool:
    """True when the gateway refused a filter value rather than failing."""
    if error.status_code != 400 or not error.body:
        return False
    try:
        payload = json.loads(error.body)
    except ValueError:
        return False
    return isinstance(payload, dict) and payload.get("code") == INVALID_TEXT_REPRESENTATION


class HttpStorageGateway(StorageGateway):
    """
    REST client for the hosted storage service.

    Args:
        base_url: Project URL, e.g. ``https://xyz.supabase.co``
        api_key: Project API key
        client: Shared AsyncClient (the caller owns its lifecycle). When
                omitted the gateway creates and owns one.
        timeout_seconds: Only used when the gateway creates its own client.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key.strip()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    # ── Transport ─────────────────────────────────────────────────────────

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                content=content,
                headers=self._headers(headers),
            )
        except httpx.HTTPError as e:
            logger.error("Gateway %s %s failed: %s", method, url, str(e))
            raise GatewayError(f"{method} {url} failed: {type(e).__name__}") from e

        if response.is_error:
            logger.warning(
                "Gateway %s %s returned %d", method, url, response.status_code
            )
            raise GatewayError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
                body=response.text[:500],
            )
        return response

    @staticmethod
    def _rows(response: httpx.Response) -> List[Dict[str, Any]]:
        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(
                "Gateway returned a non-JSON body",
                status_code=response.status_code,
                body=response.text[:500],
            ) from e
        if isinstance(data, dict):
            return [data]
        if isinstance(data, list):
            return [row for row in data if isinstance(row, dict)]
        raise GatewayError(
            f"Gateway returned unexpected JSON: {type(data).__name__}",
            status_code=response.status_code,
        )

    def _table_url(self, table: str) -> str:
        return f"{self._base_url}/rest/v1/{table}"

    # ── Record Store ──────────────────────────────────────────────────────

    async def select(
        self,
        table: str,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"select": "*", **_eq_filters(filters)}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)

        try:
            response = await self._request("GET", self._table_url(table), params=params)
        except GatewayError as e:
            if filters and _is_unparseable_filter(e):
                logger.debug("Select on %s with unparseable filter %s: no rows", table, filters)
                return []
            raise
        return self._rows(response)

    async def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            self._table_url(table),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response)
        if not rows:
            raise GatewayError(
                "Insert returned no row", status_code=response.status_code
            )
        return rows[0]

    async def delete(self, table: str, *, filters: Dict[str, Any]) -> int:
        if not filters:
            # An unfiltered DELETE would empty the table
            raise ValueError("delete() requires at least one filter")
        try:
            response = await self._request(
                "DELETE",
                self._table_url(table),
                params=_eq_filters(filters),
                headers={"Prefer": "return=representation"},
            )
        except GatewayError as e:
            if _is_unparseable_filter(e):
                logger.debug("Delete on %s with unparseable filter %s: no rows", table, filters)
                return 0
            raise
        return len(self._rows(response))

    # ── Blob Store ────────────────────────────────────────────────────────

    async def upload(
        self, bucket: str, key: str, content: bytes, content_type: str
    ) -> None:
        url = f"{self._base_url}/storage/v1/object/{bucket}/{quote(key)}"
        await self._request(
            "POST",
            url,
            content=content,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        logger.info("Uploaded %s/%s (%d bytes)", bucket, key, len(content))

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{quote(key)}"

    # ── Health ────────────────────────────────────────────────────────────

    async def health_check(self) -> bool:
        try:
            await self._request("GET", f"{self._base_url}/rest/v1/")
            return True
        except GatewayError as e:
            logger.warning("Gateway health check failed: %s", e.message)
            return False

    async def aclose(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()
