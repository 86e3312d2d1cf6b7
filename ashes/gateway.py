"""
HTTP gateway to the hosted backend.

Talks to a PostgREST-style endpoint ({base_url}/rest/v1/{table}). Every
failure, whether transport, timeout, non-2xx status or a body that is not
JSON, is raised as
GatewayUnavailable so callers have exactly one error to recover from.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ashes.config import settings
from ashes.errors import GatewayUnavailable

logger = logging.getLogger(__name__)


class TableGateway:
    """Async CRUD client addressed by table name."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (settings.GATEWAY_URL if base_url is None else base_url).rstrip("/")
        self.api_key = settings.GATEWAY_KEY if api_key is None else api_key
        self.client = httpx.AsyncClient(
            timeout=settings.GATEWAY_TIMEOUT if timeout is None else timeout,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _headers(self, prefer: str | None = None) -> dict:
        """Build request headers."""
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        if not self.is_configured:
            raise GatewayUnavailable("gateway not configured")

        url = f"{self.base_url}/rest/v1/{table}"
        try:
            res = await self.client.request(
                method,
                url,
                params=params or {},
                json=json,
                headers=self._headers(prefer),
            )
        except httpx.HTTPError as e:
            raise GatewayUnavailable(str(e) or type(e).__name__) from e

        if res.is_error:
            raise GatewayUnavailable(_error_message(res))

        logger.debug("gateway: %s %s -> %s", method, table, res.status_code)
        if not res.content:
            return None
        try:
            return res.json()
        except ValueError as e:
            content_type = res.headers.get("content-type", "unknown content type")
            raise GatewayUnavailable(f"unreadable response from gateway ({content_type})") from e

    async def select(
        self,
        table: str,
        order_by: str | None = None,
        descending: bool = False,
        filters: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch every row of a table.

        Args:
            table: Table name
            order_by: Column to order by, if any
            descending: Order direction
            filters: Column -> value equality filters

        Returns:
            List of row dicts
        """
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        return await self._request("GET", table, params=params) or []

    async def insert(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows and return them as stored (with ids and timestamps)."""
        return await self._request("POST", table, json=rows, prefer="return=representation") or []

    async def update(self, table: str, row_id: str, fields: dict[str, Any]) -> list[dict[str, Any]]:
        """Update the row with the given id and return it as stored."""
        return (
            await self._request(
                "PATCH",
                table,
                params={"id": f"eq.{row_id}"},
                json=fields,
                prefer="return=representation",
            )
            or []
        )

    async def delete(self, table: str, row_id: str) -> None:
        """Delete the row with the given id."""
        await self._request("DELETE", table, params={"id": f"eq.{row_id}"})

    async def close(self) -> None:
        """Close client."""
        await self.client.aclose()


def _error_message(res: httpx.Response) -> str:
    """Pull the service's message out of an error response."""
    try:
        body = res.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {res.status_code}"
