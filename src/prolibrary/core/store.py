"""Client for the hosted books table (PostgREST dialect)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from .config import Settings

log = structlog.get_logger()


class RemoteTableError(Exception):
    """A remote table call failed (transport, service or configuration)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _match_params(match: dict[str, Any]) -> dict[str, str]:
    if not match:
        raise RemoteTableError("Refusing to touch every row: empty match")
    return {column: f"eq.{value}" for column, value in match.items()}


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.text or resp.reason_phrase


class RemoteTable:
    """Thin list/insert/update/delete client over one hosted table.

    Every method raises ``RemoteTableError`` on failure; nothing is retried.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.table = settings.table
        self._client = httpx.AsyncClient(timeout=settings.timeout, transport=transport)

    @property
    def endpoint(self) -> str:
        return f"{self.settings.supabase_url}/rest/v1/{self.table}"

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.settings.supabase_key,
            "Authorization": f"Bearer {self.settings.supabase_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        if not self.settings.supabase_url:
            raise RemoteTableError("SUPABASE_URL is not set")
        if not self.settings.supabase_key:
            raise RemoteTableError("SUPABASE_KEY is not set")

        try:
            resp = await self._client.request(
                method,
                self.endpoint,
                params=params,
                json=json,
                headers=self._headers(headers),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.debug("remote_transport_error", method=method, table=self.table, error=str(e))
            raise RemoteTableError(str(e) or e.__class__.__name__) from e

        if resp.is_error:
            message = _error_message(resp)
            log.debug(
                "remote_error_response",
                method=method,
                table=self.table,
                status=resp.status_code,
                error=message,
            )
            raise RemoteTableError(message, status_code=resp.status_code)
        return resp

    async def list(
        self, order_by: str = "created_at", descending: bool = True
    ) -> list[dict[str, Any]]:
        """Fetch every row, ordered by one column."""
        direction = "desc" if descending else "asc"
        resp = await self._request(
            "GET", params={"select": "*", "order": f"{order_by}.{direction}"}
        )
        try:
            rows = resp.json()
        except ValueError as e:
            raise RemoteTableError("Malformed list response", status_code=resp.status_code) from e
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise RemoteTableError("Malformed list response", status_code=resp.status_code)
        return rows

    async def insert(self, row: dict[str, Any]) -> None:
        await self._request("POST", json=[row], headers={"Prefer": "return=minimal"})

    async def update(self, match: dict[str, Any], patch: dict[str, Any]) -> None:
        await self._request(
            "PATCH",
            params=_match_params(match),
            json=patch,
            headers={"Prefer": "return=minimal"},
        )

    async def delete(self, match: dict[str, Any]) -> None:
        await self._request("DELETE", params=_match_params(match))

    async def aclose(self) -> None:
        await self._client.aclose()
