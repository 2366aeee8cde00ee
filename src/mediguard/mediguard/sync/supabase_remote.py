from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx

from ..core.constants import REMOTE_TIMEOUT_SECONDS
from ..core.exceptions import RemoteUnreachable

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class SupabaseRemoteStore:
    """Remote store backed by a Supabase project (PostgREST over HTTPS)."""

    def __init__(
        self,
        url: str,
        key: str,
        *,
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
    ):
        self._url = (url or "").rstrip("/")
        self._key = key or ""
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout, connect=5.0))

    @property
    def is_configured(self) -> bool:
        return bool(self._url and self._key)

    def _endpoint(self, table: str) -> str:
        return f"{self._url}/rest/v1/{table}"

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    def _request(self, method: str, table: str, **kwargs: Any) -> httpx.Response:
        try:
            r = self._client.request(method, self._endpoint(table), **kwargs)
            r.raise_for_status()
            return r
        except httpx.HTTPStatusError as e:
            raise RemoteUnreachable(f"{method} {table} failed: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise RemoteUnreachable(f"{method} {table} failed: {e}") from e

    def ping(self) -> bool:
        if not self.is_configured:
            return False
        try:
            r = self._client.get(self._endpoint("hospitals"), params={"select": "id", "limit": "1"}, headers=self._headers())
        except httpx.HTTPError as e:
            logger.debug("Supabase ping failed: %s", e)
            return False
        return r.status_code < 500

    def select_all(self, table: str) -> Sequence[Row]:
        r = self._request("GET", table, params={"select": "*"}, headers=self._headers())
        try:
            data = r.json()
        except ValueError as e:
            raise RemoteUnreachable(f"GET {table} returned a non-JSON body") from e
        if not isinstance(data, list):
            raise RemoteUnreachable(f"Unexpected response for {table}")
        return data

    def upsert(self, table: str, row: Row) -> None:
        self._request(
            "POST",
            table,
            params={"on_conflict": "id"},
            json=[row],
            headers=self._headers(Prefer="resolution=merge-duplicates,return=minimal"),
        )

    def delete_by_id(self, table: str, row_id: str) -> None:
        self.delete_where(table, "id", row_id)

    def delete_where(self, table: str, column: str, value: Any) -> None:
        self._request("DELETE", table, params={column: f"eq.{value}"}, headers=self._headers())

    def close(self) -> None:
        self._client.close()
