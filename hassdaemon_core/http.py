"""HTTP client for Home Assistant REST endpoints."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import aiohttp

from .const import API_PATH, DEFAULT_HTTP_TIMEOUT, HISTORY_PATH
from .errors import (
    HassConnectionError,
    HassResponseError,
    HassTimeout,
)

_LOGGER = logging.getLogger(__name__)


class HassHttpClient:
    """HTTP client wrapper for the Home Assistant REST API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        token: str,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self._base_url}{API_PATH}{path}"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET a REST path below /api and return the decoded JSON body."""
        url = self._url(path)
        _LOGGER.debug("GET %s params=%s", url, params)
        try:
            async with self._session.get(
                url,
                headers=self._auth_headers(),
                params=params,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise HassResponseError(
                        resp.status, f"GET {path} failed with {resp.status}: {body}"
                    )
                return await resp.json()
        except TimeoutError as err:
            raise HassTimeout(f"GET {path} timed out") from err
        except aiohttp.ClientError as err:
            raise HassConnectionError(f"GET {path} failed") from err

    async def fetch_history(
        self,
        entity_id: str,
        *,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        minimal_response: bool = False,
        no_attributes: bool = False,
        significant_changes_only: bool = False,
    ) -> list[list[dict[str, Any]]]:
        """Fetch state history from /api/history/period.

        Returns:
            Nested list: one inner list per entity, records in chronological
            order.
        """
        path = HISTORY_PATH
        if start_time is not None:
            path = f"{path}/{start_time.isoformat()}"

        params = {"filter_entity_id": entity_id}
        if end_time is not None:
            params["end_time"] = end_time.isoformat()
        if minimal_response:
            params["minimal_response"] = "true"
        if no_attributes:
            params["no_attributes"] = "true"
        if significant_changes_only:
            params["significant_changes_only"] = "true"

        data = await self.get(path, params)
        if not isinstance(data, list):
            raise HassResponseError(200, "History response is not a list")
        return data
