from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from query.errors import TransportError

logger = logging.getLogger(__name__)


class QueryTransport(Protocol):
    """
    Request/response channel to a layer search backend.

    - HttpQueryTransport: the real endpoint over HTTP
    - DuckDBQueryTransport: the same contract answered from a local table
    """

    async def send(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...


class HttpQueryTransport:
    """Form-POSTs query parameters and decodes the JSON reply."""

    def __init__(self, client: httpx.AsyncClient | None = None, *, timeout_s: float = 10.0):
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None

    async def send(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            resp = await self._client.post(endpoint, data=params)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e
        try:
            payload = resp.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {endpoint}") from e
        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected reply type from {endpoint}: {type(payload).__name__}")
        logger.debug("search reply from %s: status=%s", endpoint, payload.get("Status"))
        return payload

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
