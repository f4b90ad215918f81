"""Primary JSON transport over httpx.

Why: One pooled AsyncClient per backend; each call carries its own timeout
so a hung model load cannot stall the whole pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from sop_assistant.domain.errors import BackendError, ParseError, TransportError, TransportTimeout

logger = logging.getLogger(__name__)


def decode_json_object(body: str) -> dict[str, Any]:
    """Decode a backend reply; an ``error`` field becomes a BackendError."""
    try:
        data = json.loads(body)
    except json.JSONDecodeError as ex:
        raise ParseError(f"invalid JSON from backend: {ex}") from ex
    if not isinstance(data, dict):
        raise ParseError(f"expected a JSON object, got {type(data).__name__}")
    if data.get("error"):
        raise BackendError(str(data["error"]))
    return data


class HttpJsonTransport:
    name = "http"

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient()
        return self._client

    async def post_json(self, path: str, payload: dict[str, Any], timeout: float) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = await self._get_client().post(url, json=payload, timeout=timeout)
        except httpx.TimeoutException as ex:
            raise TransportTimeout(f"POST {url} timed out after {timeout}s") from ex
        except httpx.HTTPError as ex:
            raise TransportError(f"POST {url} failed: {ex}") from ex

        if resp.status_code >= 400:
            raise BackendError(
                f"POST {url} returned {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return decode_json_object(resp.text)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
