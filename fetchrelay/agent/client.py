"""HTTP client for talking to a running relay server.

The counterpart of ``create_relay_app``: it posts a RequestDescription and
hands back the server's RelayResult. A failure of the call itself never
escapes; it is reported as a "Network Error" result.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from fetchrelay.shared.types import DEFAULT_TIMEOUT_MS, RelayResult, RequestDescription
from fetchrelay.shared.utils import setup_logging

logger = setup_logging("agent.client")

# Headroom on top of the relayed request's own deadline.
_CLIENT_TIMEOUT_MARGIN_S = 5.0


def parse_headers_json(text: str | None) -> dict[str, Any]:
    """Leniently parse a user-typed JSON headers object. Anything else is ``{}``."""
    try:
        parsed = json.loads(text or "{}")
    except (json.JSONDecodeError, TypeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


class RelayClient:
    """Client for the relay HTTP API.

    Uses a lazily created httpx.AsyncClient; call ``close()`` when done.
    """

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch(self, request: RequestDescription) -> RelayResult:
        """Ask the server to relay ``request``."""
        timeout_ms = DEFAULT_TIMEOUT_MS if request.timeout_ms is None else request.timeout_ms
        timeout_s = timeout_ms / 1000 + _CLIENT_TIMEOUT_MARGIN_S
        try:
            client = await self._get_client()
            response = await client.post(
                f"{self.base_url}/api/agent",
                json=request.model_dump(by_alias=True, exclude_none=True),
                timeout=timeout_s,
            )
            return RelayResult.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Relay server call failed: {e}")
            return RelayResult.failure("Network Error", str(e) or type(e).__name__, 0)
