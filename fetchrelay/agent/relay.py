"""Single-hop HTTP relay.

Issues one outbound request under a hard deadline and folds every outcome
(any HTTP status, network failure, timeout, malformed body) into a
RelayResult. ``Relay.execute`` never raises.
"""

from __future__ import annotations

import asyncio
import enum
import time
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from fetchrelay.shared.types import (
    DEFAULT_TIMEOUT_MS,
    RelayResult,
    RequestDescription,
    describe_validation_error,
)
from fetchrelay.shared.utils import elapsed_ms, generate_id, setup_logging, truncate

logger = setup_logging("agent.relay")

_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


class ContentKind(str, enum.Enum):
    """How a response body is decoded."""

    JSON = "json"
    TEXT = "text"
    OTHER = "other"


def classify_content_type(content_type: str | None) -> ContentKind:
    """Map a Content-Type header value onto a ContentKind."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        return ContentKind.JSON
    if media_type.startswith("text/"):
        return ContentKind.TEXT
    return ContentKind.OTHER


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


def decode_body(response: httpx.Response) -> dict[str, Any]:
    """Return ``{"data": ...}`` for parseable JSON, ``{"text": ...}`` otherwise."""
    kind = classify_content_type(response.headers.get("content-type"))
    if kind is ContentKind.JSON:
        try:
            return {"data": response.json(parse_constant=_reject_constant)}
        except ValueError:
            # malformed JSON is still a completed exchange
            return {"text": response.text}
    return {"text": response.text}


def _describe_exception(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class Relay:
    """Executes RequestDescriptions against the network.

    Every call gets its own client and its own deadline scope; nothing is
    shared between calls. ``transport`` is handed to httpx unchanged, which
    lets tests substitute ``httpx.MockTransport``.
    """

    def __init__(
        self,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.default_timeout_ms = default_timeout_ms
        self._transport = transport

    async def execute(self, request: RequestDescription | Mapping[str, Any]) -> RelayResult:
        """Relay one request and describe the outcome."""
        if not isinstance(request, RequestDescription):
            try:
                request = RequestDescription.from_payload(
                    dict(request) if isinstance(request, Mapping) else request,
                )
            except ValidationError as e:
                return RelayResult.bad_request(describe_validation_error(e))

        if not request.url:
            return RelayResult.bad_request("Missing url")

        method = request.method
        body = None if method in _BODYLESS_METHODS else request.body
        timeout_ms = self.default_timeout_ms if request.timeout_ms is None else request.timeout_ms
        log_fields = {
            "request_id": generate_id("req"),
            "method": method,
            "url": truncate(request.url),
        }
        logger.debug("Relaying request", extra={"extra_data": log_fields})

        started_at = time.monotonic()
        deadline = asyncio.timeout(timeout_ms / 1000)
        try:
            async with deadline:
                response = await self._round_trip(request.url, method, request.headers, body)
            decoded = decode_body(response)
        except TimeoutError as e:
            duration_ms = elapsed_ms(started_at)
            if deadline.expired():
                return self._failed(
                    "Timeout", f"Request timed out after {timeout_ms} ms", duration_ms, log_fields,
                )
            return self._failed("FetchError", _describe_exception(e), duration_ms, log_fields)
        except Exception as e:
            return self._failed(
                "FetchError", _describe_exception(e), elapsed_ms(started_at), log_fields,
            )

        duration_ms = elapsed_ms(started_at)
        logger.info(
            f"{method} {log_fields['url']} -> {response.status_code}",
            extra={"extra_data": {**log_fields, "status": response.status_code, "duration_ms": duration_ms}},
        )
        return RelayResult(
            ok=True,
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            duration_ms=duration_ms,
            **decoded,
        )

    def execute_sync(self, request: RequestDescription | Mapping[str, Any]) -> RelayResult:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.execute(request))

    async def _round_trip(
        self, url: str, method: str, headers: dict[str, str], body: str | None,
    ) -> httpx.Response:
        # httpx timeouts are disabled; the caller's deadline bounds the whole exchange.
        async with httpx.AsyncClient(
            transport=self._transport, follow_redirects=True, timeout=None,
        ) as client:
            return await client.request(method, url, headers=headers, content=body)

    @staticmethod
    def _failed(status_text: str, error: str, duration_ms: int, log_fields: dict) -> RelayResult:
        logger.warning(
            f"{log_fields['method']} {log_fields['url']} failed: {status_text}: {error}",
            extra={"extra_data": {**log_fields, "status_text": status_text, "duration_ms": duration_ms}},
        )
        return RelayResult.failure(status_text, error, duration_ms)
