"""FastAPI server exposing the relay over HTTP.

Endpoints:
  POST /api/agent  - relay the request described by the JSON body
  GET  /api/agent  - relay a plain GET of ?url=...
  GET  /health     - liveness check

Results are always returned as JSON. BadRequest results use HTTP 400,
every other outcome (including upstream failures) uses HTTP 200.
"""

from __future__ import annotations

import json as json_module
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fetchrelay.agent.relay import Relay
from fetchrelay.shared.types import RelayResult
from fetchrelay.shared.utils import setup_logging

logger = setup_logging("agent.server")


def _respond(result: RelayResult) -> JSONResponse:
    status_code = 400 if result.status_text == "BadRequest" else 200
    return JSONResponse(result.to_wire(), status_code=status_code)


def create_relay_app(relay: Relay) -> FastAPI:
    """Create the FastAPI application around a Relay."""
    app = FastAPI(title="fetch-relay")

    @app.post("/api/agent")
    async def relay_post(request: Request) -> JSONResponse:
        """Relay an arbitrary request. Unparsable bodies count as empty."""
        raw = await request.body()
        try:
            payload = json_module.loads(raw) if raw else {}
        except (json_module.JSONDecodeError, UnicodeDecodeError):
            logger.debug("Ignoring unparsable request body")
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        result = await relay.execute(payload)
        return _respond(result)

    @app.get("/api/agent")
    async def relay_get(url: Optional[str] = None) -> JSONResponse:
        """Relay a GET of ``url`` with default headers and timeout."""
        result = await relay.execute({"url": url, "method": "GET"})
        return _respond(result)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app
