"""Relay server entry point.

Reads configuration from environment variables (optionally from a .env
file), wires the relay, and starts the FastAPI server.
"""

from __future__ import annotations

import os
import sys

import uvicorn
from dotenv import load_dotenv

from fetchrelay.agent.relay import Relay
from fetchrelay.agent.server import create_relay_app
from fetchrelay.shared.types import DEFAULT_TIMEOUT_MS
from fetchrelay.shared.utils import setup_logging

logger = setup_logging("agent.main")


def main() -> None:
    load_dotenv()
    host = os.environ.get("FETCHRELAY_HOST", "127.0.0.1")
    try:
        port = int(os.environ.get("FETCHRELAY_PORT", "8480"))
        timeout_ms = int(os.environ.get("FETCHRELAY_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS)))
    except ValueError as e:
        logger.error(f"Invalid numeric setting: {e}")
        sys.exit(1)

    app = create_relay_app(Relay(default_timeout_ms=timeout_ms))
    logger.info(f"Relay listening on {host}:{port} (timeout {timeout_ms} ms)")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        logger.error(f"Relay failed to start: {e}")
        sys.exit(1)
