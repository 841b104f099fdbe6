"""CLI entry point for fetch-relay.

  fetch [URL]              Relay one request and print the result
  presets                  List preset target URLs
  serve                    Run the relay HTTP API
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from fetchrelay.cli import config as cli_config
from fetchrelay.cli.config import _load_config, _suppress_relay_logs
from fetchrelay.cli.formatting import display_result, echo_ok, echo_warn

logger = logging.getLogger("cli")


def _parse_header_args(values: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated ``-H "Name: value"`` options into a dict."""
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            echo_warn(f"Ignoring malformed header {raw!r} (expected 'Name: value')")
            continue
        headers[name.strip()] = value.strip()
    return headers


# ── Main group ───────────────────────────────────────────────

@click.group()
@click.pass_context
def cli(ctx):
    """fetch-relay -- relay one HTTP request and describe the response."""
    from dotenv import load_dotenv

    load_dotenv(cli_config.ENV_FILE)
    _suppress_relay_logs()
    ctx.obj = _load_config(cli_config.CONFIG_FILE)


# ── fetch ────────────────────────────────────────────────────

@cli.command()
@click.argument("url", required=False, default=None)
@click.option("-X", "--method", default="GET", show_default=True, help="HTTP method")
@click.option("-H", "--header", "header_args", multiple=True, help="Header as 'Name: value' (repeatable)")
@click.option("--headers", "headers_json", default=None, help="Headers as a JSON object")
@click.option("-d", "--data", "body", default=None, help="Raw request body (ignored for GET/HEAD)")
@click.option("--timeout-ms", type=int, default=None, help="Deadline for the whole request")
@click.option("--preset", default=None, help="Use a preset URL (see `presets`)")
@click.option("--remote", "remote_url", is_flag=False, flag_value="", default=None,
              help="Relay through a running server (default FETCHRELAY_URL)")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON")
@click.option("--no-headers", is_flag=True, help="Hide response headers")
@click.pass_obj
def fetch(cfg, url, method, header_args, headers_json, body, timeout_ms, preset,
          remote_url, as_json, no_headers):
    """Relay one request and print the normalized result.

    Exits 0 when the exchange completed (whatever the HTTP status), 1 otherwise.
    """
    from fetchrelay.agent.client import parse_headers_json
    from fetchrelay.shared.types import RequestDescription

    if preset:
        presets = cfg["presets"]
        if preset not in presets:
            raise click.BadParameter(
                f"unknown preset {preset!r} (choose from {', '.join(sorted(presets))})",
                param_hint="--preset",
            )
        url = url or presets[preset]

    headers = parse_headers_json(headers_json) if headers_json else {}
    headers.update(_parse_header_args(header_args))
    request = RequestDescription(
        url=url,
        method=method,
        headers=headers,
        body=body,
        timeout_ms=timeout_ms if timeout_ms is not None else cfg["relay"]["timeout_ms"],
    )

    if remote_url is not None:
        result = asyncio.run(_fetch_remote(remote_url or cfg["server"]["url"], request))
    else:
        from fetchrelay.agent.relay import Relay

        result = Relay(default_timeout_ms=cfg["relay"]["timeout_ms"]).execute_sync(request)

    if as_json:
        click.echo(json.dumps(result.to_wire(), indent=2, ensure_ascii=False))
    else:
        display_result(result, show_headers=not no_headers)
    sys.exit(0 if result.ok else 1)


async def _fetch_remote(base_url: str, request):
    from fetchrelay.agent.client import RelayClient

    client = RelayClient(base_url)
    try:
        return await client.fetch(request)
    finally:
        await client.close()


# ── presets ──────────────────────────────────────────────────

@cli.command()
@click.pass_obj
def presets(cfg):
    """List preset target URLs."""
    for name, target in sorted(cfg["presets"].items()):
        click.echo(f"  {name:<16} {target}")


# ── serve ────────────────────────────────────────────────────

@cli.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", type=int, default=None, help="Bind port")
@click.pass_obj
def serve(cfg, host, port):
    """Run the relay HTTP API."""
    import uvicorn

    from fetchrelay.agent.relay import Relay
    from fetchrelay.agent.server import create_relay_app

    host = host or cfg["server"]["host"]
    port = port or cfg["server"]["port"]
    app = create_relay_app(Relay(default_timeout_ms=cfg["relay"]["timeout_ms"]))
    echo_ok(f"Relay listening on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="warning")
