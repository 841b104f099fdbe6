"""Configuration loading: defaults, config/relay.yaml, environment overrides."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from fetchrelay.shared.types import DEFAULT_TIMEOUT_MS

logger = logging.getLogger("cli")

# ── Path constants ──────────────────────────────────────────

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"
CONFIG_FILE = PROJECT_ROOT / "config" / "relay.yaml"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8480

# ── Preset targets ──────────────────────────────────────────

PRESETS: dict[str, str] = {
    "jsonplaceholder": "https://jsonplaceholder.typicode.com/todos/1",
    "github": "https://api.github.com/repos/vercel/next.js",
    "pokeapi": "https://pokeapi.co/api/v2/pokemon/1",
}


def _load_config(config_path: Path | None = None) -> dict:
    """Load relay config, layering YAML and then environment over defaults."""
    path = config_path or CONFIG_FILE
    cfg: dict = {
        "server": {"host": DEFAULT_HOST, "port": DEFAULT_PORT},
        "relay": {"timeout_ms": DEFAULT_TIMEOUT_MS},
        "presets": dict(PRESETS),
    }
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        for section in ("server", "relay", "presets"):
            if isinstance(data.get(section), dict):
                cfg[section].update(data[section])

    env = os.environ
    if env.get("FETCHRELAY_HOST"):
        cfg["server"]["host"] = env["FETCHRELAY_HOST"]
    for key, section, field in (
        ("FETCHRELAY_PORT", "server", "port"),
        ("FETCHRELAY_TIMEOUT_MS", "relay", "timeout_ms"),
    ):
        if env.get(key):
            try:
                cfg[section][field] = int(env[key])
            except ValueError:
                logger.warning(f"Ignoring non-integer {key}={env[key]!r}")
    cfg["server"]["url"] = env.get(
        "FETCHRELAY_URL", f"http://{cfg['server']['host']}:{cfg['server']['port']}",
    )
    return cfg


def _suppress_relay_logs() -> None:
    """Set relay loggers to WARNING for clean CLI output."""
    for name in ["agent.relay", "agent.server", "agent.client", "agent.main"]:
        logging.getLogger(name).setLevel(logging.WARNING)
