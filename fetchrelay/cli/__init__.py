"""CLI package for fetch-relay.

Re-exports for tests and the pyproject.toml entry point.
"""

from fetchrelay.cli.config import (  # noqa: F401
    CONFIG_FILE,
    ENV_FILE,
    PRESETS,
    PROJECT_ROOT,
    _load_config,
    _suppress_relay_logs,
)
from fetchrelay.cli.formatting import display_result, format_body, format_meta_line  # noqa: F401
from fetchrelay.cli.main import cli  # noqa: F401
