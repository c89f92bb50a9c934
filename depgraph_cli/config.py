"""Configuration paths and defaults for DepGraph CLI."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("DEPGRAPH_HOME", str(Path.home() / ".depgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
DEFAULT_EXPORT_NAME = "dependency-graph.json"

from .config_manager import load_analysis_config, load_provider_config  # noqa: E402

_provider_config = load_provider_config()
_analysis_config = load_analysis_config()

# Provider connection: set via `dg config set-provider`
PROVIDER_URL = _provider_config["base_url"]
PROVIDER_TIMEOUT = float(_provider_config["timeout"])
PROVIDER_WORKERS = int(_provider_config["workers"])

# Analysis knobs: stored under [analysis] in config.toml
ROOT_ID = _analysis_config["root_id"]
ROOT_OBJECT = _analysis_config["root_object"]
MAX_DEPTH = int(_analysis_config["max_depth"])
CHILD_DEPTH = int(_analysis_config["child_depth"])
DEPENDENCY_THRESHOLD = int(_analysis_config["dependency_threshold"])


def ensure_base_dirs() -> None:
    """Create the base directory for local configuration if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
