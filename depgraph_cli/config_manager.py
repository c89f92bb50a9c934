"""Configuration manager for DepGraph CLI using TOML files."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger(__name__)


def _config_file() -> Path:
    # Resolved lazily so tests can redirect DEPGRAPH_HOME.
    from .config import CONFIG_FILE

    return CONFIG_FILE


DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "provider": {
        "base_url": "http://127.0.0.1:8080/api",
        "timeout": 10.0,
        "workers": 4,
        "base_classes_path": "/base-classes",
        "class_info_path": "/class-info",
        "child_classes_path": "/child-classes",
    },
    "analysis": {
        "root_id": "AppModule",
        "root_object": "java.lang.Object",
        "max_depth": 5,
        "child_depth": 3,
        "dependency_threshold": 5,
    },
}


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections); empty dict if unavailable."""
    config_file = path or _config_file()
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read config %s: %s", config_file, exc)
        return {}


def _save_full_config(config: Dict[str, Any], path: Optional[Path] = None) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    config_file = path or _config_file()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", config_file, exc)
        return False


def _section(name: str, path: Optional[Path] = None) -> Dict[str, Any]:
    merged = copy.deepcopy(DEFAULT_CONFIG[name])
    stored = load_full_config(path).get(name, {})
    if isinstance(stored, dict):
        merged.update({k: v for k, v in stored.items() if k in merged})
    return merged


def load_provider_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Provider settings from ``[provider]`` merged over the defaults."""
    return _section("provider", path)


def load_analysis_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Analysis settings from ``[analysis]`` merged over the defaults."""
    return _section("analysis", path)


def save_config(
    base_url: str,
    timeout: Optional[float] = None,
    workers: Optional[int] = None,
    path: Optional[Path] = None,
) -> bool:
    """Save provider connection settings, preserving other sections.

    Returns:
        True if saved successfully, False otherwise
    """
    config = load_full_config(path)
    provider = config.get("provider", {})
    provider["base_url"] = base_url.rstrip("/")
    if timeout is not None:
        provider["timeout"] = float(timeout)
    if workers is not None:
        provider["workers"] = int(workers)
    config["provider"] = provider
    return _save_full_config(config, path)


def save_analysis_setting(key: str, value: Any, path: Optional[Path] = None) -> bool:
    """Persist a single ``[analysis]`` key.

    Raises:
        KeyError: if *key* is not a known analysis setting.
    """
    if key not in DEFAULT_CONFIG["analysis"]:
        raise KeyError(key)
    config = load_full_config(path)
    analysis = config.get("analysis", {})
    default = DEFAULT_CONFIG["analysis"][key]
    analysis[key] = type(default)(value)
    config["analysis"] = analysis
    return _save_full_config(config, path)


def reset_config(path: Optional[Path] = None) -> bool:
    """Remove the config file, returning to defaults."""
    config_file = path or _config_file()
    if not config_file.exists():
        return False
    config_file.unlink()
    return True
