"""
YAML → typed config loader.

Loads progression constants from progression.yaml (bundled with the
package) and optionally merges user overrides from
~/.overload-planner/progression.yaml.

Usage:
    from overload_planner.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    deload = cfg.get("goals", {}).get("STRENGTH", {}).get("deload_percent", 0.05)

If the bundled YAML is missing, lookups fall back to the Python defaults
from config.py.  If the user override file exists but has parse errors, a
warning is issued and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR_NAME = ".overload-planner"
CONFIG_FILE_NAME = "progression.yaml"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; warn and return {} if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        warnings.warn(f"Ignoring progression config {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        warnings.warn(f"Ignoring progression config {path}: top level must be a mapping")
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled progression.yaml, or None if not found."""
    ref = importlib.resources.files("overload_planner").joinpath(CONFIG_FILE_NAME)
    if ref.is_file():
        return Path(str(ref))
    return None


def get_user_yaml_path() -> Path | None:
    """Return ~/.overload-planner/progression.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / CONFIG_DIR_NAME / CONFIG_FILE_NAME
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge progression configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/overload_planner/progression.yaml
    2. User override at ~/.overload-planner/progression.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config
