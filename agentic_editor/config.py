"""
Configuration — loads settings from .agentic_editor.yaml, environment
variables, and built-in defaults (in that priority order: CLI args > env >
YAML > defaults).
"""

import logging
import os

import yaml

logger = logging.getLogger(__name__)


_DEFAULTS = {
    "checkpoint_capacity": 10,
    "change_ratio_threshold": 0.5,
    "metrics_enabled": False,
    "metrics_root": "",
    "log_dir": ".agentic_editor/logs",
    "color": True,
}

_ENV_PREFIX = "AGENTIC_EDITOR_"

# Config file search locations
_CONFIG_FILENAMES = [".agentic_editor.yaml", ".agentic_editor.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("[Config] Ignoring unreadable config %s: %s", path, exc)
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables (``AGENTIC_EDITOR_<KEY>``)
    3. .agentic_editor.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(key: str, cast=str):
            env_val = os.getenv(_ENV_PREFIX + key.upper())
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[key]

        def _get_bool(key: str) -> bool:
            env_val = os.getenv(_ENV_PREFIX + key.upper())
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[key]

        self.CHECKPOINT_CAPACITY = _get("checkpoint_capacity", cast=int)
        self.CHANGE_RATIO_THRESHOLD = _get("change_ratio_threshold", cast=float)

        self.METRICS_ENABLED = _get_bool("metrics_enabled")
        self.METRICS_ROOT = _get("metrics_root") or os.getcwd()

        self.LOG_DIR = _get("log_dir")
        self.COLOR = _get_bool("color")

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
