"""
Config loader: reads config/default.yaml with environment variable overrides.

Usage:
    from config.loader import config

    config.get('server.port')                   # -> 3000
    config.get('assistant.min_request_interval_ms')  # -> 2000
    config['chat.prompt_template']              # dict-style access also works
    config.is_development()                     # -> True/False

Environment variable override rules:
  - Direct named overrides (highest priority):
      PORT                 -> server.port
      HOST                 -> server.host
      APP_ENV              -> server.env
      LOG_LEVEL            -> logging.level
      CHAT_MODEL           -> chat.providers.huggingface.default_model
      STT_MODEL            -> stt.providers.whisper.model
      ASSISTANT_ENDPOINT   -> assistant.endpoint
      MIN_REQUEST_INTERVAL_MS -> assistant.min_request_interval_ms
  - Generic double-underscore override:
      SERVER__PORT=5002    -> server.port = 5002 (cast to the type of the YAML value;
                              lists are comma-separated)

Provider tokens (HF_TOKEN) are not mapped here; default.yaml references them
as ${HF_TOKEN} placeholders which the provider registry resolves.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Path to the default config file (same directory as this module)
_DEFAULT_YAML = Path(__file__).parent / "default.yaml"

# Named env var → dotted config key mappings
_ENV_MAP = {
    "PORT":                    ("server.port",                              int),
    "HOST":                    ("server.host",                              str),
    "APP_ENV":                 ("server.env",                               str),
    "LOG_LEVEL":               ("logging.level",                            str),
    "CHAT_MODEL":              ("chat.providers.huggingface.default_model", str),
    "STT_MODEL":               ("stt.providers.whisper.model",              str),
    "ASSISTANT_ENDPOINT":      ("assistant.endpoint",                       str),
    "MIN_REQUEST_INTERVAL_MS": ("assistant.min_request_interval_ms",        int),
}


def _cast(value: str, cast_type) -> Any:
    """Cast a string env var value to the target type."""
    if cast_type == "bool":
        return value.lower() in ("true", "1", "yes")
    if cast_type == int:
        return int(value)
    if cast_type == float:
        return float(value)
    return value


def _cast_like(value: str, existing: Any) -> Any:
    """Cast a string env var value to the type of the config value it replaces."""
    if isinstance(existing, bool):
        return _cast(value, "bool")
    if isinstance(existing, int):
        try:
            return int(value)
        except ValueError:
            return float(value)
    if isinstance(existing, float):
        return float(value)
    if isinstance(existing, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def _deep_set(data: dict, dotted_key: str, value: Any) -> None:
    """Set a value in a nested dict using a dotted key path."""
    parts = dotted_key.split(".")
    node = data
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value


def _deep_get(data: dict, dotted_key: str, default: Any = None) -> Any:
    """Get a value from a nested dict using a dotted key path."""
    node = data
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, returning empty dict if missing."""
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _apply_env_overrides(data: dict) -> None:
    """Apply named env var overrides to the config dict (in-place)."""
    for env_key, (config_key, cast_type) in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is not None:
            _deep_set(data, config_key, _cast(value, cast_type))

    # Generic double-underscore overrides: SERVER__PORT=5002 → server.port
    for env_key, value in os.environ.items():
        if "__" in env_key:
            parts = env_key.lower().split("__", 1)
            if len(parts) == 2:
                dotted = f"{parts[0]}.{parts[1]}"
                existing = _deep_get(data, dotted)
                # Only override scalar or list keys that already exist in the loaded config
                if existing is not None and not isinstance(existing, dict):
                    _deep_set(data, dotted, _cast_like(value, existing))


class Config:
    """Config accessor loaded from YAML + env overrides."""

    def __init__(self, yaml_path: Path = _DEFAULT_YAML):
        self._yaml_path = Path(yaml_path)
        self._data = _load_yaml(self._yaml_path)
        _apply_env_overrides(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dotted key. Returns default if not found."""
        return _deep_get(self._data, key, default)

    def __getitem__(self, key: str) -> Any:
        value = _deep_get(self._data, key)
        if value is None:
            raise KeyError(f"Config key not found: {key}")
        return value

    def __contains__(self, key: str) -> bool:
        return _deep_get(self._data, key) is not None

    def section(self, key: str) -> dict:
        """Return a copy of a nested section (empty dict if absent)."""
        value = _deep_get(self._data, key, {})
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def as_dict(self) -> dict:
        """Return a copy of the full config dict."""
        return copy.deepcopy(self._data)

    def is_development(self) -> bool:
        return str(self.get("server.env", "production")).lower() == "development"

    def reload(self) -> None:
        """Reload config from the YAML file and re-apply env overrides."""
        self._data = _load_yaml(self._yaml_path)
        _apply_env_overrides(self._data)


# Module-level singleton, import this everywhere:
#   from config.loader import config
config = Config()
