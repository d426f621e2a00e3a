"""YAML config loader with runtime get/set."""

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from sundrive.config.schema import CompanionConfig


def load_config(path: str | Path | None) -> CompanionConfig:
    """Load and validate config from a YAML file.

    A missing path or empty file yields the defaults.
    """
    if path is None:
        return CompanionConfig()
    path = Path(path)
    if not path.exists():
        return CompanionConfig()
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return CompanionConfig(**raw)


def config_hash(config: CompanionConfig) -> str:
    """Compute a deterministic SHA256 hash of the config."""
    data = config.model_dump_json(indent=None)
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def get_config_value(config: CompanionConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'location.timeout_seconds'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(
    config: CompanionConfig, dotted_key: str, value: Any
) -> CompanionConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new CompanionConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    old_value = target[parts[-1]]
    if isinstance(old_value, bool) and isinstance(value, str):
        value = value.lower() in ("1", "true", "yes", "on")
    elif isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return CompanionConfig(**data)


def save_config(config: CompanionConfig, path: str | Path) -> None:
    """Write the config back to YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(json.loads(config.model_dump_json()), f, sort_keys=False)
