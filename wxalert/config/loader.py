"""YAML config loader with snapshot persistence and runtime get/set."""

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from wxalert.config.defaults import DEFAULT_LOCATIONS
from wxalert.config.schema import AlertEngineConfig


def load_config(path: str | Path) -> AlertEngineConfig:
    """Load and validate config from a YAML file.

    If no locations are specified in the YAML, injects DEFAULT_LOCATIONS.
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not raw.get("locations"):
        raw["locations"] = [loc.model_dump() for loc in DEFAULT_LOCATIONS]

    return AlertEngineConfig(**raw)


def config_hash(config: AlertEngineConfig) -> str:
    """Deterministic SHA256 of the config. The API key is excluded."""
    data = config.model_dump_json(exclude={"provider": {"api_key"}})
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def snapshot_config(config: AlertEngineConfig, db: Any) -> str:
    """Persist a config snapshot to the database if it changed. Returns the hash."""
    h = config_hash(config)
    cursor = db.execute(
        "SELECT 1 FROM config_snapshots WHERE config_hash = ?", (h,)
    )
    if cursor.fetchone() is None:
        db.execute(
            "INSERT INTO config_snapshots (config_hash, config_json, created_at) "
            "VALUES (?, ?, CURRENT_TIMESTAMP)",
            (h, config.model_dump_json(exclude={"provider": {"api_key"}})),
        )
        db.commit()
    return h


def get_config_value(config: AlertEngineConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'thresholds.rain_threshold_mm'."""
    obj: Any = config
    for part in dotted_key.split("."):
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif isinstance(obj, dict):
            obj = obj[part]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(
    config: AlertEngineConfig, dotted_key: str, value: Any
) -> AlertEngineConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new AlertEngineConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[int(part)] if isinstance(target, list) else target[part]
    old_value = target.get(parts[-1])
    if isinstance(old_value, bool) and isinstance(value, str):
        value = value.lower() in ("1", "true", "yes", "on")
    elif isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return AlertEngineConfig(**data)


def save_config_value(path: str | Path, dotted_key: str, value: Any) -> AlertEngineConfig:
    """Set a dotted key, re-validate, and write the change back to the YAML file.

    Only the touched key is rewritten, so the rest of the file keeps its
    on-disk form. Editing a location materializes the injected default list.
    Nothing is written when validation fails.
    """
    path = Path(path)
    new_config = set_config_value(load_config(path), dotted_key, value)
    dumped = new_config.model_dump(mode="json")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    parts = dotted_key.split(".")
    if isinstance(dumped[parts[0]], list) and not raw.get(parts[0]):
        raw[parts[0]] = dumped[parts[0]]
    else:
        target = raw
        for part in parts[:-1]:
            if isinstance(target, list):
                target = target[int(part)]
            else:
                if target.get(part) is None:
                    target[part] = {}
                target = target[part]
        target[parts[-1]] = get_config_value(dumped, dotted_key)

    with open(path, "w") as f:
        yaml.safe_dump(raw, f, sort_keys=False)
    return new_config
