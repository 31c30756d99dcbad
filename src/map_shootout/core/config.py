"""Configuration loading and saving utilities.

Supports YAML and JSON configuration files with schema validation.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from map_shootout.core.schemas import ShootoutConfig


def load_config(path: Path | str) -> ShootoutConfig:
    """Load and validate a shootout configuration file.

    Args:
        path: Path to YAML or JSON configuration file

    Returns:
        Validated ShootoutConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported
        pydantic.ValidationError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    # An empty YAML document means "all defaults"
    return ShootoutConfig.model_validate(data or {})


def save_config(config: ShootoutConfig, path: Path | str) -> Path:
    """Write a configuration to YAML or JSON, chosen by file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".yaml", ".yml", ".json"):
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")
    data = config.model_dump(mode="json")

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        if suffix == ".json":
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, sort_keys=False)
    return path
