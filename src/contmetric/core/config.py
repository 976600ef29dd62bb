"""Monitor configuration files.

Besides the sampling interval and the stats to collect, a config file can
relocate the cgroup and procfs pseudo-files, for a non-default mount point or
a fake tree in tests. YAML and JSON are accepted; keys left out keep their
MonitorConfig defaults.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from contmetric.core.schemas import MonitorConfig


def load_config(path: Path | str) -> MonitorConfig:
    """Load a monitor configuration file.

    Args:
        path: ``.yaml``, ``.yml`` or ``.json`` file

    Returns:
        MonitorConfig, with defaults for missing keys

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

    # An empty YAML file means "all defaults"
    return MonitorConfig.model_validate(data or {})
