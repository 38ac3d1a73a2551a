# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/config/loader.py

import logging
import os
import yaml
from pathlib import Path

from .models import HoistSettings

log = logging.getLogger("hoist")

DEFAULT_PROFILE = "default"


def config_dir() -> Path:
    """
    Directory holding one YAML file per profile.

    1. HOIST_CONFIG_DIR environment variable (explicit override)
    2. ~/.config/hoist
    """
    env = os.environ.get("HOIST_CONFIG_DIR")
    if env:
        return Path(env)
    return Path.home() / ".config" / "hoist"


def profile_path(profile: str = DEFAULT_PROFILE, base_dir: Path | None = None) -> Path:
    return (base_dir or config_dir()) / f"{profile}.yaml"


def _load_yaml(path: Path) -> dict:
    """Load a YAML mapping as written. Values like $HOME are kept literally."""
    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: str | Path) -> HoistSettings:
    """
    Load and validate a profile written by ``hoist init``.
    """
    path = Path(path)
    return HoistSettings.model_validate(_load_yaml(path))
