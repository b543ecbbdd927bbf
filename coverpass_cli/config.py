"""
Module 07 - CLI Configuration

Locates the configuration file and overlays COVERPASS_* environment
variables on top of it.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.config.runtime import RuntimeConfig


def default_config_paths() -> list[Path]:
    return [
        Path.cwd() / "coverpass.json",
        Path.cwd() / ".coverpass.json",
        Path.home() / ".config" / "coverpass" / "config.json",
    ]


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to a JSON or YAML config file

    Returns:
        Merged configuration

    Raises:
        FileNotFoundError: If config_path is given but does not exist
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for default_path in default_config_paths():
            if default_path.exists():
                config = RuntimeConfig.from_file(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(RuntimeConfig().to_dict(), indent=2) + "\n"
