"""
Module 08 - API Dependencies

Dependency injection for the API.
Provides the runtime config and the shared CoverPass service.
"""

from __future__ import annotations

import logging
from pathlib import Path

from core.config.runtime import RuntimeConfig
from core.coverpass import CoverPassService

logger = logging.getLogger(__name__)


_service: CoverPassService | None = None


def load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./coverpass.json
      2. ./.coverpass.json
      3. ~/.config/coverpass/config.json

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    search_paths = [
        Path.cwd() / "coverpass.json",
        Path.cwd() / ".coverpass.json",
        Path.home() / ".config" / "coverpass" / "config.json",
    ]

    config: RuntimeConfig | None = None

    for path in search_paths:
        if path.exists():
            config = RuntimeConfig.from_file(path)
            logger.info(f"Loaded config from {path}")
            break

    if config is None:
        # No config file found, start with defaults
        config = RuntimeConfig()

    # Always apply environment variable overrides
    return config.with_env_overrides()


def get_service() -> CoverPassService:
    """
    The service shared by every request.

    Built lazily from the runtime config; the ledger lock inside it is what
    serializes concurrent publishes.
    """
    global _service
    if _service is None:
        _service = CoverPassService.from_config(load_runtime_config())
    return _service


def set_service(service: CoverPassService | None) -> None:
    """Replace the shared service (tests use this with temporary data dirs)."""
    global _service
    _service = service
