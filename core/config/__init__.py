"""
Runtime Configuration Module

Provides configuration loading and management for CoverPass.
"""

from .runtime import (
    ApiConfig,
    LedgerConfig,
    LoggingConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ApiConfig",
    "LedgerConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "get_default_config",
    "set_default_config",
]
