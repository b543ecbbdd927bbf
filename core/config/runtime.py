"""
Runtime Configuration

Central configuration for ledger storage, logging, the API server and the
admin account.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass
class LedgerConfig:
    """Where the ledger and its companion files live."""
    data_dir: str = "data"
    ledger_file: str = "ledger.json"
    trees_file: str = "insurer_merkle_trees.json"
    roles_file: str = "roles.json"
    events_file: str = "events.json"

    def _resolve(self, name: str) -> Path:
        path = Path(name)
        return path if path.is_absolute() else Path(self.data_dir) / path

    @property
    def ledger_path(self) -> Path:
        return self._resolve(self.ledger_file)

    @property
    def trees_path(self) -> Path:
        return self._resolve(self.trees_file)

    @property
    def roles_path(self) -> Path:
        return self._resolve(self.roles_file)

    @property
    def events_path(self) -> Path:
        return self._resolve(self.events_file)


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class ApiConfig:
    """Configuration for the HTTP API server."""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for CoverPass.

    Can be loaded from:
    - Environment variables
    - JSON or YAML file
    - Programmatic construction
    """
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    admin: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - COVERPASS_DATA_DIR: Directory holding the data files
        - COVERPASS_LEDGER_FILE: Root-record chain file
        - COVERPASS_TREES_FILE: Insurer tree store file
        - COVERPASS_ROLES_FILE: Role registry file
        - COVERPASS_EVENTS_FILE: Event log file
        - COVERPASS_ADMIN: Admin account address
        - COVERPASS_LOG_LEVEL: Logging level (DEBUG, INFO, ...)
        - COVERPASS_LOG_FILE: Optional log file
        - COVERPASS_API_HOST / COVERPASS_API_PORT: API bind address
        """
        overrides: dict[str, Any] = {}

        # Ledger settings
        for env_var, key in (
            ("COVERPASS_DATA_DIR", "data_dir"),
            ("COVERPASS_LEDGER_FILE", "ledger_file"),
            ("COVERPASS_TREES_FILE", "trees_file"),
            ("COVERPASS_ROLES_FILE", "roles_file"),
            ("COVERPASS_EVENTS_FILE", "events_file"),
        ):
            if os.getenv(env_var):
                overrides.setdefault("ledger", {})[key] = os.getenv(env_var)

        # Logging settings
        if os.getenv("COVERPASS_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv("COVERPASS_LOG_LEVEL").upper()
        if os.getenv("COVERPASS_LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv("COVERPASS_LOG_FILE")

        # API settings
        if os.getenv("COVERPASS_API_HOST"):
            overrides.setdefault("api", {})["host"] = os.getenv("COVERPASS_API_HOST")
        if os.getenv("COVERPASS_API_PORT"):
            overrides.setdefault("api", {})["port"] = int(os.getenv("COVERPASS_API_PORT"))

        # Admin
        if os.getenv("COVERPASS_ADMIN"):
            overrides["admin"] = os.getenv("COVERPASS_ADMIN")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON or YAML file, picked by suffix."""
        path = Path(path)
        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        ledger_data = data.get("ledger", {})
        logging_data = data.get("logging", {})
        api_data = data.get("api", {})

        ledger = LedgerConfig(**ledger_data) if ledger_data else LedgerConfig()
        log = LoggingConfig(**logging_data) if logging_data else LoggingConfig()
        api = ApiConfig(**api_data) if api_data else ApiConfig()

        return cls(
            ledger=ledger,
            logging=log,
            api=api,
            admin=data.get("admin"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        for section in ("ledger", "logging", "api"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)

        if "admin" in overrides:
            new_config.admin = overrides["admin"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "ledger": {
                "data_dir": self.ledger.data_dir,
                "ledger_file": self.ledger.ledger_file,
                "trees_file": self.ledger.trees_file,
                "roles_file": self.ledger.roles_file,
                "events_file": self.ledger.events_file,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "cors_origins": list(self.api.cors_origins),
            },
            "admin": self.admin,
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
