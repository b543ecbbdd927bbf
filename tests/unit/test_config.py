"""
Runtime configuration tests.
"""
import json
from pathlib import Path

import pytest

from core.config.runtime import (
    LedgerConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
)

from fixtures.common import ADMIN


class TestDefaults:

    def test_default_values(self):
        config = RuntimeConfig()
        assert config.ledger.data_dir == "data"
        assert config.ledger.trees_file == "insurer_merkle_trees.json"
        assert config.logging.level == "INFO"
        assert config.api.port == 8000
        assert config.admin is None

    def test_paths_resolve_under_data_dir(self):
        ledger = LedgerConfig(data_dir="/var/coverpass")
        assert ledger.ledger_path == Path("/var/coverpass/ledger.json")
        assert ledger.trees_path == Path("/var/coverpass/insurer_merkle_trees.json")
        assert ledger.roles_path == Path("/var/coverpass/roles.json")
        assert ledger.events_path == Path("/var/coverpass/events.json")

    def test_absolute_file_wins(self, tmp_path):
        target = tmp_path / "elsewhere.json"
        ledger = LedgerConfig(data_dir="data", ledger_file=str(target))
        assert ledger.ledger_path == target


class TestLoading:

    def test_from_dict_partial(self):
        config = RuntimeConfig.from_dict({"ledger": {"data_dir": "x"}, "admin": ADMIN})
        assert config.ledger.data_dir == "x"
        assert config.ledger.ledger_file == "ledger.json"
        assert config.admin == ADMIN

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "coverpass.json"
        path.write_text(json.dumps({"api": {"port": 9100}}))
        assert RuntimeConfig.from_file(path).api.port == 9100

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "coverpass.yaml"
        path.write_text("logging:\n  level: DEBUG\nadmin: '%s'\n" % ADMIN)
        config = RuntimeConfig.from_file(path)
        assert config.logging.level == "DEBUG"
        assert config.admin == ADMIN

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert RuntimeConfig.from_yaml(path).ledger.data_dir == "data"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_file(tmp_path / "nope.json")

    def test_to_dict_round_trip(self):
        config = RuntimeConfig.from_dict({"ledger": {"data_dir": "d"}, "admin": ADMIN})
        assert RuntimeConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()


class TestEnvironment:

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COVERPASS_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("COVERPASS_LOG_LEVEL", "debug")
        monkeypatch.setenv("COVERPASS_API_PORT", "9001")
        monkeypatch.setenv("COVERPASS_ADMIN", ADMIN)

        config = RuntimeConfig.from_env()
        assert config.ledger.data_dir == str(tmp_path)
        assert config.logging.level == "DEBUG"
        assert config.api.port == 9001
        assert config.admin == ADMIN

    def test_overrides_layer_on_file_values(self, monkeypatch):
        base = RuntimeConfig.from_dict({"ledger": {"data_dir": "from-file"}, "api": {"port": 1}})
        monkeypatch.setenv("COVERPASS_DATA_DIR", "from-env")

        config = base.with_env_overrides()
        assert config.ledger.data_dir == "from-env"
        assert config.api.port == 1
        assert base.ledger.data_dir == "from-file"

    def test_no_overrides_returns_same(self):
        config = RuntimeConfig()
        assert config.with_env_overrides() is config


class TestDefaultConfig:

    def test_set_and_get(self):
        previous = get_default_config()
        try:
            custom = RuntimeConfig.from_dict({"admin": ADMIN})
            set_default_config(custom)
            assert get_default_config() is custom
        finally:
            set_default_config(previous)
