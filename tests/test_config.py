"""Tests for bridge configuration."""

import json
from pathlib import Path

import pytest

from findmy_bridge.config import (
    DEFAULT_FINDMY_DIR,
    BridgeConfig,
    config_from_env,
    default_helper_port,
    load_config,
    load_config_file,
)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return tmp_path / "config.json"


class TestHelperPort:
    def test_first_user(self):
        assert default_helper_port(501) == 45670

    def test_offset_by_uid(self):
        assert default_helper_port(502) == 45671

    def test_clamped_low(self):
        assert default_helper_port(0) == 45670

    def test_clamped_high(self):
        assert default_helper_port(100000) == 65535


class TestBridgeConfig:
    def test_defaults(self):
        config = BridgeConfig(helper_port=45670, macos_version=14)
        assert config.findmy_dir == DEFAULT_FINDMY_DIR
        assert config.enable_private_api is False
        assert config.enable_contacts_private_api is False
        assert config.http_port == 1234
        assert config.rpc_timeout == 30.0
        assert (config.quit_delay, config.launch_delay, config.show_delay) == (3.0, 5.0, 15.0)

    def test_helper_port_resolved(self):
        assert BridgeConfig(macos_version=14).helper_port is not None

    def test_paths_expanded(self):
        config = BridgeConfig(findmy_dir="~/findmy", log_dir="~/logs", macos_version=14)
        assert config.findmy_dir == Path.home() / "findmy"
        assert config.log_dir == Path.home() / "logs"

    def test_private_api_supported(self):
        assert BridgeConfig(macos_version=10).private_api_supported is False
        assert BridgeConfig(macos_version=11).private_api_supported is True
        assert BridgeConfig(macos_version=15).private_api_supported is True

    def test_non_mac_is_unsupported(self):
        assert BridgeConfig(macos_version=0).private_api_supported is False

    def test_invalid_timeout(self):
        with pytest.raises(ValueError, match="rpc_timeout"):
            BridgeConfig(rpc_timeout=0, macos_version=14)

    def test_negative_delay(self):
        with pytest.raises(ValueError, match="delays"):
            BridgeConfig(show_delay=-1, macos_version=14)


class TestLoadConfigFile:
    def test_missing_file(self, tmp_path: Path):
        assert load_config_file(tmp_path / "nope.json") == {}

    def test_invalid_json(self, config_file: Path):
        config_file.write_text("{not json")
        assert load_config_file(config_file) == {}

    def test_not_an_object(self, config_file: Path):
        config_file.write_text("[1, 2]")
        assert load_config_file(config_file) == {}

    def test_reads_known_keys(self, config_file: Path):
        config_file.write_text(
            json.dumps(
                {
                    "enable_private_api": True,
                    "http_port": "8080",
                    "show_delay": 2,
                    "findmy_dir": "/tmp/findmy",
                    "unknown": "ignored",
                }
            )
        )

        values = load_config_file(config_file)

        assert values == {
            "enable_private_api": True,
            "http_port": 8080,
            "show_delay": 2.0,
            "findmy_dir": Path("/tmp/findmy"),
        }

    def test_invalid_value_ignored(self, config_file: Path):
        config_file.write_text(json.dumps({"http_port": "eighty", "app_name": "Find My"}))
        assert load_config_file(config_file) == {"app_name": "Find My"}


class TestConfigFromEnv:
    def test_reads_prefixed_variables(self):
        env = {
            "FINDMY_ENABLE_CONTACTS_PRIVATE_API": "yes",
            "FINDMY_RPC_TIMEOUT": "5",
            "FINDMY_HELPER_PORT": "45999",
            "OTHER": "1",
        }
        assert config_from_env(env) == {
            "enable_contacts_private_api": True,
            "rpc_timeout": 5.0,
            "helper_port": 45999,
        }

    def test_false_values(self):
        assert config_from_env({"FINDMY_ENABLE_PRIVATE_API": "0"}) == {
            "enable_private_api": False
        }


class TestLoadConfig:
    def test_env_overrides_file(self, config_file: Path):
        config_file.write_text(json.dumps({"http_port": 9000, "app_name": "FindMy"}))

        config = load_config(
            config_file, {"FINDMY_HTTP_PORT": "9100", "FINDMY_MACOS_VERSION": "14"}
        )

        assert config.http_port == 9100
        assert config.app_name == "FindMy"
        assert config.macos_version == 14

    def test_defaults_without_sources(self, tmp_path: Path):
        config = load_config(tmp_path / "missing.json", {"FINDMY_MACOS_VERSION": "13"})
        assert config.http_port == 1234
        assert config.private_api_supported is True
