"""
Tests for configuration loading and validation.
"""

import json
from datetime import timedelta

import pytest

from rolegrant import Config
from rolegrant.core.config import DEFAULT_TTL, DEFAULT_USES
from rolegrant.errors import ConfigurationError, ErrorCode
from rolegrant.util.config import (
    get_bool_config,
    get_int_config,
    load_config_file,
    parse_duration_string,
)


class TestDurationParsing:
    """Test duration strings"""

    @pytest.mark.parametrize("text,expected", [
        ("30s", timedelta(seconds=30)),
        ("5m", timedelta(minutes=5)),
        ("2h", timedelta(hours=2)),
        ("4d", timedelta(days=4)),
        (" 1.5H ", timedelta(hours=1, minutes=30)),
    ])
    def test_valid_durations(self, text, expected):
        assert parse_duration_string(text) == expected

    @pytest.mark.parametrize("text", ["", "5", "h", "-1h", "2w", "1h30m"])
    def test_invalid_durations(self, text):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_duration_string(text)
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    @pytest.mark.parametrize("text", ["99999999999d", "9" * 400 + "s"])
    def test_out_of_range_durations(self, text):
        with pytest.raises(ConfigurationError):
            parse_duration_string(text)

    def test_out_of_range_numeric_ttl(self):
        """Bare hour counts beyond the timedelta range are rejected"""
        with pytest.raises(ConfigurationError):
            Config.from_dict({"default_ttl": 10 ** 20})


class TestEnvironment:
    """Test ROLEGRANT_* environment variables"""

    def test_defaults_without_environment(self, monkeypatch):
        """No variables gives the built-in defaults"""
        for key in ("STORE_PATH", "DEFAULT_USES", "DEFAULT_TTL", "CREATE_IF_MISSING",
                    "AUDIT_LOG_PATH", "METRICS_ENABLED", "LOG_LEVEL"):
            monkeypatch.delenv(f"ROLEGRANT_{key}", raising=False)

        config = Config.from_env()

        assert config.store_path == "tokens.json"
        assert config.default_uses == DEFAULT_USES == 1
        assert config.default_ttl == DEFAULT_TTL == timedelta(hours=96)
        assert config.create_if_missing is False
        assert config.audit_log_path is None
        assert config.metrics_enabled is True

    def test_values_from_environment(self, monkeypatch):
        """Variables override each setting"""
        monkeypatch.setenv("ROLEGRANT_STORE_PATH", "/tmp/t.json")
        monkeypatch.setenv("ROLEGRANT_DEFAULT_USES", "3")
        monkeypatch.setenv("ROLEGRANT_DEFAULT_TTL", "12h")
        monkeypatch.setenv("ROLEGRANT_CREATE_IF_MISSING", "yes")
        monkeypatch.setenv("ROLEGRANT_METRICS_ENABLED", "false")
        monkeypatch.setenv("ROLEGRANT_LOG_LEVEL", "debug")

        config = Config.from_env()

        assert config.store_path == "/tmp/t.json"
        assert config.default_uses == 3
        assert config.default_ttl == timedelta(hours=12)
        assert config.create_if_missing is True
        assert config.metrics_enabled is False
        assert config.validate()

    def test_bad_integer_is_configuration_error(self, monkeypatch):
        monkeypatch.setenv("ROLEGRANT_DEFAULT_USES", "many")
        with pytest.raises(ConfigurationError):
            get_int_config("default_uses", 1)

    def test_bool_spellings(self, monkeypatch):
        for value, expected in [("1", True), ("on", True), ("TRUE", True), ("0", False), ("no", False)]:
            monkeypatch.setenv("ROLEGRANT_FLAG", value)
            assert get_bool_config("flag") is expected


class TestConfigFiles:
    """Test YAML and JSON configuration files"""

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "rolegrant.yaml"
        path.write_text(
            "store_path: data/tokens.json\n"
            "default_uses: 2\n"
            "default_ttl: 4d\n"
            "audit_log_path: audit.jsonl\n",
            encoding="utf-8",
        )

        config = Config.from_file(str(path))

        assert config.store_path == "data/tokens.json"
        assert config.default_uses == 2
        assert config.default_ttl == timedelta(days=4)
        assert config.audit_log_path == "audit.jsonl"

    def test_json_file_with_numeric_ttl(self, tmp_path):
        """Bare numbers are taken as hours"""
        path = tmp_path / "rolegrant.json"
        path.write_text(json.dumps({"default_ttl": 24}), encoding="utf-8")

        assert Config.from_file(str(path)).default_ttl == timedelta(hours=24)

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(str(path)) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Config.from_file(str(tmp_path / "nope.yaml"))

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "rolegrant.toml"
        path.write_text("x = 1\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config_file(str(path))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("store_path: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config_file(str(path))

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config_file(str(path))

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_dict({"store_path": "t.json", "redis_url": "redis://"})
        assert "redis_url" in str(exc_info.value)


class TestValidation:
    """Test Config.validate"""

    def test_defaults_are_valid(self):
        assert Config().validate()

    @pytest.mark.parametrize("changes", [
        {"store_path": ""},
        {"default_uses": -1},
        {"default_uses": True},
        {"default_ttl": timedelta(seconds=-5)},
        {"audit_max_entries": 0},
        {"audit_max_entries": "x"},
        {"audit_max_entries": None},
        {"log_level": "chatty"},
    ])
    def test_invalid_settings(self, changes):
        with pytest.raises(ConfigurationError):
            Config(**changes).validate()
