# tests/test_config.py
"""
Tests for concierge.config
"""

from dataclasses import FrozenInstanceError

import pytest
import yaml

from concierge.config import AppConfig, load_config


def _write(tmp_path, text, name="config.yaml"):
    p = tmp_path / name
    p.write_text(text)
    return p


def test_load_config_defaults_when_path_is_none():
    cfg = load_config(None)
    assert isinstance(cfg, AppConfig)
    assert cfg.endpoint == "development"
    assert cfg.endpoint_url is None
    assert cfg.cache_minutes == 5
    assert cfg.timeout_seconds == 2
    assert cfg.fake is False
    assert (cfg.sender, cfg.receiver) == ("221", "100")


def test_load_config_reads_options(tmp_path):
    p = _write(
        tmp_path,
        "endpoint: testing\n"
        "endpoint_url: http://localhost:8080/empi\n"
        "cache_minutes: 10\n"
        "timeout_seconds: 0.5\n"
        "fake: true\n"
        "sender: 999\n",
    )
    cfg = load_config(p)
    assert cfg.endpoint == "testing"
    assert cfg.endpoint_url == "http://localhost:8080/empi"
    assert cfg.cache_minutes == 10
    assert cfg.timeout_seconds == 0.5
    assert cfg.fake is True
    assert cfg.sender == "999"
    assert cfg.receiver == "100"


def test_load_config_ignores_unknown_keys(tmp_path):
    cfg = load_config(_write(tmp_path, "default_output_dir: outputs\n"))
    assert cfg == AppConfig()


def test_load_config_empty_file_uses_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, "", "empty.yaml"))
    assert cfg == AppConfig()


def test_load_config_zero_cache_minutes(tmp_path):
    assert load_config(_write(tmp_path, "cache_minutes: 0\n")).cache_minutes == 0


def test_load_config_non_mapping_raises_type_error(tmp_path):
    # YAML list at top level, not a mapping/dict
    p = _write(tmp_path, "- item1\n- item2\n", "bad.yaml")
    with pytest.raises(
        TypeError, match=r"^Config file must contain a mapping at top level"
    ):
        load_config(p)


@pytest.mark.parametrize("value", ["soon", "true", "[1, 2]"])
def test_load_config_non_numeric_timeout_raises_type_error(tmp_path, value):
    p = _write(tmp_path, f"timeout_seconds: {value}\n")
    with pytest.raises(TypeError, match=r"^Config option 'timeout_seconds' must be a number"):
        load_config(p)


def test_load_config_negative_cache_raises_value_error(tmp_path):
    p = _write(tmp_path, "cache_minutes: -1\n")
    with pytest.raises(ValueError, match=r"^Config option 'cache_minutes' must be non-negative"):
        load_config(p)


def test_load_config_invalid_yaml_raises_yaml_error(tmp_path):
    p = _write(tmp_path, "endpoint: [unclosed_list\n", "invalid.yaml")
    with pytest.raises(yaml.YAMLError, match=r"^while parsing a flow sequence"):
        load_config(p)


def test_appconfig_is_immutable():
    cfg = AppConfig()
    with pytest.raises(FrozenInstanceError, match=r"^cannot assign to field"):
        cfg.endpoint = "production"


@pytest.mark.parametrize("value", ["0.5", "1.0"])
def test_load_config_fractional_cache_minutes_raises_type_error(tmp_path, value):
    p = _write(tmp_path, f"cache_minutes: {value}\n")
    with pytest.raises(TypeError, match=r"^Config option 'cache_minutes' must be an integer"):
        load_config(p)


def test_load_config_zero_timeout_raises_value_error(tmp_path):
    p = _write(tmp_path, "timeout_seconds: 0\n")
    with pytest.raises(ValueError, match=r"^Config option 'timeout_seconds' must be positive"):
        load_config(p)
