from pathlib import Path

import pytest

from ethtool_exporter.core.config_loader import DEFAULT_ETHTOOL_CANDIDATES, ConfigLoader
from ethtool_exporter.errors import ConfigError


def test_config_loader_defaults_without_file():
    cfg = ConfigLoader().load()

    assert cfg.web.listen_address == ":9490"
    assert cfg.web.telemetry_path == "/metrics"
    assert cfg.ethtool.path is None
    assert cfg.ethtool.candidates == DEFAULT_ETHTOOL_CANDIDATES
    assert cfg.ethtool.min_version == "3.0"
    assert cfg.ethtool.timeout_seconds is None
    assert cfg.interfaces.sysfs_dir == "/sys/class/net"
    assert cfg.interfaces.include == []
    assert cfg.interfaces.exclude_virtual is False
    assert cfg.logging.level == "INFO"


def test_config_loader_ok(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("""
web:
  listen_address: "127.0.0.1:9999"
ethtool:
  path: /opt/ethtool
  min_version: null
  timeout_seconds: 2
interfaces:
  exclude: ["^veth"]
  only_up: true
logging:
  level: DEBUG
  format: json
""")

    cfg = ConfigLoader(config_path=config_path).load()

    assert cfg.web.listen_address == "127.0.0.1:9999"
    assert cfg.web.telemetry_path == "/metrics"
    assert cfg.ethtool.path == "/opt/ethtool"
    assert cfg.ethtool.min_version is None
    assert cfg.ethtool.timeout_seconds == 2.0
    assert cfg.interfaces.exclude == ["^veth"]
    assert cfg.interfaces.only_up is True
    assert cfg.logging.format == "json"


def test_config_loader_missing_file():
    loader = ConfigLoader(config_path=Path("missing.yaml"))
    with pytest.raises(ConfigError):
        loader.load()


def test_config_loader_rejects_unknown_key(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("web:\n  listen_adress: ':1'\n")

    with pytest.raises(ConfigError, match="web"):
        ConfigLoader(config_path=config_path).load()


def test_config_loader_rejects_bad_telemetry_path(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("web:\n  telemetry_path: metrics\n")

    with pytest.raises(ConfigError):
        ConfigLoader(config_path=config_path).load()


def test_config_loader_non_mapping_root(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- a\n- b\n")

    with pytest.raises(ConfigError):
        ConfigLoader(config_path=config_path).load()


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ETHTOOL_EXPORTER_LISTEN_ADDRESS", ":9100")
    monkeypatch.setenv("ETHTOOL_EXPORTER_ETHTOOL_PATH", "/custom/ethtool")
    monkeypatch.setenv("ETHTOOL_EXPORTER_SYSFS_DIR", "/tmp/net")
    monkeypatch.setenv("ETHTOOL_EXPORTER_TIMEOUT", "1.5")

    cfg = ConfigLoader().load()

    assert cfg.web.listen_address == ":9100"
    assert cfg.ethtool.path == "/custom/ethtool"
    assert cfg.interfaces.sysfs_dir == "/tmp/net"
    assert cfg.ethtool.timeout_seconds == 1.5


def test_env_override_invalid_timeout_is_ignored(monkeypatch):
    monkeypatch.setenv("ETHTOOL_EXPORTER_TIMEOUT", "abc")
    assert ConfigLoader().load().ethtool.timeout_seconds is None


def test_env_override_relative_telemetry_path_is_rejected(monkeypatch):
    """Les overrides env sont validés par le schéma, comme le fichier."""
    monkeypatch.setenv("ETHTOOL_EXPORTER_TELEMETRY_PATH", "metrics")

    with pytest.raises(ConfigError) as exc:
        ConfigLoader().load()

    assert "telemetry_path" in str(exc.value)


def test_env_override_negative_timeout_is_rejected(monkeypatch):
    monkeypatch.setenv("ETHTOOL_EXPORTER_TIMEOUT", "-1")

    with pytest.raises(ConfigError) as exc:
        ConfigLoader().load()

    assert "timeout_seconds" in str(exc.value)
