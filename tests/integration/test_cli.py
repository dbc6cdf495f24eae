from unittest.mock import patch

import pytest

from ethtool_exporter import __version__
from ethtool_exporter.main import (
    EXIT_CONFIG_ERROR,
    EXIT_ETHTOOL_ERROR,
    EXIT_SERVER_ERROR,
    apply_cli_overrides,
    main,
    parse_cli_args,
)
from ethtool_exporter.core.config_loader import Config
from ethtool_exporter.errors import ConfigError


def test_cli_version(capsys):
    with pytest.raises(SystemExit) as exc:
        parse_cli_args(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_cli_overrides():
    args = parse_cli_args(
        [
            "--web.listen-address", "127.0.0.1:9999",
            "--web.telemetry-path", "/stats",
            "--ethtool.path", "/opt/ethtool",
            "--verbose",
        ]
    )

    cfg = apply_cli_overrides(Config(), args)

    assert cfg.web.listen_address == "127.0.0.1:9999"
    assert cfg.web.telemetry_path == "/stats"
    assert cfg.ethtool.path == "/opt/ethtool"
    assert cfg.logging.level == "DEBUG"


def test_cli_rejects_relative_telemetry_path():
    with pytest.raises(ConfigError):
        apply_cli_overrides(Config(), parse_cli_args(["--web.telemetry-path", "metrics"]))


def test_missing_config_file_exits_with_config_error(tmp_path):
    assert main(["--config", str(tmp_path / "missing.yaml")]) == EXIT_CONFIG_ERROR


def test_missing_ethtool_exits_with_ethtool_error():
    with patch("ethtool_exporter.ethtool.binary.shutil.which", return_value=None):
        code = main(["--ethtool.path", "/nonexistent/ethtool"])
    assert code == EXIT_ETHTOOL_ERROR


def test_explicit_ethtool_path_does_not_fall_back_to_path(tmp_path):
    """
    --ethtool.path pointe vers un fichier absent : même si un ethtool
    valide est trouvable dans le PATH, le démarrage doit échouer.
    """
    on_path = tmp_path / "ethtool"
    on_path.write_text("#!/bin/sh\necho 'ethtool version 6.1'\n")
    on_path.chmod(0o755)

    with patch("ethtool_exporter.ethtool.binary.shutil.which", return_value=str(on_path)):
        code = main(["--ethtool.path", str(tmp_path / "missing")])

    assert code == EXIT_ETHTOOL_ERROR


def test_bind_failure_exits_with_server_error(tmp_path):
    """
    Un binaire ethtool factice valide, mais une adresse d'écoute invalide :
    le process doit sortir en erreur serveur, sans boucler.
    """
    fake = tmp_path / "ethtool"
    fake.write_text("#!/bin/sh\necho 'ethtool version 6.1'\n")
    fake.chmod(0o755)

    with patch("ethtool_exporter.main.register_exporter"):
        code = main(["--ethtool.path", str(fake), "--web.listen-address", "256.256.256.256:0"])

    assert code == EXIT_SERVER_ERROR
