import sys

from ethtool_exporter.ethtool.executor import CommandExecutor, CommandResult


def test_executor_captures_stdout():
    """
    Vérifie qu'une commande simple est exécutée et que stdout est
    renvoyé brut (les lignes sont conservées).
    """
    executor = CommandExecutor(timeout=10.0)

    result = executor.run([sys.executable, "-c", "print('NIC statistics:'); print('  rx: 1')"])

    assert isinstance(result, CommandResult)
    assert result.ok
    assert result.return_code == 0
    assert result.stdout.splitlines() == ["NIC statistics:", "  rx: 1"]


def test_executor_non_zero_exit_is_returned():
    executor = CommandExecutor(timeout=10.0)

    result = executor.run(
        [sys.executable, "-c", "import sys; sys.stderr.write('Operation not supported\\n'); sys.exit(94)"]
    )

    assert result is not None
    assert not result.ok
    assert result.return_code == 94
    assert result.stderr == "Operation not supported"


def test_executor_missing_binary_returns_none():
    executor = CommandExecutor()
    assert executor.run(["/nonexistent/ethtool", "-S", "eth0"]) is None


def test_executor_timeout_returns_none(caplog):
    executor = CommandExecutor(timeout=0.2)

    result = executor.run([sys.executable, "-c", "import time; time.sleep(5)"])

    assert result is None
    assert "expirée" in caplog.text
