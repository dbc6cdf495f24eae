# tests/integration/test_exporter_end_to_end.py

from __future__ import annotations

import os
import sys
import threading

import requests
from prometheus_client import CollectorRegistry

from ethtool_exporter.core.config_loader import Config
from ethtool_exporter.ethtool.binary import resolve_ethtool
from ethtool_exporter.main import build_exporter, register_exporter
from ethtool_exporter.web.server import create_server


FAKE_ETHTOOL = """#!{python}
import sys

if sys.argv[1:] == ["--version"]:
    print("ethtool version 6.1")
    sys.exit(0)

iface = sys.argv[-1]
if iface == "eth0":
    print("NIC statistics:")
    print("     rx_packets: 1234")
    print("     rx_errors: 42")
    print("     driver info: xyz")
    print("     tx-queue-0.packets: 7")
    sys.exit(0)

sys.stderr.write("no stats available\\n")
sys.exit(94)
"""


def _fake_environment(tmp_path):
    ethtool = tmp_path / "ethtool"
    ethtool.write_text(FAKE_ETHTOOL.format(python=sys.executable))
    ethtool.chmod(0o755)

    devices = tmp_path / "devices"
    net = tmp_path / "net"
    net.mkdir()
    for name in ("eth0", "lo"):
        (devices / name).mkdir(parents=True)
        os.symlink(devices / name, net / name)

    return ethtool, net


def test_exporter_end_to_end(tmp_path):
    """
    Test d'intégration "réel" :

    - faux binaire ethtool (script) + faux /sys/class/net (eth0, lo)
    - résolution et vérification de version du binaire
    - serveur HTTP sur un port libre
    - scrape avec requests : eth0 exposée, lo absente
    """
    ethtool, net = _fake_environment(tmp_path)

    config = Config()
    config.interfaces.sysfs_dir = str(net)
    config.web.listen_address = "127.0.0.1:0"
    config.web.telemetry_path = "/metrics"

    binary = resolve_ethtool([str(ethtool)], config.ethtool.min_version)
    assert binary.version == "6.1"

    registry = CollectorRegistry()
    register_exporter(build_exporter(config, binary), binary, registry=registry)

    server = create_server(config.web.listen_address, config.web.telemetry_path, registry=registry)
    port = server.server_address[1]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    try:
        base_url = f"http://127.0.0.1:{port}"

        landing = requests.get(base_url + "/", timeout=5)
        assert landing.status_code == 200
        assert 'href="/metrics"' in landing.text

        resp = requests.get(base_url + "/metrics", timeout=10)
        assert resp.status_code == 200
        body = resp.text

        assert 'ethtool_rx_packets{interface="eth0"} 1234.0' in body
        assert 'ethtool_rx_errors{interface="eth0"} 42.0' in body
        assert 'ethtool_tx_queue_0_packets{interface="eth0"} 7.0' in body
        assert 'interface="lo"' not in body
        assert "driver" not in body
        assert 'ethtool_scrape_collector_success{collector="ethtool"} 1.0' in body
        assert "ethtool_exporter_build_info{" in body
        assert 'ethtool_version="6.1"' in body

        # Scrapes concurrents : chacun reçoit un ensemble complet
        results = []

        def scrape():
            results.append(requests.get(base_url + "/metrics", timeout=10).text)

        workers = [threading.Thread(target=scrape) for _ in range(3)]
        for w in workers:
            w.start()
        for w in workers:
            w.join(timeout=20)

        assert len(results) == 3
        assert all('ethtool_rx_errors{interface="eth0"} 42.0' in r for r in results)
    finally:
        server.shutdown()
        server.server_close()
