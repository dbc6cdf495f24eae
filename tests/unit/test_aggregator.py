from ethtool_exporter.collectors.base_collector import Observation
from ethtool_exporter.pipeline.aggregator import ExpositionSet


def test_exposition_set_last_write_wins():
    exposition = ExpositionSet()
    exposition.add(Observation("ethtool_rx_errors", "eth0", 1.0))
    exposition.add(Observation("ethtool_rx_errors", "eth0", 2.0))

    assert len(exposition) == 1
    assert exposition.get("ethtool_rx_errors", "eth0") == 2.0


def test_no_cross_interface_leakage():
    exposition = ExpositionSet()
    exposition.extend(
        [
            Observation("ethtool_rx_errors", "eth0", 1.0),
            Observation("ethtool_rx_errors", "eth1", 5.0),
        ]
    )

    assert exposition.get("ethtool_rx_errors", "eth0") == 1.0
    assert exposition.get("ethtool_rx_errors", "eth1") == 5.0
    assert exposition.interfaces == ["eth0", "eth1"]


def test_one_family_per_metric_name():
    exposition = ExpositionSet()
    exposition.extend(
        [
            Observation("ethtool_rx_errors", "eth0", 1.0),
            Observation("ethtool_rx_errors", "eth1", 5.0),
            Observation("ethtool_tx_errors", "eth0", 0.0),
        ]
    )

    families = {f.name: f for f in exposition.to_metric_families()}

    assert sorted(families) == ["ethtool_rx_errors", "ethtool_tx_errors"]
    rx = families["ethtool_rx_errors"]
    assert rx.type == "gauge"
    assert rx.documentation == "interface statistics"
    assert {s.labels["interface"]: s.value for s in rx.samples} == {"eth0": 1.0, "eth1": 5.0}


def test_empty_exposition_set():
    exposition = ExpositionSet()
    assert len(exposition) == 0
    assert exposition.to_metric_families() == []
    assert list(exposition) == []
