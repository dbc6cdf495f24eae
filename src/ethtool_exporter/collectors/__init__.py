from ethtool_exporter.collectors.base_collector import BaseCollector, Observation
from ethtool_exporter.collectors.ethtool_stats import EthtoolStatsCollector
from ethtool_exporter.collectors.interfaces import InterfaceEnumerator, InterfaceFilter, list_interfaces

__all__ = [
    'BaseCollector',
    'Observation',
    'EthtoolStatsCollector',
    'InterfaceEnumerator',
    'InterfaceFilter',
    'list_interfaces',
]
