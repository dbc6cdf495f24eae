from ethtool_exporter.ethtool.binary import EthtoolBinary, locate_ethtool, resolve_ethtool
from ethtool_exporter.ethtool.executor import CommandExecutor, CommandResult
from ethtool_exporter.ethtool.parser import EthtoolStat, normalize_metric_name, parse_stats_output

__all__ = [
    'CommandExecutor',
    'CommandResult',
    'EthtoolBinary',
    'EthtoolStat',
    'locate_ethtool',
    'normalize_metric_name',
    'parse_stats_output',
    'resolve_ethtool',
]
