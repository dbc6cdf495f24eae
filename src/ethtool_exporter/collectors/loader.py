from __future__ import annotations

"""collectors/loader.py

Construction des collecteurs à partir de la configuration.

"""

import re

from ethtool_exporter.core.config_loader import EthtoolConfig, InterfacesConfig
from ethtool_exporter.core.logger import get_logger
from ethtool_exporter.errors import ConfigError

from ethtool_exporter.collectors.ethtool_stats import EthtoolStatsCollector
from ethtool_exporter.collectors.interfaces import InterfaceEnumerator, InterfaceFilter
from ethtool_exporter.ethtool.executor import CommandExecutor

logger = get_logger(__name__)


def build_interface_enumerator(cfg: InterfacesConfig) -> InterfaceEnumerator:
    """
    Construit l'énumérateur d'interfaces et sa politique de filtrage.

    Lève ConfigError si une expression régulière include/exclude est invalide.
    """
    try:
        interface_filter = InterfaceFilter(
            include=cfg.include,
            exclude=cfg.exclude,
            exclude_virtual=cfg.exclude_virtual,
            only_up=cfg.only_up,
            sysfs_net_dir=cfg.sysfs_dir,
        )
    except re.error as exc:
        raise ConfigError(f"Expression régulière invalide dans interfaces.include/exclude : {exc}") from exc

    if not interface_filter.is_noop:
        logger.info(
            "Filtrage des interfaces actif (include=%s, exclude=%s, exclude_virtual=%s, only_up=%s)",
            cfg.include,
            cfg.exclude,
            cfg.exclude_virtual,
            cfg.only_up,
        )

    return InterfaceEnumerator(sysfs_net_dir=cfg.sysfs_dir, interface_filter=interface_filter)


def build_stats_collector(cfg: EthtoolConfig, ethtool_path: str) -> EthtoolStatsCollector:
    """Construit le collecteur `ethtool -S` pour le binaire résolu au démarrage."""
    return EthtoolStatsCollector(
        ethtool_path=ethtool_path,
        executor=CommandExecutor(timeout=cfg.timeout_seconds),
        namespace=cfg.namespace,
    )
