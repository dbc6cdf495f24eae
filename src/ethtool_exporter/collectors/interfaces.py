from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern

import psutil

from ethtool_exporter.core.logger import get_logger
from ethtool_exporter.errors import EnumerationError

logger = get_logger(__name__)


DEFAULT_SYSFS_NET_DIR = "/sys/class/net"

# Les interfaces virtuelles (lo, bridges, veth, bonds...) pointent ici
_VIRTUAL_DEVICES_MARKER = os.sep + os.path.join("devices", "virtual") + os.sep


def list_interfaces(sysfs_net_dir: str = DEFAULT_SYSFS_NET_DIR) -> List[str]:
    """
    Liste les interfaces réseau présentes dans le registre des devices.

    L'ordre est celui renvoyé par le système (aucun tri). Les entrées
    symboliques sont incluses. Lève EnumerationError si le répertoire
    lui-même est illisible : pas de résultat partiel.
    """
    try:
        return os.listdir(sysfs_net_dir)
    except OSError as exc:
        raise EnumerationError(
            f"Impossible de lister les interfaces dans {sysfs_net_dir}: {exc}"
        ) from exc


@dataclass
class InterfaceFilter:
    """
    Politique de filtrage des interfaces, désactivée par défaut.

      - include         : regex ; si non vide, seules les interfaces qui matchent sont gardées
      - exclude         : regex ; les interfaces qui matchent sont ignorées
      - exclude_virtual : ignore les interfaces sous /sys/devices/virtual/
      - only_up         : ignore les interfaces que psutil voit "down"
    """

    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    exclude_virtual: bool = False
    only_up: bool = False
    sysfs_net_dir: str = DEFAULT_SYSFS_NET_DIR

    def __post_init__(self) -> None:
        self._include: List[Pattern[str]] = [re.compile(p) for p in self.include]
        self._exclude: List[Pattern[str]] = [re.compile(p) for p in self.exclude]

    @property
    def is_noop(self) -> bool:
        return not (self._include or self._exclude or self.exclude_virtual or self.only_up)

    def apply(self, interfaces: List[str]) -> List[str]:
        if self.is_noop:
            return list(interfaces)

        up_status = self._read_up_status() if self.only_up else None

        kept: List[str] = []
        for iface in interfaces:
            reason = self._rejection_reason(iface, up_status)
            if reason:
                logger.debug("Interface %s ignorée (%s)", iface, reason)
                continue
            kept.append(iface)
        return kept

    # ---- Helpers internes ----

    def _rejection_reason(self, iface: str, up_status: Optional[dict]) -> Optional[str]:
        if self._include and not any(p.search(iface) for p in self._include):
            return "include"
        if any(p.search(iface) for p in self._exclude):
            return "exclude"
        if self.exclude_virtual and self._is_virtual(iface):
            return "virtuelle"
        # Interface inconnue de psutil : conservée
        if up_status is not None and up_status.get(iface) is False:
            return "down"
        return None

    def _is_virtual(self, iface: str) -> bool:
        target = os.path.realpath(os.path.join(self.sysfs_net_dir, iface))
        return _VIRTUAL_DEVICES_MARKER in target

    @staticmethod
    def _read_up_status() -> Optional[dict]:
        try:
            return {name: stat.isup for name, stat in psutil.net_if_stats().items()}
        except (OSError, psutil.Error) as exc:
            logger.warning("Statut des interfaces indisponible (psutil): %s", exc)
            return None


class InterfaceEnumerator:
    """Énumère les interfaces de sysfs puis applique la politique de filtrage."""

    def __init__(
        self,
        sysfs_net_dir: str = DEFAULT_SYSFS_NET_DIR,
        interface_filter: Optional[InterfaceFilter] = None,
    ) -> None:
        self.sysfs_net_dir = sysfs_net_dir
        self.interface_filter = interface_filter or InterfaceFilter(sysfs_net_dir=sysfs_net_dir)

    def discover(self) -> List[str]:
        """Lève EnumerationError si le répertoire est illisible."""
        found = list_interfaces(self.sysfs_net_dir)
        kept = self.interface_filter.apply(found)
        logger.debug("Interfaces: %d trouvées, %d retenues", len(found), len(kept))
        return kept
