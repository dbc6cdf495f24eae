from __future__ import annotations

from typing import Dict, List, Optional

from ethtool_exporter.core.logger import get_logger
from ethtool_exporter.collectors.base_collector import BaseCollector, Observation
from ethtool_exporter.ethtool.executor import CommandExecutor
from ethtool_exporter.ethtool.parser import DEFAULT_NAMESPACE, parse_stats_output

logger = get_logger(__name__)


class EthtoolStatsCollector(BaseCollector):
    """
    Collecteur des statistiques driver via `ethtool -S <iface>`.

    Pour chaque ligne `label: valeur` valide :
      - <namespace>_<label normalisé>{interface="<iface>"} = valeur

    Une interface non supportée par le driver (code de retour non nul) ou un
    binaire impossible à lancer ne produisent aucune observation ; ce n'est
    pas une erreur de la collecte.
    """

    name = "ethtool"

    def __init__(
        self,
        ethtool_path: str,
        executor: Optional[CommandExecutor] = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.ethtool_path = ethtool_path
        self.executor = executor or CommandExecutor()
        self.namespace = namespace

    def _collect_observations(self, interface: str) -> List[Observation]:
        result = self.executor.run([self.ethtool_path, "-S", interface])

        if result is None:
            logger.debug("ethtool -S %s n'a pas pu être exécuté, interface ignorée.", interface)
            return []

        if not result.ok:
            # Attendu pour lo, bridges, tunnels... : DEBUG uniquement
            logger.debug(
                "ethtool -S %s terminé en erreur (code=%d, stderr=%s), interface ignorée.",
                interface,
                result.return_code,
                result.stderr,
            )
            return []

        # Doublon de libellé dans la même sortie : la dernière valeur gagne
        values: Dict[str, float] = {}
        for stat in parse_stats_output(result.stdout, namespace=self.namespace, interface=interface):
            values[stat.name] = stat.value

        return [Observation(metric_name=name, interface=interface, value=value) for name, value in values.items()]
