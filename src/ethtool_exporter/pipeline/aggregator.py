from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Tuple

from prometheus_client.core import GaugeMetricFamily

from ethtool_exporter.collectors.base_collector import Observation
from ethtool_exporter.core.logger import get_logger

logger = get_logger(__name__)


INTERFACE_LABEL = "interface"
DEFAULT_HELP = "interface statistics"


class ExpositionSet:
    """
    Ensemble des observations d'un cycle de collecte.

    Règles :
      - L'identité d'une observation est le couple (metric_name, interface).
      - En cas de doublon sur ce couple, la dernière valeur gagne (debug loggué).
      - L'ensemble est reconstruit à chaque cycle : aucun état entre deux scrapes.
    """

    def __init__(self) -> None:
        self._values: Dict[Tuple[str, str], float] = {}

    def add(self, observation: Observation) -> None:
        key = (observation.metric_name, observation.interface)
        if key in self._values:
            logger.debug(
                "Doublon pour %s{interface=%s}, la dernière valeur est conservée.",
                observation.metric_name,
                observation.interface,
            )
        self._values[key] = observation.value

    def extend(self, observations: Iterable[Observation]) -> None:
        for obs in observations:
            self.add(obs)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Observation]:
        for (name, interface), value in self._values.items():
            yield Observation(metric_name=name, interface=interface, value=value)

    def get(self, metric_name: str, interface: str) -> float:
        """Lève KeyError si le couple n'a pas été observé."""
        return self._values[(metric_name, interface)]

    @property
    def metric_names(self) -> List[str]:
        return sorted({name for name, _ in self._values})

    @property
    def interfaces(self) -> List[str]:
        return sorted({iface for _, iface in self._values})

    def to_metric_families(self, help_text: str = DEFAULT_HELP) -> List[GaugeMetricFamily]:
        """
        Construit une famille gauge par nom de métrique distinct.

        Les familles sont créées à neuf à chaque cycle : un même nom présent
        sur plusieurs interfaces n'est déclaré qu'une fois, avec un
        échantillon par interface.
        """
        families: Dict[str, GaugeMetricFamily] = {}

        for (name, interface), value in self._values.items():
            family = families.get(name)
            if family is None:
                family = GaugeMetricFamily(name, help_text, labels=[INTERFACE_LABEL])
                families[name] = family
            family.add_metric([interface], value)

        return list(families.values())
