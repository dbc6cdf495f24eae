from __future__ import annotations

import threading
import time
from typing import Iterable, Iterator, List, Tuple

from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from ethtool_exporter.collectors.base_collector import BaseCollector
from ethtool_exporter.collectors.interfaces import InterfaceEnumerator
from ethtool_exporter.core.logger import get_logger
from ethtool_exporter.errors import EnumerationError
from ethtool_exporter.ethtool.parser import DEFAULT_NAMESPACE

from .aggregator import ExpositionSet

logger = get_logger(__name__)


class EthtoolExporter(Collector):
    """
    Collecteur Prometheus : un cycle de collecte complet par scrape.

    Déroulé de collect() :
      1. prise du verrou de collecte (un seul cycle à la fois, les scrapes
         concurrents attendent)
      2. énumération des interfaces (échec => cycle vide, loggué)
      3. collecte par interface (échec => interface ignorée)
      4. une famille gauge par nom de métrique découvert
      5. métriques d'auto-instrumentation (durée, succès)
    """

    def __init__(
        self,
        enumerator: InterfaceEnumerator,
        collector: BaseCollector,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.enumerator = enumerator
        self.collector = collector
        self.namespace = namespace
        self._collect_lock = threading.Lock()

    # ---- API prometheus_client ----

    def describe(self) -> Iterable[Metric]:
        # Seules les familles statiques sont décrites : l'enregistrement
        # dans le registry ne doit pas lancer ethtool.
        return self._scrape_families(duration=0.0, success=False)

    def collect(self) -> Iterator[Metric]:
        with self._collect_lock:
            start = time.monotonic()
            exposition, success = self._run_cycle()
            families = exposition.to_metric_families()
            duration = time.monotonic() - start

        logger.debug(
            "Cycle de collecte terminé en %.3fs : %d observations, %d métriques.",
            duration,
            len(exposition),
            len(families),
        )

        yield from families
        yield from self._scrape_families(duration=duration, success=success)

    # ---- Cycle de collecte ----

    def collect_observations(self) -> ExpositionSet:
        """Exécute un cycle complet sous verrou et retourne l'ensemble d'observations."""
        with self._collect_lock:
            exposition, _ = self._run_cycle()
        return exposition

    def _run_cycle(self) -> Tuple[ExpositionSet, bool]:
        """À appeler verrou pris."""
        exposition = ExpositionSet()

        try:
            interfaces = self.enumerator.discover()
        except EnumerationError as exc:
            logger.error("Collecte impossible : %s", exc)
            return exposition, False

        for interface in interfaces:
            exposition.extend(self.collector.collect(interface))

        return exposition, True

    def _scrape_families(self, duration: float, success: bool) -> List[GaugeMetricFamily]:
        duration_family = GaugeMetricFamily(
            f"{self.namespace}_scrape_collector_duration_seconds",
            "ethtool_exporter: Duration of collector scrape.",
            labels=["collector"],
        )
        duration_family.add_metric([self.collector.name], duration)

        success_family = GaugeMetricFamily(
            f"{self.namespace}_scrape_collector_success",
            "ethtool_exporter: Whether a collector succeeded.",
            labels=["collector"],
        )
        success_family.add_metric([self.collector.name], 1.0 if success else 0.0)

        return [duration_family, success_family]
