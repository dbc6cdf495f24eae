from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from ethtool_exporter.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Observation:
    """
    Unité de sortie normalisée : une valeur numérique pour un couple
    (nom de métrique, interface). Sémantique de gauge, pas de calcul de taux.
    """

    metric_name: str
    interface: str
    value: float


class BaseCollector(ABC):
    """
    Classe de base des collecteurs par interface.

    Contrat :
      - collect(interface) : méthode publique, robuste (ne doit jamais lever d'exception)
      - _collect_observations(interface) : à implémenter, peut lever des exceptions internes
    """

    name: str = "base"  # Identifiant logique du collecteur

    def collect(self, interface: str) -> List[Observation]:
        """
        Point d'entrée standard pour une interface. Encapsule l'appel à
        _collect_observations(), gère les exceptions et garantit un retour list.
        """
        logger.debug(
            "Collecte '%s' pour %s",
            self.name,
            interface,
            extra={"collector": self.name, "interface": interface},
        )

        try:
            observations = self._collect_observations(interface)
            if not isinstance(observations, list):
                logger.error(
                    "Le collecteur '%s' a renvoyé un type invalide (%s), liste attendue.",
                    self.name,
                    type(observations),
                )
                return []

            normalized: List[Observation] = []
            for obs in observations:
                norm = self._normalize_observation(obs)
                if norm is not None:
                    normalized.append(norm)

            return normalized
        except Exception as exc:
            logger.error(
                "Erreur inattendue dans le collecteur '%s' pour %s: %s",
                self.name,
                interface,
                exc,
                exc_info=True,
            )
            return []

    @abstractmethod
    def _collect_observations(self, interface: str) -> List[Observation]:
        raise NotImplementedError

    # ---- Helpers de normalisation ----

    @staticmethod
    def _normalize_observation(obs: Any) -> Optional[Observation]:
        """
        Vérifie une observation brute :
        - metric_name et interface doivent être des chaînes non vides
        - value doit être numérique (bool refusé), converti en float
        """
        if not isinstance(obs, Observation):
            logger.warning("Observation ignorée (type invalide): %r", obs)
            return None

        if not obs.metric_name or not obs.interface:
            logger.warning("Observation ignorée (nom ou interface vide): %r", obs)
            return None

        value = obs.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("Observation non numérique ignorée: %r", obs)
            return None

        if isinstance(value, int):
            return Observation(obs.metric_name, obs.interface, float(value))

        return obs
