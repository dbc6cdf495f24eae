"""Exceptions de l'exporter."""

from __future__ import annotations


class ExporterError(Exception):
    """Erreur de base de l'exporter."""


class ConfigError(ExporterError):
    """Erreur de configuration invalide ou introuvable."""


class EthtoolNotFoundError(ExporterError):
    """Aucun binaire ethtool exécutable trouvé parmi les emplacements candidats."""


class UnsupportedEthtoolVersionError(ExporterError):
    """Version d'ethtool trop ancienne ou impossible à déterminer."""


class EnumerationError(ExporterError):
    """Le répertoire des interfaces réseau (/sys/class/net) est illisible."""
