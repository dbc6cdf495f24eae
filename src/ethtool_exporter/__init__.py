"""
Ethtool Exporter Package.

Exporter Prometheus des statistiques driver par interface réseau (ethtool -S).
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ethtool-exporter")
except PackageNotFoundError:
    # Fallback sur le fichier __version__.py (exécution depuis les sources)
    from ethtool_exporter.__version__ import __version__

__all__ = ["__version__"]
