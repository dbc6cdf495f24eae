from __future__ import annotations

import os
import re
import shutil
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ethtool_exporter.core.logger import get_logger, log_phase
from ethtool_exporter.errors import EthtoolNotFoundError, UnsupportedEthtoolVersionError

from .executor import CommandExecutor


logger = get_logger(__name__)


_VERSION_RE = re.compile(r"ethtool\s+version\s+v?(\d+(?:\.\d+)*)", re.IGNORECASE)


@dataclass
class EthtoolBinary:
    path: str
    version: Optional[str] = None


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def locate_ethtool(candidates: Iterable[str], search_path: bool = True) -> str:
    """
    Retourne le premier binaire ethtool exécutable.

    Ordre de recherche :
      1. les chemins candidats, dans l'ordre donné
      2. `shutil.which("ethtool")` (PATH), sauf si search_path=False

    Lève EthtoolNotFoundError si rien n'est trouvé.
    """
    log_phase(logger, "ethtool.locate", "Recherche du binaire ethtool")

    tried = []
    for candidate in candidates:
        tried.append(candidate)
        if _is_executable(candidate):
            logger.debug("Binaire ethtool trouvé: %s", candidate)
            return candidate

    from_path = shutil.which("ethtool") if search_path else None
    if from_path:
        logger.debug("Binaire ethtool trouvé dans le PATH: %s", from_path)
        return from_path

    if search_path:
        tried.append("PATH")
    raise EthtoolNotFoundError(
        f"Impossible de trouver l'exécutable ethtool (essayés: {', '.join(tried) or 'aucun'})"
    )


def parse_version(text: str) -> Optional[str]:
    """Extrait "X.Y[.Z]" de la sortie de `ethtool --version`."""
    match = _VERSION_RE.search(text)
    return match.group(1) if match else None


def version_tuple(version: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


def is_version_supported(version: str, min_version: str) -> bool:
    current = version_tuple(version)
    minimum = version_tuple(min_version)
    # 5.4 == 5.4.0
    width = max(len(current), len(minimum))
    current += (0,) * (width - len(current))
    minimum += (0,) * (width - len(minimum))
    return current >= minimum


def check_ethtool_version(
    path: str,
    min_version: Optional[str],
    executor: Optional[CommandExecutor] = None,
) -> Optional[str]:
    """
    Vérifie que la version d'ethtool est >= min_version.

    Retourne la version détectée (None si la vérification est désactivée
    et que la version n'a pas pu être lue). Lève
    UnsupportedEthtoolVersionError si la version est trop ancienne ou
    illisible alors qu'un minimum est exigé.
    """
    executor = executor or CommandExecutor(timeout=10.0)

    result = executor.run([path, "--version"])
    version = parse_version(result.stdout) if result is not None and result.ok else None

    if min_version is None:
        if version is None:
            logger.warning("Version d'ethtool indéterminée (%s), vérification désactivée.", path)
        return version

    if version is None:
        raise UnsupportedEthtoolVersionError(
            f"Impossible de déterminer la version de {path} (minimum requis: {min_version})"
        )

    if not is_version_supported(version, min_version):
        raise UnsupportedEthtoolVersionError(
            f"Version d'ethtool non supportée: {version} (minimum requis: {min_version})"
        )

    logger.info("ethtool %s détecté (%s)", version, path)
    return version


def resolve_ethtool(
    candidates: Iterable[str],
    min_version: Optional[str],
    executor: Optional[CommandExecutor] = None,
    search_path: bool = True,
) -> EthtoolBinary:
    """Localise ethtool puis vérifie sa version. Utilisé au démarrage."""
    path = locate_ethtool(candidates, search_path=search_path)
    version = check_ethtool_version(path, min_version, executor=executor)
    return EthtoolBinary(path=path, version=version)
