from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from ethtool_exporter.core.logger import get_logger

logger = get_logger(__name__)


DEFAULT_NAMESPACE = "ethtool"

# Bannière de section émise par `ethtool -S` avant les compteurs
HEADER_PREFIXES = ("NIC statistics",)

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_NAME_CHARS_RE = re.compile(r"[^a-zA-Z0-9_:]")
# Décimal simple, comme strconv.ParseFloat : pas de "1_000" ni de "infinity"
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class EthtoolStat:
    """
    Une ligne `label: valeur` de `ethtool -S`, parsée et normalisée.

      - label : libellé brut (strip) tel qu'affiché par le driver
      - name  : nom de métrique normalisé (ex: "ethtool_rx_errors")
      - value : valeur numérique (toujours float)
    """

    label: str
    name: str
    value: float


def normalize_metric_name(label: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """
    Dérive un nom de métrique stable à partir d'un libellé brut.

    Règles :
      - strip des espaces autour du libellé
      - chaque suite d'espaces internes devient un seul "_"
      - préfixe "<namespace>_"

    La casse et les autres caractères sont conservés : deux libellés
    différents ne sont jamais fusionnés par cette étape.

        >>> normalize_metric_name("  rx errors ")
        'ethtool_rx_errors'
    """
    name = _WHITESPACE_RE.sub("_", label.strip())
    if namespace:
        return f"{namespace}_{name}"
    return name


def sanitize_metric_name(name: str) -> str:
    """Remplace les caractères interdits par le format d'exposition Prometheus."""
    return _INVALID_NAME_CHARS_RE.sub("_", name)


def is_header_line(line: str) -> bool:
    return line.strip().startswith(HEADER_PREFIXES)


def parse_stat_line(
    line: str,
    namespace: str = DEFAULT_NAMESPACE,
    interface: Optional[str] = None,
) -> Optional[EthtoolStat]:
    """
    Parse une ligne de données `label: valeur`.

    Retourne None (avec un warning) si la ligne n'a pas de ":", si le
    libellé est vide ou non décodable, ou si la valeur n'est pas un
    nombre décimal.
    """
    label, sep, raw_value = line.partition(":")
    if not sep:
        logger.warning(
            "Ligne ethtool ignorée (pas de ':') pour %s: %r",
            interface or "?",
            line,
        )
        return None

    label = label.strip()
    if not label:
        logger.warning("Ligne ethtool ignorée (libellé vide) pour %s: %r", interface or "?", line)
        return None

    if "\ufffd" in label:
        logger.warning("Ligne ethtool ignorée (libellé non UTF-8) pour %s: %r", interface or "?", line)
        return None

    raw_value = raw_value.strip()
    if not _NUMBER_RE.match(raw_value):
        logger.warning(
            "Valeur ethtool non numérique ignorée pour %s: %r",
            interface or "?",
            line,
        )
        return None

    value = float(raw_value)
    name = sanitize_metric_name(normalize_metric_name(label, namespace))
    return EthtoolStat(label=label, name=name, value=value)


def parse_stats_output(
    output: str,
    namespace: str = DEFAULT_NAMESPACE,
    interface: Optional[str] = None,
) -> List[EthtoolStat]:
    """
    Parse la sortie complète de `ethtool -S <iface>`.

    Format attendu :

        NIC statistics:
             rx_packets: 1234
             tx_errors: 0

    Les lignes vides et les bannières sont sautées. Une ligne invalide
    n'interrompt jamais le parsing des lignes suivantes.

    Si deux libellés distincts donnent le même nom après assainissement
    (`rx-errors` / `rx.errors`), le premier est gardé et les suivants
    sont ignorés avec un warning.
    """
    stats: List[EthtoolStat] = []
    labels_by_name: Dict[str, str] = {}

    for line in output.splitlines():
        if not line.strip() or is_header_line(line):
            continue

        stat = parse_stat_line(line, namespace=namespace, interface=interface)
        if stat is None:
            continue

        first_label = labels_by_name.setdefault(stat.name, stat.label)
        if first_label != stat.label:
            logger.warning(
                "Libellés %r et %r donnent le même nom %s pour %s, seconde ligne ignorée",
                first_label,
                stat.label,
                stat.name,
                interface or "?",
            )
            continue

        stats.append(stat)

    return stats
