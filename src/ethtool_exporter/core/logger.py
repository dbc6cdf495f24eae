import json
import logging
import os
import sys
from typing import Optional

LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

# Champs passés via extra=... et repris par les deux formats
CONTEXT_FIELDS = ("phase", "interface", "collector")

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
PLAIN_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Marqueur posé sur les handlers installés par configure_logging
_HANDLER_TAG = "_ethtool_exporter_handler"


def parse_log_level(value: str) -> int:
    """Convertit "debug", " INFO "... en niveau logging (INFO si inconnu)."""
    return LEVELS.get(value.strip().upper(), logging.INFO)


def _context_of(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


class PlainLogFormatter(logging.Formatter):
    """
    Format texte lisible, suffixé du contexte de collecte quand il existe :

        2024-05-02T10:00:00 [WARNING] ethtool_exporter.ethtool.parser - ... {interface=eth0}
    """

    def __init__(self) -> None:
        super().__init__(fmt=PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context_of(record)
        if not context:
            return line
        suffix = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} {{{suffix}}}"


class JsonLogFormatter(logging.Formatter):
    """Un objet JSON par ligne, contexte de collecte à plat."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "time": self.formatTime(record, PLAIN_DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context_of(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def build_formatter(fmt: str) -> logging.Formatter:
    if fmt.strip().lower() == "json":
        return JsonLogFormatter()
    return PlainLogFormatter()


def _exporter_handlers(root: logging.Logger) -> list:
    return [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]


def configure_logging(
    level: str = "INFO",
    fmt: str = "plain",
    console_enabled: bool = True,
    file_enabled: bool = False,
    file_path: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Installe les handlers de l'exporter sur le logger racine.

    Un second appel est sans effet, sauf avec force=True : les handlers
    posés précédemment par cette fonction sont alors remplacés. Les
    handlers installés par d'autres (pytest, application hôte) ne sont
    jamais retirés.

    Variables d'environnement prioritaires :
      - ETHTOOL_EXPORTER_LOG_LEVEL (ex: DEBUG)
      - ETHTOOL_EXPORTER_LOG_FORMAT (plain|json)
    """
    root = logging.getLogger()
    previous = _exporter_handlers(root)
    if previous and not force:
        return

    for handler in previous:
        root.removeHandler(handler)
        handler.close()

    log_level = parse_log_level(os.getenv("ETHTOOL_EXPORTER_LOG_LEVEL") or level)
    formatter = build_formatter(os.getenv("ETHTOOL_EXPORTER_LOG_FORMAT") or fmt)

    handlers = []
    if console_enabled:
        # stderr : stdout reste libre pour --version
        handlers.append(logging.StreamHandler(stream=sys.stderr))
    if file_enabled and file_path:
        handlers.append(logging.FileHandler(file_path, encoding="utf-8"))
    if not handlers:
        handlers.append(logging.NullHandler())

    for handler in handlers:
        setattr(handler, _HANDLER_TAG, True)
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(log_level)

    if file_enabled and not file_path:
        logging.getLogger(__name__).warning("Log fichier activé sans file_name, ignoré.")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_phase(logger: logging.Logger, phase: str, message: str) -> None:
    """
    Log INFO d'une étape du démarrage.

        log_phase(logger, "ethtool.locate", "Recherche du binaire ethtool")
    """
    logger.info(message, extra={"phase": phase})
