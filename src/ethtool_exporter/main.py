#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from prometheus_client import REGISTRY, Info
from prometheus_client.registry import CollectorRegistry

from ethtool_exporter import __version__
from ethtool_exporter.collectors.loader import build_interface_enumerator, build_stats_collector
from ethtool_exporter.core.config_loader import Config, ConfigLoader
from ethtool_exporter.core.logger import configure_logging, get_logger, log_phase
from ethtool_exporter.errors import (
    ConfigError,
    EthtoolNotFoundError,
    UnsupportedEthtoolVersionError,
)
from ethtool_exporter.ethtool.binary import EthtoolBinary, resolve_ethtool
from ethtool_exporter.pipeline.exporter import EthtoolExporter
from ethtool_exporter.web.server import create_server, serve


logger = get_logger(__name__)


# Exit codes
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_ETHTOOL_ERROR = 2
EXIT_SERVER_ERROR = 3


# ---------------------------------------------------------------------------
# CLI PARSING
# ---------------------------------------------------------------------------

def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ethtool-exporter",
        description="Ethtool Exporter - statistiques driver par interface pour Prometheus",
    )

    parser.add_argument(
        "--config",
        help="Chemin vers un fichier de configuration YAML (optionnel)",
        type=str,
        default=None,
    )

    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        help="Adresse d'écoute pour les métriques et l'interface web (defaut: :9490)",
        type=str,
        default=None,
    )

    parser.add_argument(
        "--web.telemetry-path",
        dest="telemetry_path",
        help="Chemin d'exposition des métriques (defaut: /metrics)",
        type=str,
        default=None,
    )

    parser.add_argument(
        "--ethtool.path",
        dest="ethtool_path",
        help="Chemin explicite du binaire ethtool (sinon recherche automatique)",
        type=str,
        default=None,
    )

    parser.add_argument(
        "--log.format",
        dest="log_format",
        help="Format des logs",
        choices=["plain", "json"],
        default=None,
    )

    parser.add_argument(
        "--verbose",
        help="Active le mode DEBUG pour les logs",
        action="store_true",
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser.parse_args(argv)


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Les flags CLI ont priorité sur le fichier et l'environnement."""
    if args.listen_address:
        config.web.listen_address = args.listen_address
    if args.telemetry_path:
        if not args.telemetry_path.startswith("/"):
            raise ConfigError(f"--web.telemetry-path doit commencer par '/': {args.telemetry_path}")
        config.web.telemetry_path = args.telemetry_path
    if args.ethtool_path:
        config.ethtool.path = args.ethtool_path
    if args.log_format:
        config.logging.format = args.log_format
    if args.verbose:
        config.logging.level = "DEBUG"
    return config


# ---------------------------------------------------------------------------
# ASSEMBLAGE
# ---------------------------------------------------------------------------

def build_exporter(config: Config, binary: EthtoolBinary) -> EthtoolExporter:
    enumerator = build_interface_enumerator(config.interfaces)
    collector = build_stats_collector(config.ethtool, binary.path)
    return EthtoolExporter(enumerator, collector, namespace=config.ethtool.namespace)


def register_exporter(
    exporter: EthtoolExporter,
    binary: EthtoolBinary,
    registry: CollectorRegistry = REGISTRY,
) -> None:
    """Enregistre l'exporter et la métrique de build dans le registry (une seule fois)."""
    build_info = Info(
        "ethtool_exporter_build",
        "ethtool_exporter: build and ethtool version information.",
        registry=registry,
    )
    build_info.info({"version": __version__, "ethtool_version": binary.version or "unknown"})
    registry.register(exporter)


# ---------------------------------------------------------------------------
# MAIN ORCHESTRATION
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_cli_args(argv)

    # ------------------------
    # 1) LOAD CONFIG + LOGGING
    # ------------------------
    try:
        config_loader = ConfigLoader(config_path=Path(args.config) if args.config else None)
        config = apply_cli_overrides(config_loader.load(), args)
    except ConfigError as exc:
        configure_logging(level="INFO", fmt=args.log_format or "plain")
        logger.error("❌ Erreur de configuration : %s", exc)
        return EXIT_CONFIG_ERROR

    configure_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        console_enabled=config.logging.console_enabled,
        file_enabled=config.logging.file_enabled,
        file_path=config.logging.file_name,
    )

    logger.info("=== Ethtool Exporter %s - Démarrage ===", __version__)

    # ------------------------
    # 2) ETHTOOL BINARY
    # ------------------------
    # Un chemin explicite est seul essayé, sans repli sur le PATH
    explicit = bool(config.ethtool.path)
    candidates = [config.ethtool.path] if explicit else config.ethtool.candidates
    try:
        binary = resolve_ethtool(candidates, config.ethtool.min_version, search_path=not explicit)
    except (EthtoolNotFoundError, UnsupportedEthtoolVersionError) as exc:
        logger.error("❌ %s", exc)
        return EXIT_ETHTOOL_ERROR

    log_phase(logger, "ethtool.ready", f"✓ ethtool utilisé : {binary.path} (version {binary.version or '?'})")

    # ------------------------
    # 3) EXPORTER
    # ------------------------
    try:
        exporter = build_exporter(config, binary)
    except ConfigError as exc:
        logger.error("❌ Erreur de configuration : %s", exc)
        return EXIT_CONFIG_ERROR

    register_exporter(exporter, binary)

    # ------------------------
    # 4) HTTP SERVER
    # ------------------------
    try:
        server = create_server(config.web.listen_address, config.web.telemetry_path)
    except (OSError, ValueError) as exc:
        logger.error("❌ Impossible d'écouter sur %s : %s", config.web.listen_address, exc)
        return EXIT_SERVER_ERROR

    serve(config.web.listen_address, config.web.telemetry_path, server=server)
    return EXIT_OK


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Arrêt demandé (CTRL+C).")
        sys.exit(EXIT_OK)


if __name__ == "__main__":
    run()
