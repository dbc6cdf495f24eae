import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
import yaml

from ethtool_exporter.errors import ConfigError

from .logger import get_logger, log_phase


logger = get_logger(__name__)


DEFAULT_ETHTOOL_CANDIDATES = [
    "/usr/sbin/ethtool",
    "/sbin/ethtool",
    "/usr/bin/ethtool",
]


@dataclass
class WebConfig:
    listen_address: str = ":9490"
    telemetry_path: str = "/metrics"


@dataclass
class EthtoolConfig:
    path: Optional[str] = None
    candidates: List[str] = field(default_factory=lambda: list(DEFAULT_ETHTOOL_CANDIDATES))
    min_version: Optional[str] = "3.0"
    timeout_seconds: Optional[float] = None
    namespace: str = "ethtool"


@dataclass
class InterfacesConfig:
    sysfs_dir: str = "/sys/class/net"
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    exclude_virtual: bool = False
    only_up: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "plain"
    console_enabled: bool = True
    file_enabled: bool = False
    file_name: Optional[str] = None


@dataclass
class Config:
    web: WebConfig = field(default_factory=WebConfig)
    ethtool: EthtoolConfig = field(default_factory=EthtoolConfig)
    interfaces: InterfacesConfig = field(default_factory=InterfacesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_STRING_LIST: Dict[str, Any] = {"type": "array", "items": {"type": "string"}}

# Schéma JSON du fichier de configuration.
# Toutes les sections sont optionnelles : les valeurs absentes prennent
# les défauts des dataclasses ci-dessus.
_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "web": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "listen_address": {"type": "string", "minLength": 1},
                "telemetry_path": {"type": "string", "pattern": "^/"},
            },
        },
        "ethtool": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "path": {"type": ["string", "null"]},
                "candidates": _STRING_LIST,
                "min_version": {
                    "type": ["string", "null"],
                    "pattern": r"^[0-9]+(\.[0-9]+)*$",
                },
                "timeout_seconds": {"type": ["number", "null"], "exclusiveMinimum": 0},
                "namespace": {"type": "string", "pattern": "^[a-zA-Z_:][a-zA-Z0-9_:]*$"},
            },
        },
        "interfaces": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "sysfs_dir": {"type": "string", "minLength": 1},
                "include": _STRING_LIST,
                "exclude": _STRING_LIST,
                "exclude_virtual": {"type": "boolean"},
                "only_up": {"type": "boolean"},
            },
        },
        "logging": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
                },
                "format": {"type": "string", "enum": ["plain", "json"]},
                "console_enabled": {"type": "boolean"},
                "file_enabled": {"type": "boolean"},
                "file_name": {"type": ["string", "null"]},
            },
        },
    },
}


class ConfigLoader:
    """
    Charge, valide et normalise la configuration de l'exporter.

    Responsabilités :
      - Lire un fichier YAML de configuration (optionnel).
      - Valider le contenu via un schéma JSON (embarqué, ou fichier explicite).
      - Appliquer des overrides via variables d'environnement.
      - Construire l'arbre de dataclasses Config.

    Sans fichier de configuration, les valeurs par défaut sont utilisées.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        schema_path: Optional[Path] = None,
    ) -> None:
        self.config_path = config_path
        self.schema_path = schema_path

    def load(self) -> Config:
        """Point d'entrée principal : retourne un objet Config prêt à l'emploi."""
        if self.config_path is None:
            log_phase(logger, "config.load", "Aucun fichier de configuration, valeurs par défaut")
            raw_config: Dict[str, Any] = {}
        else:
            log_phase(logger, "config.load", f"Chargement configuration depuis {self.config_path}")
            raw_config = self._read_config_file(self.config_path)

        # Les overrides env passent par le même schéma que le fichier
        raw_config = self._apply_env_overrides(copy.deepcopy(raw_config))

        schema = self._read_schema_file(self.schema_path) if self.schema_path else _CONFIG_SCHEMA
        self._validate_against_schema(raw_config, schema)

        return Config(
            web=self._build_web_config(raw_config.get("web", {})),
            ethtool=self._build_ethtool_config(raw_config.get("ethtool", {})),
            interfaces=self._build_interfaces_config(raw_config.get("interfaces", {})),
            logging=self._build_logging_config(raw_config.get("logging", {})),
        )

    # ---- Lectures brutes ----

    def _read_config_file(self, path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise ConfigError(f"Fichier de configuration introuvable : {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Impossible de lire le fichier de configuration : {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Le fichier de configuration doit contenir un objet YAML racine.")

        return data

    def _read_schema_file(self, path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise ConfigError(f"Schéma de configuration introuvable : {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                schema = json.load(f)
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Impossible de lire le schéma de configuration : {exc}") from exc

        if not isinstance(schema, dict):
            raise ConfigError("Le schéma de configuration doit contenir un objet JSON racine.")

        return schema

    # ---- Validation schéma ----

    def _validate_against_schema(self, config: Dict[str, Any], schema: Dict[str, Any]) -> None:
        try:
            jsonschema.validate(instance=config, schema=schema)
        except jsonschema.ValidationError as exc:
            location = ".".join(str(p) for p in exc.absolute_path) or "<racine>"
            raise ConfigError(f"Configuration invalide ({location}) : {exc.message}") from exc

    # ---- Overrides env ----

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Applique quelques overrides via variables d'environnement.

        Conventions :
          - ETHTOOL_EXPORTER_LISTEN_ADDRESS
          - ETHTOOL_EXPORTER_TELEMETRY_PATH
          - ETHTOOL_EXPORTER_ETHTOOL_PATH
          - ETHTOOL_EXPORTER_SYSFS_DIR
          - ETHTOOL_EXPORTER_TIMEOUT
        """
        web = config.setdefault("web", {})
        ethtool = config.setdefault("ethtool", {})
        interfaces = config.setdefault("interfaces", {})

        env_overrides: Tuple[Tuple[str, str, Dict[str, Any]], ...] = (
            ("ETHTOOL_EXPORTER_LISTEN_ADDRESS", "listen_address", web),
            ("ETHTOOL_EXPORTER_TELEMETRY_PATH", "telemetry_path", web),
            ("ETHTOOL_EXPORTER_ETHTOOL_PATH", "path", ethtool),
            ("ETHTOOL_EXPORTER_SYSFS_DIR", "sysfs_dir", interfaces),
            ("ETHTOOL_EXPORTER_TIMEOUT", "timeout_seconds", ethtool),
        )

        for env_var, key, target in env_overrides:
            val = os.getenv(env_var)
            if val is None:
                continue

            logger.debug("Override %s depuis la variable %s", key, env_var)
            if key == "timeout_seconds":
                try:
                    target[key] = float(val)
                except ValueError:
                    logger.warning(
                        "Variable d'environnement %s invalide (float attendu), ignorée.", env_var
                    )
            else:
                target[key] = val

        return config

    # ---- Builders ----

    def _build_web_config(self, raw: Dict[str, Any]) -> WebConfig:
        defaults = WebConfig()
        return WebConfig(
            listen_address=raw.get("listen_address", defaults.listen_address),
            telemetry_path=raw.get("telemetry_path", defaults.telemetry_path),
        )

    def _build_ethtool_config(self, raw: Dict[str, Any]) -> EthtoolConfig:
        defaults = EthtoolConfig()
        timeout = raw.get("timeout_seconds", defaults.timeout_seconds)
        return EthtoolConfig(
            path=raw.get("path", defaults.path),
            candidates=list(raw.get("candidates", defaults.candidates)),
            min_version=raw.get("min_version", defaults.min_version),
            timeout_seconds=float(timeout) if timeout is not None else None,
            namespace=raw.get("namespace", defaults.namespace),
        )

    def _build_interfaces_config(self, raw: Dict[str, Any]) -> InterfacesConfig:
        defaults = InterfacesConfig()
        return InterfacesConfig(
            sysfs_dir=raw.get("sysfs_dir", defaults.sysfs_dir),
            include=list(raw.get("include", defaults.include)),
            exclude=list(raw.get("exclude", defaults.exclude)),
            exclude_virtual=bool(raw.get("exclude_virtual", defaults.exclude_virtual)),
            only_up=bool(raw.get("only_up", defaults.only_up)),
        )

    def _build_logging_config(self, raw: Dict[str, Any]) -> LoggingConfig:
        defaults = LoggingConfig()
        return LoggingConfig(
            level=raw.get("level", defaults.level),
            format=raw.get("format", defaults.format),
            console_enabled=bool(raw.get("console_enabled", defaults.console_enabled)),
            file_enabled=bool(raw.get("file_enabled", defaults.file_enabled)),
            file_name=raw.get("file_name", defaults.file_name),
        )
