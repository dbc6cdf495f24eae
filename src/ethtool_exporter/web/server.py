from __future__ import annotations

import socket
from socketserver import ThreadingMixIn
from typing import Callable, Iterable, Optional, Tuple
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import REGISTRY, make_wsgi_app
from prometheus_client.registry import CollectorRegistry

from ethtool_exporter.core.logger import get_logger, log_phase

logger = get_logger(__name__)


DEFAULT_LISTEN_ADDRESS = ":9490"
DEFAULT_TELEMETRY_PATH = "/metrics"

LANDING_PAGE = """<html>
<head><title>Ethtool Exporter</title></head>
<body>
<h1>Ethtool Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""

StartResponse = Callable[..., object]


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Découpe une adresse d'écoute "host:port".

    Formats acceptés :
      - ":9490"          -> toutes les interfaces
      - "0.0.0.0:9490"
      - "[::1]:9490"     -> IPv6

    Lève ValueError si le port est absent ou invalide.
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ValueError(f"Adresse d'écoute invalide (port manquant): {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Port invalide dans l'adresse d'écoute: {address!r}") from None

    if not 0 <= port <= 65535:
        raise ValueError(f"Port hors limites dans l'adresse d'écoute: {address!r}")

    return host, port


class ExporterApp:
    """
    Application WSGI de l'exporter.

      - <telemetry_path> : exposition Prometheus (format texte)
      - /                : page d'accueil avec un lien vers les métriques
      - autre            : 404
    """

    def __init__(
        self,
        registry: CollectorRegistry = REGISTRY,
        telemetry_path: str = DEFAULT_TELEMETRY_PATH,
    ) -> None:
        self.telemetry_path = telemetry_path
        self.metrics_app = make_wsgi_app(registry)

    def __call__(self, environ: dict, start_response: StartResponse) -> Iterable[bytes]:
        path = environ.get("PATH_INFO") or "/"

        if path == self.telemetry_path:
            return self.metrics_app(environ, start_response)

        if path == "/":
            body = LANDING_PAGE.format(path=self.telemetry_path).encode("utf-8")
            start_response(
                "200 OK",
                [("Content-Type", "text/html; charset=utf-8"), ("Content-Length", str(len(body)))],
            )
            return [body]

        body = b"404 page not found\n"
        start_response(
            "404 Not Found",
            [("Content-Type", "text/plain; charset=utf-8"), ("Content-Length", str(len(body)))],
        )
        return [body]


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Un thread par requête de scrape."""

    daemon_threads = True


class ThreadingWSGIServerV6(ThreadingWSGIServer):
    address_family = socket.AF_INET6


class _QuietRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: object) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def create_server(
    listen_address: str = DEFAULT_LISTEN_ADDRESS,
    telemetry_path: str = DEFAULT_TELEMETRY_PATH,
    registry: CollectorRegistry = REGISTRY,
) -> WSGIServer:
    """
    Crée (et bind) le serveur HTTP.

    Lève ValueError pour une adresse mal formée, OSError si le bind échoue
    (adresse déjà utilisée, permission...).
    """
    host, port = parse_listen_address(listen_address)
    server_class = ThreadingWSGIServerV6 if ":" in host else ThreadingWSGIServer

    app = ExporterApp(registry=registry, telemetry_path=telemetry_path)
    return make_server(
        host,
        port,
        app,
        server_class=server_class,
        handler_class=_QuietRequestHandler,
    )


def serve(
    listen_address: str = DEFAULT_LISTEN_ADDRESS,
    telemetry_path: str = DEFAULT_TELEMETRY_PATH,
    registry: CollectorRegistry = REGISTRY,
    server: Optional[WSGIServer] = None,
) -> None:
    """Bloque jusqu'à l'arrêt du process (ou server.shutdown())."""
    server = server or create_server(listen_address, telemetry_path, registry)
    log_phase(logger, "web.listen", f"Écoute sur {listen_address} (métriques sur {telemetry_path})")
    try:
        server.serve_forever()
    finally:
        server.server_close()
