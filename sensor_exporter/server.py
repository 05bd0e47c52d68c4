"""
Metric registry and HTTP exposition endpoint.

Scrapes are answered by a threaded WSGI server: the telemetry path is served
by prometheus_client's exposition app, every other path gets a small HTML
index page pointing at it.
"""

import html
import socket
import threading
from collections.abc import Callable, Iterable
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import (
    CollectorRegistry,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    make_wsgi_app,
)

from .collectors.base import MetricCollector
from .const import APP_NAME, DEFAULT_TELEMETRY_PATH
from .logging import get_logger

logger = get_logger("http")

INDEX_TEMPLATE = """<html>
<head><title>{title}</title></head>
<body>
<h1>{title}</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def build_registry(
    collectors: Iterable[MetricCollector],
    runtime_metrics: bool = True,
) -> CollectorRegistry:
    """
    Create a registry holding the given collectors.

    Args:
        collectors: Sensor collectors to expose
        runtime_metrics: Also expose process, platform and GC metrics

    Returns:
        Registry ready to be served
    """
    registry = CollectorRegistry()
    for collector in collectors:
        registry.register(collector)
        logger.debug(f"Registered {collector!r}")

    if runtime_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)

    return registry


class ExporterApp:
    """WSGI application routing the telemetry path and the index page."""

    def __init__(self, registry: CollectorRegistry, telemetry_path: str = DEFAULT_TELEMETRY_PATH):
        self.telemetry_path = telemetry_path
        self._metrics_app = make_wsgi_app(registry)
        self._index = INDEX_TEMPLATE.format(
            title=html.escape(APP_NAME),
            path=html.escape(telemetry_path, quote=True),
        ).encode("utf-8")

    def __call__(self, environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "/") == self.telemetry_path:
            return self._metrics_app(environ, start_response)

        start_response(
            "200 OK",
            [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(self._index))),
            ],
        )
        return [self._index]


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """One thread per request so a slow scrape does not hold up others."""

    daemon_threads = True


class _LoggingHandler(WSGIRequestHandler):
    """Route access logs to our logger instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} {format % args}")


def _best_family(host: str, port: int) -> tuple[socket.AddressFamily, str]:
    """Pick the address family for binding host (empty host = all interfaces)."""
    infos = socket.getaddrinfo(
        host or None, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
    )
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr[0]


class MetricsServer:
    """
    HTTP server exposing a registry.

    Usage:
        server = MetricsServer(registry, "", 9255, "/metrics")
        server.start()
        ...
        server.stop()
    """

    def __init__(
        self,
        registry: CollectorRegistry,
        host: str,
        port: int,
        telemetry_path: str = DEFAULT_TELEMETRY_PATH,
    ):
        """
        Initialize server.

        Args:
            registry: Registry to serve
            host: Bind host (empty for all interfaces)
            port: Bind port (0 picks a free port)
            telemetry_path: Path serving the exposition text
        """
        self.host = host
        self.app = ExporterApp(registry, telemetry_path)

        self._requested_port = port
        self._httpd: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        """Bound port (the requested one until started)."""
        if self._httpd is not None:
            return self._httpd.server_port
        return self._requested_port

    def start(self) -> None:
        """
        Bind and start serving in a background thread.

        Raises:
            OSError: If the address cannot be bound
        """
        family, bind_host = _best_family(self.host, self._requested_port)

        class Server(_ThreadingWSGIServer):
            address_family = family

        self._httpd = make_server(
            bind_host,
            self._requested_port,
            self.app,
            server_class=Server,
            handler_class=_LoggingHandler,
        )
        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="metrics-http",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            f"Serving metrics on {bind_host or '*'}:{self.port}{self.app.telemetry_path}"
        )

    def stop(self) -> None:
        """Stop serving and release the socket."""
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
        self._httpd = None
        self._thread = None
        logger.info("Metrics server stopped")
