"""
HTTP exposition server for the Prometheus text format.
Serves the registry on a single configured path; every other path is 404.

States:
    Starting - ``bind()`` opens the listener; failure is fatal
    Serving  - ``serve_forever()`` handles requests, one thread each
"""
import errno
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Tuple
from urllib.parse import urlsplit

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from puppet_exporter.common.correlation import CorrelationContext, set_component
from puppet_exporter.common.exceptions import ConfigurationError, ListenerBindFailure
from puppet_exporter.common.logging_config import get_logger

logger = get_logger(__name__)


class _MetricsHTTPServer(ThreadingHTTPServer):
    """One thread per request; a second exporter on the same port must fail to bind."""
    daemon_threads = True
    allow_reuse_port = False
    request_queue_size = 128


class _MetricsHTTPServerV6(_MetricsHTTPServer):
    address_family = socket.AF_INET6


class _MetricsHTTPServerDualStack(_MetricsHTTPServerV6):
    """Wildcard listener accepting both IPv6 and IPv4-mapped connections."""

    def server_bind(self):
        self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
        super().server_bind()


def _create_http_server(host: str, port: int, handler) -> _MetricsHTTPServer:
    """
    Build the listener for *host*. An empty host listens on every interface,
    dual-stack where the kernel supports IPv6 and IPv4 only otherwise.
    """
    if ":" in host:
        return _MetricsHTTPServerV6((host, port), handler)
    if host or not socket.has_ipv6:
        return _MetricsHTTPServer((host, port), handler)

    try:
        return _MetricsHTTPServerDualStack(("::", port), handler)
    except OSError as e:
        if e.errno not in (errno.EAFNOSUPPORT, errno.EADDRNOTAVAIL):
            raise
        logger.warning(f"IPv6 unavailable ({e.strerror}), listening on IPv4 only")
        return _MetricsHTTPServer(("", port), handler)


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a listen address into (host, port).

    Accepts ``:9309`` (all interfaces), ``host:9309`` and ``[::1]:9309``.

    Raises:
        ConfigurationError: missing or invalid port
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ConfigurationError(f"Listen address {address!r} is missing a port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigurationError(
            f"IPv6 listen address {address!r} must be in [host]:port form"
        )

    try:
        port = int(port_str)
    except ValueError:
        raise ConfigurationError(f"Invalid port in listen address {address!r}")
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"Port out of range in listen address {address!r}")

    return host, port


class MetricsHTTPHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the metrics endpoint."""

    # Class-level references (set by ExporterServer)
    registry: Optional[CollectorRegistry] = None
    endpoint: str = "/metrics"

    def do_GET(self):
        """Serve the registry on the configured endpoint."""
        if urlsplit(self.path).path != self.endpoint:
            self._send(404, b"Not Found\n", "text/plain; charset=utf-8")
            return

        # Request threads start with an empty context
        set_component("scrape")
        with CorrelationContext():
            output = generate_latest(self.registry)
        self._send(200, output, CONTENT_TYPE_LATEST)

    def _send(self, status_code: int, body: bytes, content_type: str):
        self.send_response(status_code)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        """Suppress default access logging to avoid noise."""
        pass


class ExporterServer:
    """
    Threaded HTTP server exposing a CollectorRegistry.

    Usage:
        server = ExporterServer(registry, address=":9309", endpoint="/metrics")
        server.bind()
        server.serve_forever()
    """

    def __init__(
        self,
        registry: CollectorRegistry,
        address: str = ":9309",
        endpoint: str = "/metrics"
    ):
        """
        Initialize exporter server.

        Args:
            registry: registry rendered on every scrape
            address: listen address, ``[host]:port``
            endpoint: path under which metrics are served

        Raises:
            ConfigurationError: invalid address or endpoint
        """
        if not endpoint.startswith("/"):
            raise ConfigurationError(f"Endpoint {endpoint!r} must start with '/'")

        self.registry = registry
        self.address = address
        self.endpoint = endpoint
        self.host, self.port = parse_listen_address(address)
        self._server: Optional[_MetricsHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    def bind(self) -> None:
        """
        Open the listening socket.

        Raises:
            ListenerBindFailure: address in use or insufficient privilege
        """
        handler = type(
            'MetricsHandler',
            (MetricsHTTPHandler,),
            {'registry': self.registry, 'endpoint': self.endpoint}
        )

        try:
            self._server = _create_http_server(self.host, self.port, handler)
        except OSError as e:
            raise ListenerBindFailure(
                f"Failed to bind {self.address}: {e.strerror or e}"
            ) from e
        logger.info(
            f"Listening on {self.address} -> "
            f"http://{self.host or 'localhost'}:{self.server_address[1]}{self.endpoint}"
        )

    def serve_forever(self) -> None:
        """Serve requests until the process ends or ``stop()`` is called."""
        if self._server is None:
            self.bind()
        self._server.serve_forever()

    def start(self) -> None:
        """Bind if needed and serve in a daemon thread."""
        if self._server is None:
            self.bind()
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="exporter-server",
            daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop serving and close the listening socket."""
        if self._server:
            if self._thread is not None:
                self._server.shutdown()
                self._thread.join(timeout=5)
            self._server.server_close()
            self._server = None
            logger.info("Exporter server stopped")

    @property
    def server_address(self) -> Tuple[str, int]:
        """Actual bound (host, port); differs from the config when port is 0."""
        if self._server is None:
            return self.host, self.port
        return self._server.server_address[:2]

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
