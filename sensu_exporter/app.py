"""WSGI exposition of the Sensu collector and the server around it."""

import logging
from socketserver import ThreadingMixIn
from typing import List, Optional, Tuple
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer
from wsgiref.simple_server import make_server as _make_server

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from .client import SensuClient
from .collector import CachePoller, SensuCollector
from .config import ExporterConfig, parse_listen_address
from .errors import BindError

log = logging.getLogger(__name__)


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """One thread per scrape."""

    daemon_threads = True


class _LoggingHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.client_address[0], format % args)


def _http_response(start_response, status: str, headers: List[Tuple[str, str]], body: bytes):
    start_response(status, headers)
    return [body]


def make_wsgi_app(registry: CollectorRegistry, metrics_path: str = "/metrics"):
    index = metrics_path.encode("utf-8")

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")

        if path != metrics_path:
            return _http_response(
                start_response,
                "200 OK",
                [("Content-Type", "text/plain; charset=utf-8")],
                index,
            )

        try:
            output = generate_latest(registry)
        except Exception as e:
            log.exception("rendering metrics failed")
            return _http_response(
                start_response,
                "500 Internal Server Error",
                [("Content-Type", "text/plain; charset=utf-8")],
                f"scrape failed: {e}\n".encode("utf-8"),
            )
        return _http_response(
            start_response,
            "200 OK",
            [("Content-Type", CONTENT_TYPE_LATEST)],
            output,
        )

    return app


def make_server(host: str, port: int, app) -> ThreadingWSGIServer:
    try:
        return _make_server(host, port, app, server_class=ThreadingWSGIServer, handler_class=_LoggingHandler)
    except OSError as e:
        raise BindError(f"cannot listen on {host}:{port}: {e}") from e


def build_collector(config: ExporterConfig) -> SensuCollector:
    client = SensuClient(config.api_url, timeout=config.timeout, verify=config.verify_tls)
    return SensuCollector(client, cache=config.cache, include_severity=config.severity)


def serve(config: ExporterConfig, registry: Optional[CollectorRegistry] = None) -> None:
    """Serve metrics until interrupted. Raises BindError if the port is taken."""
    registry = registry if registry is not None else CollectorRegistry()
    collector = build_collector(config)
    registry.register(collector)

    host, port = parse_listen_address(config.listen_address)
    httpd = make_server(host, port, make_wsgi_app(registry, config.metrics_path))

    poller = None
    if config.cache and config.poll_interval > 0:
        poller = CachePoller(collector, config.poll_interval)
        poller.start()

    log.info(
        "Listening on %s",
        config.listen_address,
        extra={"api": collector.client.results_url, "cache": config.cache, "severity": config.severity},
    )
    try:
        httpd.serve_forever()
    finally:
        if poller is not None:
            poller.stop(timeout=config.timeout)
        httpd.server_close()
