from __future__ import annotations

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import logging
import socket
import threading

from prometheus_client import CONTENT_TYPE_LATEST

from batadv_exporter.refresh import RefreshOrchestrator

logger = logging.getLogger(__name__)


class ExpositionHandler(BaseHTTPRequestHandler):
    """Answers every request, whatever its path or method, with fresh metrics."""

    server: ExpositionServer

    def _respond(self, include_body: bool = True) -> None:
        body = self.server.scrape()
        self.send_response(200)
        self.send_header("Content-Type", CONTENT_TYPE_LATEST)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if include_body:
            self.wfile.write(body)

    def do_GET(self) -> None:
        self._respond()

    def do_HEAD(self) -> None:
        self._respond(include_body=False)

    do_POST = do_GET
    do_PUT = do_GET
    do_DELETE = do_GET
    do_PATCH = do_GET
    do_OPTIONS = do_GET

    def log_message(self, format: str, *args: object) -> None:
        logger.debug("%s %s", self.address_string(), format % args)


class ExpositionServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        orchestrator: RefreshOrchestrator,
    ) -> None:
        if ":" in address[0]:
            self.address_family = socket.AF_INET6
        self.orchestrator = orchestrator
        super().__init__(address, ExpositionHandler)

    @property
    def port(self) -> int:
        return self.server_address[1]

    def scrape(self) -> bytes:
        return self.orchestrator.scrape()

    def start_background(self) -> threading.Thread:
        thread = threading.Thread(target=self.serve_forever, name="exposition", daemon=True)
        thread.start()
        return thread
