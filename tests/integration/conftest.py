from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Iterator

import pytest

from restvalve.testing import ReferenceServer


@pytest.fixture(scope="session")
def reference_server() -> Iterator[ReferenceServer]:
    with ReferenceServer() as server:
        yield server


@pytest.fixture
def local_error_server() -> Iterator[str]:
    class Handler(BaseHTTPRequestHandler):
        def _reply(self, status: int, body: bytes, content_type: str = "text/plain; charset=utf-8") -> None:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def do_GET(self) -> None:  # noqa: N802
            if self.path.startswith("/unauthorized"):
                self._reply(401, b"unauthorized")
                return
            if self.path.startswith("/not-found"):
                self._reply(404, "nicht gefunden: ü".encode("utf-8"))
                return
            if self.path.startswith("/teapot"):
                self._reply(418, b"teapot", content_type="text/plain")
                return
            if self.path.startswith("/unavailable"):
                self._reply(503, b"try later")
                return
            if self.path.startswith("/slow"):
                time.sleep(0.5)
                self._reply(200, b"slow-ok")
                return
            self._reply(200, b"ok")

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            return

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=1)
