"""Conformance harness for request factory implementations.

``ReferenceServer`` is a small threaded HTTP server with fixed routes, and
``RequestFactoryContract`` is a pytest base class holding the behavior every
``ClientHttpRequestFactory`` must show against it. Subclass the contract in a
test module, name the subclass ``Test...`` and implement
``create_request_factory``::

    class TestMyFactory(RequestFactoryContract):
        def create_request_factory(self):
            return MyFactory()

This module imports pytest and is meant for test code only.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from types import TracebackType
from typing import Any, Iterator, List, Optional, Tuple, Type
from urllib.parse import urlsplit

import pytest

from .client import ClientHttpRequestFactory
from .exceptions import IllegalStateError, UnsupportedOperationError
from .structures import HttpMethod
from .utils import copy, copy_to_bytes

logger = logging.getLogger(__name__)

STATUS_ALIASES = {"ok": HTTPStatus.OK, "notfound": HTTPStatus.NOT_FOUND}
HOP_BY_HOP_HEADERS = frozenset(["connection", "keep-alive", "content-length", "transfer-encoding"])


@dataclass(frozen=True)
class ObservedRequest:
    method: str
    path: str
    headers: Tuple[Tuple[str, str], ...]
    body: bytes


class _ReferenceHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: Tuple[str, int]) -> None:
        super().__init__(address, ReferenceRequestHandler)
        self.observed: List[ObservedRequest] = []


class ReferenceRequestHandler(BaseHTTPRequestHandler):
    server: _ReferenceHTTPServer

    def _read_chunked(self) -> bytes:
        chunks = []
        while True:
            size = int(self.rfile.readline().split(b";", 1)[0].strip(), 16)
            if size == 0:
                # trailer section ends with an empty line
                while self.rfile.readline() not in (b"\r\n", b"\n", b""):
                    pass
                return b"".join(chunks)
            chunks.append(self.rfile.read(size))
            self.rfile.readline()

    def _read_body(self) -> bytes:
        length = self.headers.get("Content-Length")
        if length is not None:
            return self.rfile.read(int(length))
        if "chunked" in self.headers.get("Transfer-Encoding", "").lower():
            return self._read_chunked()
        return b""

    def _respond(self, status: int, body: bytes = b"", headers: Tuple[Tuple[str, str], ...] = ()) -> None:
        self.send_response(status)
        for name, value in headers:
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body and self.command != "HEAD":
            self.wfile.write(body)

    def _echo(self, body: bytes) -> None:
        headers = tuple(
            (name, value) for name, value in self.headers.items() if name.lower() not in HOP_BY_HOP_HEADERS
        )
        self._respond(HTTPStatus.OK, body, headers)

    def _status(self, name: str) -> None:
        status = STATUS_ALIASES.get(name)
        if status is None and name.isdigit() and 100 <= int(name) <= 599:
            status = int(name)
        if status is None:
            self._respond(HTTPStatus.NOT_FOUND)
            return
        self._respond(status)

    def _method(self, verb: str, body: bytes) -> None:
        expected = verb.upper()
        if self.command != expected:
            self._respond(HTTPStatus.INTERNAL_SERVER_ERROR, f"Invalid HTTP method: {self.command}".encode())
            return
        declared = self.headers.get("Content-Length")
        if expected == "POST" and declared is not None and int(declared) != len(body):
            message = f"Invalid content-length: declared {declared}, received {len(body)}"
            self._respond(HTTPStatus.INTERNAL_SERVER_ERROR, message.encode())
            return
        self._respond(HTTPStatus.OK)

    def _dispatch(self) -> None:
        path = urlsplit(self.path).path
        body = self._read_body()
        self.server.observed.append(
            ObservedRequest(self.command, path, tuple(self.headers.items()), body)
        )
        if path == "/echo":
            self._echo(body)
        elif path.startswith("/status/"):
            self._status(path[len("/status/"):])
        elif path.startswith("/methods/"):
            self._method(path[len("/methods/"):], body)
        else:
            self._respond(HTTPStatus.NOT_FOUND)

    do_GET = do_HEAD = do_POST = do_PUT = do_PATCH = do_DELETE = do_OPTIONS = _dispatch  # noqa: N815

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


class ReferenceServer:
    """Threaded reference server on an ephemeral localhost port.

    Routes: ``/echo`` returns the received headers and body, ``/status/<name>``
    returns a fixed status (``ok``, ``notfound`` or a numeric code), and
    ``/methods/<verb>`` answers 200 only when the request used ``<verb>``.
    """

    def __init__(self, host: str = "127.0.0.1") -> None:
        self._host = host
        self._server: Optional[_ReferenceHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ReferenceServer":
        if self._server is not None:
            return self
        self._server = _ReferenceHTTPServer((self._host, 0))
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.debug("Reference server listening on %s", self.base_url)
        return self

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=1)
        self._server = None
        self._thread = None

    @property
    def base_url(self) -> str:
        if self._server is None:
            raise IllegalStateError("Reference server is not running")
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @property
    def observed(self) -> List[ObservedRequest]:
        if self._server is None:
            return []
        return self._server.observed

    def __enter__(self) -> "ReferenceServer":
        return self.start()

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.stop()


HTTP_METHODS = [
    HttpMethod.GET,
    HttpMethod.HEAD,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.OPTIONS,
    HttpMethod.DELETE,
]


class RequestFactoryContract:
    """Tests every request factory implementation must pass."""

    def create_request_factory(self) -> ClientHttpRequestFactory:
        raise NotImplementedError

    @pytest.fixture(scope="class")
    @classmethod
    def reference_server(cls) -> Iterator[ReferenceServer]:
        with ReferenceServer() as server:
            yield server

    @pytest.fixture
    def factory(self) -> ClientHttpRequestFactory:
        return self.create_request_factory()

    def test_status(self, factory: ClientHttpRequestFactory, reference_server: ReferenceServer) -> None:
        uri = reference_server.url("/status/notfound")
        request = factory.create_request(uri, HttpMethod.GET)
        assert request.method is HttpMethod.GET
        assert request.uri == uri

        with request.execute() as response:
            assert response.status_code == HTTPStatus.NOT_FOUND
            assert response.status_text

        assert request.method is HttpMethod.GET
        assert request.uri == uri

    def test_echo(self, factory: ClientHttpRequestFactory, reference_server: ReferenceServer) -> None:
        request = factory.create_request(reference_server.url("/echo"), HttpMethod.PUT)
        assert request.method is HttpMethod.PUT
        request.headers.add("MyHeader", "value1")
        request.headers.add("MyHeader", "value2")
        body = "Hello World".encode("utf-8")
        request.headers.content_length = len(body)
        copy(body, request.body)

        with request.execute() as response:
            assert response.status_text
            assert response.status_code == HTTPStatus.OK
            assert "MyHeader" in response.headers
            assert "myheader" in response.headers
            assert response.headers["MyHeader"] == ["value1", "value2"]
            assert copy_to_bytes(response.body) == body

    def test_multiple_writes(self, factory: ClientHttpRequestFactory, reference_server: ReferenceServer) -> None:
        request = factory.create_request(reference_server.url("/echo"), HttpMethod.POST)
        body = b"Hello World"
        sink = request.body
        copy(body, sink)

        with request.execute():
            with pytest.raises(IllegalStateError):
                copy(body, request.body)
            with pytest.raises(IllegalStateError):
                copy(body, sink)

    def test_second_execute(self, factory: ClientHttpRequestFactory, reference_server: ReferenceServer) -> None:
        request = factory.create_request(reference_server.url("/status/ok"), HttpMethod.GET)

        with request.execute():
            with pytest.raises(IllegalStateError):
                request.execute()

    def test_headers_after_execute(
        self, factory: ClientHttpRequestFactory, reference_server: ReferenceServer
    ) -> None:
        request = factory.create_request(reference_server.url("/echo"), HttpMethod.POST)
        request.headers.add("MyHeader", "value")
        copy(b"Hello World", request.body)

        with request.execute():
            with pytest.raises(UnsupportedOperationError):
                request.headers.add("MyHeader", "value")
            with pytest.raises(UnsupportedOperationError):
                request.headers["Other"] = "value"
            assert request.headers["MyHeader"] == ["value"]

    @pytest.mark.parametrize("method", HTTP_METHODS, ids=lambda method: method.value)
    def test_http_methods(
        self, factory: ClientHttpRequestFactory, reference_server: ReferenceServer, method: HttpMethod
    ) -> None:
        path = method.value.lower()
        request = factory.create_request(reference_server.url(f"/methods/{path}"), method)

        with request.execute() as response:
            assert response.status_code == HTTPStatus.OK
            assert request.method.value == path.upper()

    @pytest.mark.parametrize("body", [b"", b"Hello World", bytes(range(256)) * 64], ids=["empty", "text", "binary"])
    def test_post_content_length(
        self, factory: ClientHttpRequestFactory, reference_server: ReferenceServer, body: bytes
    ) -> None:
        request = factory.create_request(reference_server.url("/methods/post"), HttpMethod.POST)
        request.headers.content_length = len(body)
        copy(body, request.body)

        with request.execute() as response:
            assert response.status_code == HTTPStatus.OK

        observed = reference_server.observed[-1]
        assert observed.path == "/methods/post"
        assert len(observed.body) == len(body)
        assert observed.body == body


__all__ = [
    "HTTP_METHODS",
    "ObservedRequest",
    "ReferenceRequestHandler",
    "ReferenceServer",
    "RequestFactoryContract",
]
