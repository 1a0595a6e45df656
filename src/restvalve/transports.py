from __future__ import annotations

import io
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Optional, Union

import httpx
import requests
from urllib3 import HTTPHeaderDict

from .client import AbstractClientHttpRequest, ClientHttpRequestFactory, ClientHttpResponse
from .exceptions import RequestTimeoutError, TransportError
from .structures import HttpHeaders, HttpMethod
from .utils import BUFFER_SIZE, IterableBodyStream


class HttpxClientHttpResponse(ClientHttpResponse):
    def __init__(self, response: httpx.Response, resources: ExitStack) -> None:
        super().__init__()
        self._response = response
        self._resources = resources
        self._headers = HttpHeaders(
            ((name.decode("latin-1"), value.decode("latin-1")) for name, value in response.headers.raw),
            read_only=True,
        )

    @property
    def raw_status_code(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> HttpHeaders:
        return self._headers

    def _open_body(self) -> io.RawIOBase:
        return IterableBodyStream(self._response.iter_bytes())

    def _release(self) -> None:
        try:
            self._response.close()
        finally:
            self._resources.close()


class HttpxClientHttpRequest(AbstractClientHttpRequest):
    def __init__(
        self,
        uri: str,
        method: Union[HttpMethod, str],
        client: Optional[httpx.Client],
        timeout: float,
    ) -> None:
        super().__init__(uri, method)
        self._client = client
        self._timeout = timeout

    def _execute_internal(self, headers: HttpHeaders, body: bytes) -> ClientHttpResponse:
        with ExitStack() as stack:
            client = self._client
            if client is None:
                client = stack.enter_context(httpx.Client(timeout=self._timeout))
            request = client.build_request(
                self.method.value,
                self.uri,
                headers=headers.multi_items(),
                content=body or None,
            )
            try:
                response = client.send(request, stream=True, follow_redirects=False)
            except httpx.TimeoutException as exc:
                raise RequestTimeoutError("HTTP request timeout exceeded.") from exc
            except httpx.HTTPError as exc:
                raise TransportError("HTTP transport error in httpx client.") from exc
            return HttpxClientHttpResponse(response, stack.pop_all())


@dataclass
class HttpxClientHttpRequestFactory(ClientHttpRequestFactory):
    """Request factory backed by ``httpx``.

    Without a shared ``client`` every request opens its own ``httpx.Client``,
    which is closed together with the response.
    """

    timeout: float = 10.0
    client: Optional[httpx.Client] = None

    def create_request(self, uri: str, method: Union[HttpMethod, str]) -> AbstractClientHttpRequest:
        return HttpxClientHttpRequest(uri, method, self.client, self.timeout)


class RequestsClientHttpResponse(ClientHttpResponse):
    def __init__(self, response: requests.Response, resources: ExitStack) -> None:
        super().__init__()
        self._response = response
        self._resources = resources
        self._headers = HttpHeaders(response.raw.headers.items(), read_only=True)

    @property
    def raw_status_code(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason or ""

    @property
    def headers(self) -> HttpHeaders:
        return self._headers

    def _open_body(self) -> io.RawIOBase:
        return IterableBodyStream(self._response.iter_content(chunk_size=BUFFER_SIZE))

    def _release(self) -> None:
        try:
            self._response.close()
        finally:
            self._resources.close()


class RequestsClientHttpRequest(AbstractClientHttpRequest):
    def __init__(
        self,
        uri: str,
        method: Union[HttpMethod, str],
        session: Optional[requests.Session],
        timeout: float,
    ) -> None:
        super().__init__(uri, method)
        self._session = session
        self._timeout = timeout

    @staticmethod
    def _wire_headers(prepared: requests.PreparedRequest, headers: HttpHeaders) -> HTTPHeaderDict:
        # requests folds repeated headers into one value; urllib3 writes one line per value
        wire = headers.as_header_dict()
        for name, value in prepared.headers.items():
            if name not in wire:
                wire.add(name, value)
        return wire

    def _execute_internal(self, headers: HttpHeaders, body: bytes) -> ClientHttpResponse:
        with ExitStack() as stack:
            session = self._session
            if session is None:
                session = stack.enter_context(requests.Session())
            prepared = session.prepare_request(
                requests.Request(self.method.value, self.uri, data=body or None)
            )
            prepared.headers = self._wire_headers(prepared, headers)
            try:
                response = session.send(prepared, stream=True, timeout=self._timeout, allow_redirects=False)
            except requests.Timeout as exc:
                raise RequestTimeoutError("HTTP request timeout exceeded.") from exc
            except requests.RequestException as exc:
                raise TransportError("HTTP transport error in requests client.") from exc
            return RequestsClientHttpResponse(response, stack.pop_all())


@dataclass
class RequestsClientHttpRequestFactory(ClientHttpRequestFactory):
    """Request factory backed by ``requests``.

    Without a shared ``session`` every request opens its own
    ``requests.Session``, which is closed together with the response.
    """

    timeout: float = 10.0
    session: Optional[requests.Session] = None

    def create_request(self, uri: str, method: Union[HttpMethod, str]) -> AbstractClientHttpRequest:
        return RequestsClientHttpRequest(uri, method, self.session, self.timeout)


__all__ = [
    "HttpxClientHttpRequestFactory",
    "HttpxClientHttpRequest",
    "HttpxClientHttpResponse",
    "RequestsClientHttpRequestFactory",
    "RequestsClientHttpRequest",
    "RequestsClientHttpResponse",
]
