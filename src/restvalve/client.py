from __future__ import annotations

import abc
import enum
import io
import logging
from types import TracebackType
from typing import BinaryIO, Optional, Type, Union

from .exceptions import (
    HttpStatusCodeError,
    IllegalStateError,
    RestClientError,
    StatusClass,
    StatusCode,
    resolve_status,
)
from .structures import HttpHeaders, HttpMethod
from .utils import charset_from_content_type, copy_to_bytes

logger = logging.getLogger(__name__)


class RequestState(enum.Enum):
    OPEN = "open"
    EXECUTED = "executed"


class ClientHttpResponse(abc.ABC):
    """Response produced by a single ``execute`` call.

    The response owns a transport resource which must be released with
    ``close()``; use it as a context manager so release happens on every exit
    path. ``close()`` may be called any number of times.
    """

    def __init__(self) -> None:
        self._body: Optional[BinaryIO] = None
        self._closed = False

    @property
    @abc.abstractmethod
    def raw_status_code(self) -> int:
        ...

    @property
    @abc.abstractmethod
    def status_text(self) -> str:
        ...

    @property
    @abc.abstractmethod
    def headers(self) -> HttpHeaders:
        ...

    @abc.abstractmethod
    def _open_body(self) -> io.RawIOBase:
        ...

    @abc.abstractmethod
    def _release(self) -> None:
        ...

    @property
    def status_code(self) -> StatusCode:
        return resolve_status(self.raw_status_code)

    @property
    def body(self) -> BinaryIO:
        """Readable, forward-only body stream; the same stream on every access."""

        if self._closed:
            raise IllegalStateError("Response has been closed")
        if self._body is None:
            self._body = io.BufferedReader(self._open_body())
        return self._body

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._body is not None:
                self._body.close()
        finally:
            self._release()

    def __enter__(self) -> "ClientHttpResponse":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class _BufferedRequestBody(io.RawIOBase):
    def __init__(self, request: "AbstractClientHttpRequest") -> None:
        super().__init__()
        self._request = request
        self._buffer = bytearray()

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        self._request._assert_open()
        view = memoryview(data)
        self._buffer += view
        return view.nbytes

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class AbstractClientHttpRequest(abc.ABC):
    """Request bound to a method and URI, executable exactly once.

    Headers and body are mutable while the request is ``OPEN``. ``execute()``
    moves it to ``EXECUTED``: the headers are frozen, the body can no longer
    be written, and a further ``execute()`` is rejected.
    """

    def __init__(self, uri: str, method: Union[HttpMethod, str]) -> None:
        if not isinstance(uri, str):
            raise TypeError("uri must be str")
        self._uri = uri
        self._method = HttpMethod.resolve(method)
        self._headers = HttpHeaders()
        self._body = _BufferedRequestBody(self)
        self._state = RequestState.OPEN

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def method(self) -> HttpMethod:
        return self._method

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def headers(self) -> HttpHeaders:
        return self._headers

    @property
    def body(self) -> BinaryIO:
        """Writable body sink; only available before ``execute()``."""

        self._assert_open()
        return self._body

    def _assert_open(self) -> None:
        if self._state is not RequestState.OPEN:
            raise IllegalStateError("ClientHttpRequest already executed")

    def execute(self) -> ClientHttpResponse:
        self._assert_open()
        self._state = RequestState.EXECUTED
        self._headers.freeze()

        body = self._body.getvalue()
        try:
            declared = self._headers.content_length
        except ValueError as exc:
            raise IllegalStateError(str(exc)) from exc
        if declared is not None and declared != len(body):
            raise IllegalStateError(
                f"Declared Content-Length {declared} does not match body size {len(body)}"
            )

        logger.debug("Executing %s %s (%d body bytes)", self._method.value, self._uri, len(body))
        response = self._execute_internal(self._headers, body)
        logger.debug(
            '%s request for "%s" resulted in %s (%s)',
            self._method.value,
            self._uri,
            response.raw_status_code,
            response.status_text,
        )
        return response

    @abc.abstractmethod
    def _execute_internal(self, headers: HttpHeaders, body: bytes) -> ClientHttpResponse:
        ...


class ClientHttpRequestFactory(abc.ABC):
    """Creates requests for one transport implementation."""

    @abc.abstractmethod
    def create_request(self, uri: str, method: Union[HttpMethod, str]) -> AbstractClientHttpRequest:
        ...


class ResponseErrorHandler(abc.ABC):
    @abc.abstractmethod
    def has_error(self, response: ClientHttpResponse) -> bool:
        ...

    @abc.abstractmethod
    def handle_error(self, response: ClientHttpResponse) -> None:
        ...


class DefaultResponseErrorHandler(ResponseErrorHandler):
    """Raises ``HttpStatusCodeError`` for 4xx and 5xx responses."""

    @staticmethod
    def _status_class(response: ClientHttpResponse) -> StatusClass:
        code = response.raw_status_code
        try:
            return StatusClass.of(code)
        except ValueError:
            raise RestClientError(f"Unknown status code [{code}]") from None

    def has_error(self, response: ClientHttpResponse) -> bool:
        status_class = self._status_class(response)
        return status_class in (StatusClass.CLIENT_ERROR, StatusClass.SERVER_ERROR)

    def handle_error(self, response: ClientHttpResponse) -> None:
        status_class = self._status_class(response)
        if status_class not in (StatusClass.CLIENT_ERROR, StatusClass.SERVER_ERROR):
            raise RestClientError(f"Unknown status code [{response.raw_status_code}]")
        raise HttpStatusCodeError(
            response.raw_status_code,
            response.status_text,
            copy_to_bytes(response.body),
            charset_from_content_type(response.headers.content_type),
        )


__all__ = [
    "RequestState",
    "ClientHttpResponse",
    "AbstractClientHttpRequest",
    "ClientHttpRequestFactory",
    "ResponseErrorHandler",
    "DefaultResponseErrorHandler",
]
