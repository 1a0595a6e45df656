from __future__ import annotations

import enum
from http import HTTPStatus
from typing import Optional, Union

from .utils import lookup_charset

DEFAULT_CHARSET = "ISO-8859-1"
_DEFAULT_CODEC = lookup_charset(DEFAULT_CHARSET)

StatusCode = Union[HTTPStatus, int]


class StatusClass(enum.IntEnum):
    """Family of an HTTP status code, keyed on its first digit."""

    INFORMATIONAL = 1
    SUCCESSFUL = 2
    REDIRECTION = 3
    CLIENT_ERROR = 4
    SERVER_ERROR = 5

    @classmethod
    def of(cls, status_code: int) -> "StatusClass":
        code = int(status_code)
        if not 100 <= code <= 599:
            raise ValueError(f"No status class for status code [{code}]")
        return cls(code // 100)


def resolve_status(status_code: int) -> StatusCode:
    """Return the HTTPStatus member for a code, or the plain int when unregistered."""

    code = int(status_code)
    if not 100 <= code <= 599:
        raise ValueError(f"Invalid HTTP status code [{code}]")
    try:
        return HTTPStatus(code)
    except ValueError:
        return code


class RestClientError(Exception):
    """Base error raised by the client layer."""


class HttpStatusCodeError(RestClientError):
    """Raised for a response whose status code signals failure.

    Carries the status, its reason phrase and the captured response body so the
    caller can diagnose the failure without holding on to the response. The
    body is never ``None``: a missing body is stored as ``b""`` and a missing
    charset falls back to ISO-8859-1, which decodes any byte sequence. An
    explicit charset must name a text encoding and is stored under its
    canonical codec name, with ISO-8859-1 aliases kept as ``"ISO-8859-1"``.
    """

    def __init__(
        self,
        status_code: int,
        status_text: Optional[str] = None,
        response_body: Optional[bytes] = None,
        response_charset: Optional[str] = None,
    ) -> None:
        status = resolve_status(status_code)
        if status_text is None:
            status_text = status.phrase if isinstance(status, HTTPStatus) else ""
        self._status_code = status
        self._status_text = status_text
        self._response_body = bytes(response_body) if response_body is not None else b""
        charset = lookup_charset(response_charset or DEFAULT_CHARSET)
        self._response_charset = DEFAULT_CHARSET if charset == _DEFAULT_CODEC else charset
        super().__init__(f"{int(status)} {status_text}")

    def __reduce__(self):
        return (
            self.__class__,
            (int(self._status_code), self._status_text, self._response_body, self._response_charset),
        )

    @property
    def status_code(self) -> StatusCode:
        return self._status_code

    @property
    def status_text(self) -> str:
        return self._status_text

    @property
    def status_class(self) -> StatusClass:
        return StatusClass.of(self._status_code)

    @property
    def is_client_error(self) -> bool:
        return self.status_class is StatusClass.CLIENT_ERROR

    @property
    def is_server_error(self) -> bool:
        return self.status_class is StatusClass.SERVER_ERROR

    @property
    def response_body(self) -> bytes:
        return self._response_body

    @property
    def response_charset(self) -> str:
        return self._response_charset

    def body_as_bytes(self) -> bytes:
        """Return the captured response body, ``b""`` when none was captured."""

        return self._response_body

    def body_as_string(self) -> str:
        """Decode the response body with the response charset."""

        # charset names a text codec and undecodable bytes are replaced
        return self._response_body.decode(self._response_charset, errors="replace")


class TransportError(RestClientError):
    """Raised when HTTP client transport fails."""


class RequestTimeoutError(TransportError):
    """Raised when HTTP request exceeds timeout."""


class IllegalStateError(RuntimeError):
    """Raised when an operation is invalid in the object's current lifecycle state."""


class UnsupportedOperationError(TypeError):
    """Raised when an operation is permanently disallowed, e.g. editing frozen headers."""


__all__ = [
    "DEFAULT_CHARSET",
    "StatusClass",
    "resolve_status",
    "RestClientError",
    "HttpStatusCodeError",
    "TransportError",
    "RequestTimeoutError",
    "IllegalStateError",
    "UnsupportedOperationError",
]
