from __future__ import annotations

from .client import (
    AbstractClientHttpRequest,
    ClientHttpRequestFactory,
    ClientHttpResponse,
    DefaultResponseErrorHandler,
    RequestState,
    ResponseErrorHandler,
)
from .exceptions import (
    DEFAULT_CHARSET,
    HttpStatusCodeError,
    IllegalStateError,
    RequestTimeoutError,
    RestClientError,
    StatusClass,
    TransportError,
    UnsupportedOperationError,
)
from .structures import HttpHeaders, HttpMethod
from .transports import HttpxClientHttpRequestFactory, RequestsClientHttpRequestFactory
from .utils import IterableBodyStream, charset_from_content_type, copy, copy_to_bytes, lookup_charset

__all__ = [
    "AbstractClientHttpRequest",
    "ClientHttpRequestFactory",
    "ClientHttpResponse",
    "RequestState",
    "ResponseErrorHandler",
    "DefaultResponseErrorHandler",
    "HttpxClientHttpRequestFactory",
    "RequestsClientHttpRequestFactory",
    "HttpHeaders",
    "HttpMethod",
    "copy",
    "copy_to_bytes",
    "lookup_charset",
    "charset_from_content_type",
    "IterableBodyStream",
    "DEFAULT_CHARSET",
    "StatusClass",
    "RestClientError",
    "HttpStatusCodeError",
    "TransportError",
    "RequestTimeoutError",
    "IllegalStateError",
    "UnsupportedOperationError",
]
