from __future__ import annotations

import enum
from collections.abc import Mapping, MutableMapping
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

from urllib3 import HTTPHeaderDict

from .exceptions import UnsupportedOperationError


class HttpMethod(str, enum.Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    @classmethod
    def resolve(cls, method: Union["HttpMethod", str]) -> "HttpMethod":
        if isinstance(method, cls):
            return method
        if not isinstance(method, str):
            raise TypeError("method must be HttpMethod or str")
        try:
            return cls[method.upper()]
        except KeyError:
            raise ValueError(f"Unsupported HTTP method: {method!r}") from None

    def __str__(self) -> str:
        return self.value


HeaderValues = Union[str, Iterable[str]]


class HttpHeaders(MutableMapping):
    """Case-insensitive, multi-valued header collection.

    Lines are kept in a ``urllib3`` ``HTTPHeaderDict``: names keep the
    spelling of their first occurrence, and names and the values under each
    name keep insertion order. Indexing returns the list of values. Once
    frozen, every mutation raises ``UnsupportedOperationError``.
    """

    def __init__(
        self,
        headers: Optional[Union[Mapping[str, HeaderValues], Iterable[Tuple[str, str]]]] = None,
        *,
        read_only: bool = False,
    ) -> None:
        self._lines = HTTPHeaderDict()
        self._read_only = False
        if headers is not None:
            pairs = headers.items() if isinstance(headers, Mapping) else headers
            for name, value in pairs:
                for item in _as_values(value):
                    self.add(name, item)
        self._read_only = read_only

    @property
    def read_only(self) -> bool:
        return self._read_only

    def freeze(self) -> None:
        """Make the collection permanently read-only."""

        self._read_only = True

    def _check_writable(self) -> None:
        if self._read_only:
            raise UnsupportedOperationError("HTTP headers are read-only")

    def add(self, name: str, value: str) -> None:
        """Append a value under ``name``, keeping any existing values."""

        self._check_writable()
        _check_header(name, value)
        self._lines.add(name, value)

    def set(self, name: str, value: str) -> None:
        """Replace all values under ``name`` with a single value."""

        self[name] = [value]

    def get_first(self, name: str, default: Optional[str] = None) -> Optional[str]:
        values = self._lines.getlist(name) if isinstance(name, str) else []
        return values[0] if values else default

    def multi_items(self) -> List[Tuple[str, str]]:
        """Return one ``(name, value)`` pair per value, in insertion order."""

        return list(self._lines.iteritems())

    def as_header_dict(self) -> HTTPHeaderDict:
        """Return a mutable ``HTTPHeaderDict`` copy of the header lines."""

        return self._lines.copy()

    def __getitem__(self, name: str) -> List[str]:
        if name not in self._lines:
            raise KeyError(name)
        return self._lines.getlist(name)

    def __setitem__(self, name: str, values: HeaderValues) -> None:
        self._check_writable()
        items = _as_values(values)
        if not items:
            raise ValueError("header must have at least one value")
        for item in items:
            _check_header(name, item)
        first, *rest = items
        self._lines[name] = first
        for item in rest:
            self._lines.add(name, item)

    def __delitem__(self, name: str) -> None:
        self._check_writable()
        if name not in self._lines:
            raise KeyError(name)
        del self._lines[name]

    def __contains__(self, name: Any) -> bool:
        return name in self._lines

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.multi_items()!r})"

    @property
    def content_length(self) -> Optional[int]:
        value = self.get_first("Content-Length")
        if value is None:
            return None
        try:
            length = int(value)
        except ValueError:
            raise ValueError(f"Invalid Content-Length header value: {value!r}") from None
        if length < 0:
            raise ValueError(f"Invalid Content-Length header value: {value!r}")
        return length

    @content_length.setter
    def content_length(self, length: int) -> None:
        if length < 0:
            raise ValueError("Content-Length must not be negative")
        self.set("Content-Length", str(length))

    @property
    def content_type(self) -> Optional[str]:
        return self.get_first("Content-Type")

    @content_type.setter
    def content_type(self, value: str) -> None:
        self.set("Content-Type", value)


def _check_header(name: str, value: str) -> None:
    if not isinstance(name, str):
        raise TypeError("header name must be str")
    if not isinstance(value, str):
        raise TypeError("header value must be str")


def _as_values(value: HeaderValues) -> List[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


__all__ = ["HttpMethod", "HttpHeaders"]
