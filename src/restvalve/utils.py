from __future__ import annotations

import codecs
import io
from email.message import Message
from typing import BinaryIO, Iterable, Iterator, Optional, Union

BUFFER_SIZE = 4096


def copy(source: Union[bytes, bytearray, memoryview, BinaryIO], sink: BinaryIO) -> int:
    """Copy bytes or the contents of a readable stream into ``sink``.

    Returns the number of bytes copied. The sink is flushed but not closed.
    """

    if isinstance(source, (bytes, bytearray, memoryview)):
        data = memoryview(source)
        sink.write(data)
        sink.flush()
        return data.nbytes

    count = 0
    while True:
        chunk = source.read(BUFFER_SIZE)
        if not chunk:
            break
        sink.write(chunk)
        count += len(chunk)
    sink.flush()
    return count


def copy_to_bytes(source: Optional[BinaryIO]) -> bytes:
    """Read a stream to its end and return its contents."""

    if source is None:
        return b""
    buffer = io.BytesIO()
    copy(source, buffer)
    return buffer.getvalue()


def lookup_charset(charset: str) -> str:
    """Return the canonical codec name for a text encoding.

    Raises ``LookupError`` for unknown names and for codecs that do not
    decode bytes to text, such as ``base64`` or ``hex``.
    """

    name = codecs.lookup(charset).name
    # bytes-to-bytes and str-to-str codecs refuse bytes.decode
    b"".decode(name)
    return name


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """Extract the ``charset`` parameter from a Content-Type header value.

    Returns ``None`` when there is no parameter or it names no text encoding.
    """

    if not content_type:
        return None
    message = Message()
    message["Content-Type"] = content_type
    charset = message.get_content_charset()
    if charset is None:
        return None
    try:
        lookup_charset(charset)
    except LookupError:
        return None
    return charset


class IterableBodyStream(io.RawIOBase):
    """Forward-only readable stream over an iterator of byte chunks."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        super().__init__()
        self._chunks: Iterator[bytes] = iter(chunks)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


__all__ = [
    "BUFFER_SIZE",
    "copy",
    "copy_to_bytes",
    "lookup_charset",
    "charset_from_content_type",
    "IterableBodyStream",
]
