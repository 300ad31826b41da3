"""
Input traversal strategies used by the decoder.

``BufferReader`` walks a contiguous buffer and can take whole runs of bytes at
once, either as copies or as memoryview slices. ``SequentialReader`` pulls
bytes forward from a stream or an iterator and can only copy.
"""
from typing import Iterator, Optional

from .errors import UnexpectedEndOfInput

__all__ = ["ByteReader", "BufferReader", "SequentialReader"]

# upper bound on a single read() when pulling a string run from a stream
READ_CHUNK_SIZE = 64 * 1024


class ByteReader:
    """Capability interface the decoder reads through."""

    supports_view = False

    @property
    def position(self) -> int:
        raise NotImplementedError

    def peek(self) -> Optional[int]:
        """Returns the next byte without consuming it, None at end of input."""
        raise NotImplementedError

    def advance(self) -> Optional[int]:
        """Consumes and returns the next byte, None at end of input."""
        raise NotImplementedError

    def read_run(self, length: int, view: bool = False):
        """Consumes exactly ``length`` bytes."""
        raise NotImplementedError


class BufferReader(ByteReader):
    """
    Random-access reader over ``data[start:end]``.

    ``position`` is an absolute offset into ``data``, so it can be handed back
    to the caller as the end marker of a decoded value.
    """

    supports_view = True

    def __init__(self, data, start: int = 0, end: Optional[int] = None):
        self.data = memoryview(data).cast("B")
        size = self.data.nbytes
        if end is None:
            end = size
        if not 0 <= start <= end <= size:
            raise ValueError(f"Invalid range [{start}, {end}) for buffer of {size} bytes")
        self.i = start  # cursor index
        self.end = end

    @property
    def position(self) -> int:
        return self.i

    @property
    def remaining(self) -> int:
        return self.end - self.i

    def peek(self) -> Optional[int]:
        if self.i >= self.end:
            return None
        return self.data[self.i]

    def advance(self) -> Optional[int]:
        if self.i >= self.end:
            return None
        byte = self.data[self.i]
        self.i += 1
        return byte

    def read_run(self, length: int, view: bool = False):
        if self.end - self.i < length:
            raise UnexpectedEndOfInput(self.end)

        chunk = self.data[self.i:self.i + length]
        self.i += length
        return chunk if view else chunk.tobytes()


class SequentialReader(ByteReader):
    """
    Forward-only reader over a binary stream or an iterator.

    ``source`` is either a file-like object with ``read(n)`` or an iterable
    yielding bytes-like chunks or single byte ints (iterating a bytes object
    gives ints). The reader never asks how much input is left.

    Probing for the end of a source without ``peek`` keeps one byte of
    lookahead inside the reader, so reuse the same reader when decoding
    several values from one source.
    """

    def __init__(self, source):
        self._read = getattr(source, "read", None)
        self._peek_stream = getattr(source, "peek", None)
        self._chunks: Optional[Iterator] = None if self._read is not None else iter(source)
        self._buffer = b""
        self._offset = 0
        self._consumed = 0
        self.eof = False

    @property
    def position(self) -> int:
        return self._consumed

    @property
    def can_peek(self) -> bool:
        """True when the source can be probed without consuming from it."""
        return self._peek_stream is not None

    def _fill(self) -> bool:
        """Makes sure at least one byte is buffered. Returns False on exhaustion."""
        while self._offset >= len(self._buffer):
            if self._read is not None:
                chunk = self._read(1)
            else:
                chunk = next(self._chunks, None)
                if isinstance(chunk, int):
                    chunk = bytes((chunk,))
            if not chunk:
                if chunk is None or self._read is not None:
                    return False
                continue  # empty chunk from an iterator
            self._buffer = bytes(chunk)
            self._offset = 0
        return True

    def peek(self) -> Optional[int]:
        if not self._fill():
            return None
        return self._buffer[self._offset]

    def advance(self) -> Optional[int]:
        if not self._fill():
            return None
        byte = self._buffer[self._offset]
        self._offset += 1
        self._consumed += 1
        return byte

    def read_run(self, length: int, view: bool = False) -> bytes:
        if view:
            raise TypeError("View mode requires a contiguous buffer, not a sequential source")

        out = bytearray()
        while len(out) < length:
            if self._offset >= len(self._buffer) and self._read is not None:
                chunk = self._read(min(length - len(out), READ_CHUNK_SIZE))
                if not chunk:
                    raise UnexpectedEndOfInput(self._consumed)
                out += chunk
                self._consumed += len(chunk)
                continue
            if not self._fill():
                raise UnexpectedEndOfInput(self._consumed)
            take = min(length - len(out), len(self._buffer) - self._offset)
            out += self._buffer[self._offset:self._offset + take]
            self._offset += take
            self._consumed += take
        return bytes(out)

    def probe_eof(self) -> bool:
        """Checks whether the source is exhausted and records it in ``eof``.

        A stream offering ``peek`` is asked directly; otherwise the probed
        byte stays buffered in this reader for the next decode.
        """
        if self._offset < len(self._buffer):
            self.eof = False
        elif self._read is not None and self._peek_stream is not None:
            self.eof = not self._peek_stream(1)
        else:
            self.eof = not self._fill()
        return self.eof
