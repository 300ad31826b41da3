"""
Bencode encoder for BitTorrent metainfo and tracker responses.

Values are written straight to a sink: any object with ``write(bytes)`` or a
bytearray, which is appended to. ``encode()`` collects the output in memory.
"""
import logging
from collections.abc import Mapping

from .errors import DuplicateDictKey, IntegerOverflow, InvalidType
from .structure import (
    INT64_MAX,
    INT64_MIN,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
    BencodeStringView,
    key_to_bytes,
)

logger = logging.getLogger(__name__)


def encode(obj) -> bytes:
    """Encodes a Python object or BencodeType into bencoded bytes."""
    out = bytearray()
    encode_to(out, obj)
    return bytes(out)


def encode_to(sink, obj):
    """Writes the bencoded form of ``obj`` to ``sink``."""
    write = _writer(sink)

    if isinstance(obj, bool):
        raise InvalidType(f"Cannot bencode object of type {type(obj)}")

    if isinstance(obj, (int, BencodeInt)):
        value = obj if isinstance(obj, int) else obj.value
        write(encode_int(value))
        return

    if isinstance(obj, str):
        write(encode_str(obj))
        return

    if isinstance(obj, (bytes, bytearray, memoryview)):
        _write_bytes(write, obj)
        return

    if isinstance(obj, (BencodeString, BencodeStringView)):
        _write_bytes(write, obj.value)
        return

    if isinstance(obj, (list, tuple, BencodeList)):
        value = obj.value if isinstance(obj, BencodeList) else obj
        with ListEncoder(sink) as lst:
            for item in value:
                lst.add(item)
        return

    if isinstance(obj, (Mapping, BencodeDict)):
        value = obj.value if isinstance(obj, BencodeDict) else obj
        with DictEncoder(sink) as dct:
            for key, item in _sorted_items(value):
                dct.add(key, item)
        return

    raise InvalidType(f"Cannot bencode object of type {type(obj)}")


# ------------------------------------------------------------
#   Encoding primitives
# ------------------------------------------------------------

def encode_int(n: int) -> bytes:
    """Encodes an integer to bencoded bytes (e.g., i123e)."""
    if not INT64_MIN <= n <= INT64_MAX:
        raise IntegerOverflow(f"Integer {n} exceeds signed 64-bit range")
    return b"i%de" % n


def encode_bytes(b: bytes) -> bytes:
    """Encodes bytes to bencoded bytes (e.g., 4:spam)."""
    return str(len(b)).encode() + b":" + bytes(b)


def encode_str(s: str) -> bytes:
    """Encodes a string to bencoded bytes (e.g., 4:spam)."""
    b = s.encode()
    return encode_bytes(b)


def _write_bytes(write, b):
    if isinstance(b, memoryview) and b.format != "B":
        b = b.cast("B")
    write(b"%d:" % len(b))
    write(b)


def _sorted_items(d):
    """Returns mapping items ordered by their key bytes, rejecting colliding keys."""
    items = {}
    for key, value in d.items():
        key_bytes = key_to_bytes(key)
        if key_bytes in items:
            raise DuplicateDictKey(key_bytes)
        items[key_bytes] = value
    return sorted(items.items(), key=lambda item: item[0])


def _writer(sink):
    if isinstance(sink, bytearray):
        return sink.extend
    write = getattr(sink, "write", None)
    if write is None:
        raise InvalidType(f"Cannot write bencoded data to {type(sink)}")
    return write


# ------------------------------------------------------------
#   Incremental builders
# ------------------------------------------------------------

class _ContainerEncoder:
    """
    Shared open/add/end protocol of the list and dict builders.

    The opening tag is written on construction. Used as a context manager the
    closing 'e' is written on exit, also when the block raises, so the sink
    never ends with an unterminated container.
    """
    OPEN = b""

    def __init__(self, sink):
        self.sink = sink
        self._write = _writer(sink)
        self.closed = False
        self._write(self.OPEN)

    def _check_open(self):
        if self.closed:
            raise RuntimeError(f"{type(self).__name__} already ended")

    def end(self):
        """Writes the terminator. Calling it again does nothing."""
        if not self.closed:
            self._write(b"e")
            self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            logger.debug("Closing %s after %s", type(self).__name__, exc_type.__name__)
        self.end()
        return False


class ListEncoder(_ContainerEncoder):
    """Writes a list one item at a time: l<item>...e."""
    OPEN = b"l"

    def add(self, value) -> "ListEncoder":
        self._check_open()
        encode_to(self.sink, value)
        return self


class DictEncoder(_ContainerEncoder):
    """
    Writes a dict one pair at a time: d<key><value>...e.

    Keys are written in the order they are added and repeats are not
    detected. Add them in ascending byte order to get canonical output.
    """
    OPEN = b"d"

    def add(self, key, value) -> "DictEncoder":
        self._check_open()
        _write_bytes(self._write, key_to_bytes(key))
        encode_to(self.sink, value)
        return self


def encode_list(sink, *items):
    """Writes all ``items`` as one bencoded list."""
    with ListEncoder(sink) as lst:
        for item in items:
            lst.add(item)


def encode_dict(sink, *items):
    """Writes alternating ``key, value`` arguments as one bencoded dict."""
    if len(items) % 2:
        raise ValueError("encode_dict() needs an even number of key/value arguments")
    with DictEncoder(sink) as dct:
        for i in range(0, len(items), 2):
            dct.add(items[i], items[i + 1])

