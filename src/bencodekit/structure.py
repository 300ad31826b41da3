"""
Data structures for representing Bencoded types.

Every decoded node is one of four kinds: integer, byte string, list or
dictionary. Byte strings come in two flavours. ``BencodeString`` owns a copy
of its bytes, ``BencodeStringView`` borrows a slice of the buffer it was
decoded from and stays valid only as long as that buffer does.
"""
from collections.abc import Mapping

from .errors import DuplicateDictKey, IntegerOverflow, InvalidType

__all__ = [
    "BencodeType",
    "BencodeInt",
    "BencodeString",
    "BencodeStringView",
    "BencodeList",
    "BencodeDict",
    "INT64_MIN",
    "INT64_MAX",
    "wrap",
]

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


class BencodeType:
    """Base class for all Bencode data types."""
    __slots__ = ("value",)

    def to_python(self):
        """Returns the native Python equivalent of this node."""
        raise NotImplementedError

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value

    __hash__ = None


class BencodeInt(BencodeType):
    """Represents a Bencoded integer."""
    __slots__ = ()

    def __init__(self, value: int):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("BencodeInt requires an integer.")
        if not INT64_MIN <= value <= INT64_MAX:
            raise IntegerOverflow(f"Integer {value} exceeds signed 64-bit range")
        self.value = value

    def to_python(self) -> int:
        return self.value

    def __hash__(self):
        return hash((BencodeInt, self.value))

    def __repr__(self):
        return f"BencodeInt({self.value})"


class BencodeString(BencodeType):
    """Represents a Bencoded byte string that owns its bytes."""
    __slots__ = ()

    def __init__(self, value: bytes):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("BencodeString requires bytes.")
        self.value = bytes(value)

    def to_python(self) -> bytes:
        return self.value

    def __bytes__(self):
        return self.value

    def __len__(self):
        return len(self.value)

    def __eq__(self, other):
        if isinstance(other, BencodeStringView):
            return self.value == other.value
        return super().__eq__(other)

    def __hash__(self):
        return hash((BencodeString, self.value))

    def __repr__(self):
        return f"BencodeString({self.value!r})"


class BencodeStringView(BencodeType):
    """
    Represents a Bencoded byte string borrowed from the decoded buffer.

    ``value`` is a memoryview aliasing the source buffer: writes to a mutable
    source (e.g. a bytearray) after decoding show through the view, and the
    source cannot be resized while the view is alive. Call ``tobytes()`` to
    take an owned copy.
    """
    __slots__ = ()

    def __init__(self, value: memoryview):
        if not isinstance(value, memoryview):
            raise TypeError("BencodeStringView requires a memoryview.")
        self.value = value

    def tobytes(self) -> bytes:
        return self.value.tobytes()

    def to_python(self) -> bytes:
        return self.value.tobytes()

    def __bytes__(self):
        return self.value.tobytes()

    def __len__(self):
        return self.value.nbytes

    def __eq__(self, other):
        if isinstance(other, (BencodeStringView, BencodeString)):
            return self.value == other.value
        return NotImplemented

    def __repr__(self):
        return f"BencodeStringView({self.value.tobytes()!r})"


class BencodeList(BencodeType):
    """Represents a Bencoded list."""
    __slots__ = ()

    def __init__(self, value: list):
        if not isinstance(value, list):
            raise TypeError("BencodeList requires a list.")
        self.value = value

    def to_python(self) -> list:
        return [item.to_python() for item in self.value]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def __getitem__(self, index):
        return self.value[index]

    def __repr__(self):
        return f"BencodeList({self.value!r})"


class BencodeDict(BencodeType):
    """
    Represents a Bencoded dictionary.

    Keys are bytes. Iteration always follows ascending byte order of the keys,
    whatever order they were supplied in, which is also the order they are
    written on the wire.
    """
    __slots__ = ()

    def __init__(self, value: dict):
        if not isinstance(value, dict):
            raise TypeError("BencodeDict requires a dict.")
        # keys must be bytes (bencode requirement)
        for k in value.keys():
            if not isinstance(k, bytes):
                raise TypeError("BencodeDict keys must be bytes.")
        self.value = dict(sorted(value.items(), key=lambda item: item[0]))

    def to_python(self) -> dict:
        return {k: v.to_python() for k, v in self.value.items()}

    def get(self, key: bytes, default=None):
        return self.value.get(key, default)

    def keys(self):
        return self.value.keys()

    def items(self):
        return self.value.items()

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def __contains__(self, key):
        return key in self.value

    def __getitem__(self, key: bytes):
        return self.value[key]

    def __repr__(self):
        return f"BencodeDict({self.value!r})"


def wrap(obj) -> BencodeType:
    """
    Builds a Bencode value tree from native Python objects.

    str is encoded as UTF-8, tuples become lists and mapping keys may be
    bytes or str. Existing BencodeType nodes are passed through untouched.
    """
    if isinstance(obj, BencodeType):
        return obj

    if isinstance(obj, bool):
        raise InvalidType("Cannot bencode object of type <class 'bool'>")

    if isinstance(obj, int):
        return BencodeInt(obj)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BencodeString(obj)

    if isinstance(obj, str):
        return BencodeString(obj.encode())

    if isinstance(obj, (list, tuple)):
        return BencodeList([wrap(item) for item in obj])

    if isinstance(obj, Mapping):
        items = {}
        for key, value in obj.items():
            key_bytes = key_to_bytes(key)
            if key_bytes in items:
                raise DuplicateDictKey(key_bytes)
            items[key_bytes] = wrap(value)
        return BencodeDict(items)

    raise InvalidType(f"Cannot bencode object of type {type(obj)}")


def key_to_bytes(key) -> bytes:
    """Normalizes a mapping key to the bytes written on the wire."""
    if isinstance(key, str):
        return key.encode()
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    if isinstance(key, (BencodeString, BencodeStringView)):
        return bytes(key)
    raise InvalidType(f"Dictionary keys must be bytes or str, not {type(key)}")
