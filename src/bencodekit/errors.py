"""
Exceptions raised while decoding or encoding Bencoded data.
"""
__all__ = [
    "BencodeError",
    "BencodeDecodeError",
    "UnexpectedEndOfInput",
    "UnexpectedToken",
    "DuplicateDictKey",
    "NestingTooDeep",
    "StringTooLong",
    "IntegerOverflow",
    "DecodeIntegerOverflow",
    "InvalidType",
]


class BencodeError(Exception):
    """Base class for every error raised by bencodekit."""


class BencodeDecodeError(BencodeError):
    """Custom exception for Bencode decoding errors.

    ``position`` is the byte offset at which the problem was detected, or
    None when it is not known.
    """
    def __init__(self, message: str, position=None):
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)
        self.position = position


class UnexpectedEndOfInput(BencodeDecodeError):
    """Input ran out before the current construct was complete."""
    def __init__(self, position=None):
        super().__init__("Unexpected end of input", position)


class UnexpectedToken(BencodeDecodeError):
    """A specific tag or delimiter was expected and another byte was found."""
    def __init__(self, expected: str, found, position=None):
        self.expected = expected
        self.found = found
        super().__init__(f"Expected {expected}, found {_describe(found)}", position)


class DuplicateDictKey(BencodeDecodeError):
    """A dictionary repeated one of its keys."""
    def __init__(self, key: bytes, position=None):
        self.key = key
        super().__init__(f"Duplicate dictionary key {key!r}", position)


class NestingTooDeep(BencodeDecodeError):
    """Lists and dicts are nested deeper than the configured limit."""
    def __init__(self, limit: int, position=None):
        self.limit = limit
        super().__init__(f"Nesting deeper than {limit} levels", position)


class StringTooLong(BencodeDecodeError):
    """A string declares a length above the configured limit."""
    def __init__(self, length: int, limit: int, position=None):
        self.length = length
        self.limit = limit
        super().__init__(f"String length {length} exceeds limit {limit}", position)


class IntegerOverflow(BencodeError, OverflowError):
    """Integer does not fit in a signed 64-bit value.

    Raised as is when encoding or building a BencodeInt. The decoder raises
    DecodeIntegerOverflow, which is also a BencodeDecodeError.
    """
    def __init__(self, message: str = "Integer exceeds signed 64-bit range", position=None):
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)
        self.position = position


class DecodeIntegerOverflow(IntegerOverflow, BencodeDecodeError):
    """Integer literal in the input does not fit in a signed 64-bit value."""


class InvalidType(BencodeError, TypeError):
    """Object has no Bencode representation."""


def _describe(found) -> str:
    if found is None:
        return "end of input"
    if isinstance(found, int):
        return repr(bytes([found]))
    return repr(found)
