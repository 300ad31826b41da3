"""
Bencode decoder for BitTorrent metainfo and tracker responses.
"""
import logging
from typing import Optional, Tuple

from .errors import (
    BencodeDecodeError,
    DecodeIntegerOverflow,
    DuplicateDictKey,
    NestingTooDeep,
    StringTooLong,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from .readers import BufferReader, ByteReader, SequentialReader
from .structure import (
    INT64_MAX,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
    BencodeStringView,
    BencodeType,
)

logger = logging.getLogger(__name__)

# Lists and dicts nested deeper than this are refused unless overridden
DEFAULT_MAX_DEPTH = 256

_DIGIT_0 = ord("0")
_DIGIT_9 = ord("9")
_TAG_INT = ord("i")
_TAG_LIST = ord("l")
_TAG_DICT = ord("d")
_TAG_END = ord("e")
_MINUS = ord("-")
_COLON = ord(":")


def _is_digit(byte) -> bool:
    return byte is not None and _DIGIT_0 <= byte <= _DIGIT_9


class BencodeDecoder:
    """
    Decodes one Bencoded value from a ByteReader into a tree of BencodeType.

    With ``view=True`` strings are returned as BencodeStringView slices of
    the input buffer instead of copies, which needs a reader that supports
    views.
    """
    def __init__(self, reader: ByteReader, view: bool = False,
                 max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
                 max_string_length: Optional[int] = None):
        if view and not reader.supports_view:
            raise TypeError("View mode requires a contiguous buffer, not a sequential source")
        self.reader = reader
        self.view = view
        self.max_depth = max_depth
        self.max_string_length = max_string_length
        self.depth = 0

    def decode(self) -> BencodeType:
        """Main decode entry point. Decodes exactly one value."""
        self.depth = 0
        try:
            return self._parse_value()
        except BencodeDecodeError as exc:
            logger.debug("Bencode decoding failed: %s", exc)
            raise

    # --------------------------
    # Low-level utilities
    # --------------------------

    def _peek(self):
        ch = self.reader.peek()
        if ch is None:
            raise UnexpectedEndOfInput(self.reader.position)
        return ch

    def _consume(self):
        ch = self.reader.advance()
        if ch is None:
            raise UnexpectedEndOfInput(self.reader.position)
        return ch

    def _expect(self, tag: int, what: str):
        position = self.reader.position
        ch = self._consume()
        if ch != tag:
            raise UnexpectedToken(what, ch, position)

    def _enter(self):
        self.depth += 1
        if self.max_depth is not None and self.depth > self.max_depth:
            raise NestingTooDeep(self.max_depth, self.reader.position)

    # --------------------------
    # Parsing functions
    # --------------------------

    def _parse_value(self) -> BencodeType:
        ch = self._peek()

        if ch == _TAG_INT:
            return self._parse_int()

        if _is_digit(ch):  # Bencode strings start with length, which is a digit
            return self._parse_string()

        if ch == _TAG_LIST:
            return self._parse_list()

        if ch == _TAG_DICT:
            return self._parse_dict()

        raise UnexpectedToken("'i', 'l', 'd' or a digit", ch, self.reader.position)

    def _parse_int(self) -> BencodeInt:
        """Parses an integer from the Bencoded data."""
        self._consume()  # skip 'i'

        start = self.reader.position
        negative = self.reader.peek() == _MINUS
        if negative:
            self._consume()

        # a negative value may reach one past INT64_MAX in magnitude
        limit = INT64_MAX + 1 if negative else INT64_MAX
        first = self.reader.position
        value = 0
        digits = 0
        while _is_digit(self._peek()):
            if digits == 1 and value == 0:
                raise UnexpectedToken("'e' after leading zero", self.reader.peek(), self.reader.position)
            value = value * 10 + self._consume() - _DIGIT_0
            digits += 1
            if value > limit:
                raise DecodeIntegerOverflow(position=start)

        if digits == 0:
            raise UnexpectedToken("a digit", self.reader.peek(), first)
        if negative and value == 0:
            raise UnexpectedToken("a non-zero value after '-'", ord("0"), first)

        self._expect(_TAG_END, "'e'")
        return BencodeInt(-value if negative else value)

    def _parse_length(self) -> int:
        start = self.reader.position
        length = 0
        digits = 0
        while _is_digit(self._peek()):
            if digits == 1 and length == 0:
                raise UnexpectedToken("':' after leading zero", self.reader.peek(), self.reader.position)
            length = length * 10 + self._consume() - _DIGIT_0
            digits += 1
            if self.max_string_length is not None and length > self.max_string_length:
                raise StringTooLong(length, self.max_string_length, start)

        if digits == 0:
            raise UnexpectedToken("string length", self.reader.peek(), start)

        self._expect(_COLON, "':'")
        return length

    def _parse_string(self):
        """Parses a byte string from the Bencoded data."""
        length = self._parse_length()
        run = self.reader.read_run(length, view=self.view)
        return BencodeStringView(run) if self.view else BencodeString(run)

    def _parse_key(self) -> bytes:
        length = self._parse_length()
        return bytes(self.reader.read_run(length))

    def _parse_list(self) -> BencodeList:
        """Parses a list from the Bencoded data."""
        self._consume()  # skip 'l'
        self._enter()
        items = []

        while self._peek() != _TAG_END:
            items.append(self._parse_value())

        self._consume()  # skip 'e'
        self.depth -= 1
        return BencodeList(items)

    def _parse_dict(self) -> BencodeDict:
        """Parses a dictionary from the Bencoded data."""
        self._consume()  # skip 'd'
        self._enter()
        obj = {}

        while True:
            ch = self._peek()
            if ch == _TAG_END:
                break
            # keys MUST be strings
            if not _is_digit(ch):
                raise UnexpectedToken("string key", ch, self.reader.position)
            position = self.reader.position
            key = self._parse_key()
            if key in obj:
                raise DuplicateDictKey(key, position)
            obj[key] = self._parse_value()

        self._consume()  # skip 'e'
        self.depth -= 1
        return BencodeDict(obj)


# ------------------------------------------------------------
#   Entry points
# ------------------------------------------------------------

def _is_buffer(data) -> bool:
    return isinstance(data, (bytes, bytearray, memoryview))


def decode(data, *, max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
           max_string_length: Optional[int] = None) -> BencodeType:
    """
    Convenience function to decode Bencoded data.

    ``data`` may be a bytes-like buffer, a binary file-like object, an
    iterable of byte chunks or a SequentialReader. A buffer must hold exactly
    one value; trailing bytes are an error. Streams are read up to the end of
    the first value, see decode_stream().
    """
    if isinstance(data, str):
        raise TypeError("Bencoded data must be bytes, not str")
    if not _is_buffer(data):
        return decode_stream(data, check_eof=False, max_depth=max_depth,
                             max_string_length=max_string_length)

    reader = BufferReader(data)
    result = BencodeDecoder(reader, max_depth=max_depth,
                            max_string_length=max_string_length).decode()
    _check_trailing(reader)
    return result


def decode_view(data, *, max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
                max_string_length: Optional[int] = None) -> BencodeType:
    """
    Decodes a buffer without copying strings.

    Every string in the result is a BencodeStringView aliasing ``data``; the
    tree must not outlive the buffer and reflects later writes to it.
    """
    if not _is_buffer(data):
        raise TypeError("View mode requires a contiguous buffer, not a sequential source")

    reader = BufferReader(data)
    result = BencodeDecoder(reader, view=True, max_depth=max_depth,
                            max_string_length=max_string_length).decode()
    _check_trailing(reader)
    return result


def decode_from(data, start: int = 0, end: Optional[int] = None, *,
                max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
                max_string_length: Optional[int] = None) -> Tuple[BencodeType, int]:
    """
    Decodes one value from ``data[start:end]``.

    Returns the value and the offset just past it, so the exact bytes of a
    value can be recovered as ``data[start:stop]``.
    """
    reader = BufferReader(data, start, end)
    result = BencodeDecoder(reader, max_depth=max_depth,
                            max_string_length=max_string_length).decode()
    return result, reader.position


def decode_view_from(data, start: int = 0, end: Optional[int] = None, *,
                     max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
                     max_string_length: Optional[int] = None) -> Tuple[BencodeType, int]:
    """View-mode counterpart of decode_from()."""
    reader = BufferReader(data, start, end)
    result = BencodeDecoder(reader, view=True, max_depth=max_depth,
                            max_string_length=max_string_length).decode()
    return result, reader.position


def decode_stream(stream, check_eof: bool = True, *,
                  max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
                  max_string_length: Optional[int] = None) -> BencodeType:
    """
    Decodes one value from a sequential source, reading no further than its end.

    With ``check_eof`` the source is probed afterwards and the outcome stored
    in ``reader.eof``. Pass a SequentialReader (or use StreamDecoder) to see
    the flag. A bare stream is only probed when it offers ``peek``, since any
    byte read from it here would be lost to the caller.
    """
    owned = not isinstance(stream, SequentialReader)
    reader = SequentialReader(stream) if owned else stream
    result = BencodeDecoder(reader, max_depth=max_depth,
                            max_string_length=max_string_length).decode()
    if check_eof and (reader.can_peek or not owned):
        reader.probe_eof()
    return result


def _check_trailing(reader: BufferReader):
    if reader.remaining:
        exc = UnexpectedToken("end of input", reader.peek(), reader.position)
        logger.debug("Bencode decoding failed: %s", exc)
        raise exc


class StreamDecoder:
    """
    Decodes consecutive top-level values from one sequential source.

    ``eof`` tells whether the source was exhausted after the last value.
    Iterating yields values until the source ends cleanly between two values;
    running out of input in the middle of a value still raises.
    """
    def __init__(self, source, check_eof: bool = True, *,
                 max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
                 max_string_length: Optional[int] = None):
        self.reader = source if isinstance(source, SequentialReader) else SequentialReader(source)
        self.check_eof = check_eof
        self.max_depth = max_depth
        self.max_string_length = max_string_length

    @property
    def eof(self) -> bool:
        return self.reader.eof

    def decode(self) -> BencodeType:
        return decode_stream(self.reader, self.check_eof, max_depth=self.max_depth,
                             max_string_length=self.max_string_length)

    def __iter__(self):
        while not self.reader.probe_eof():
            yield self.decode()


def iterdecode(source, **kwargs):
    """Yields every top-level value in ``source`` until it is exhausted."""
    return iter(StreamDecoder(source, **kwargs))
