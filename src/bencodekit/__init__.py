"""
Bencode package for encoding and decoding BitTorrent data.
"""
from .decoder import (
    DEFAULT_MAX_DEPTH,
    BencodeDecoder,
    StreamDecoder,
    decode,
    decode_from,
    decode_stream,
    decode_view,
    decode_view_from,
    iterdecode,
)
from .encoder import DictEncoder, ListEncoder, encode, encode_dict, encode_list, encode_to
from .errors import (
    BencodeDecodeError,
    BencodeError,
    DecodeIntegerOverflow,
    DuplicateDictKey,
    IntegerOverflow,
    InvalidType,
    NestingTooDeep,
    StringTooLong,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from .readers import BufferReader, ByteReader, SequentialReader
from .structure import (
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
    BencodeStringView,
    BencodeType,
    wrap,
)

__all__ = [
    'decode', 'decode_view', 'decode_from', 'decode_view_from', 'decode_stream',
    'iterdecode', 'BencodeDecoder', 'StreamDecoder', 'DEFAULT_MAX_DEPTH',
    'encode', 'encode_to', 'encode_list', 'encode_dict', 'ListEncoder', 'DictEncoder',
    'BencodeType', 'BencodeInt', 'BencodeString', 'BencodeStringView', 'BencodeList',
    'BencodeDict', 'wrap',
    'ByteReader', 'BufferReader', 'SequentialReader',
    'BencodeError', 'BencodeDecodeError', 'UnexpectedEndOfInput', 'UnexpectedToken',
    'DuplicateDictKey', 'NestingTooDeep', 'StringTooLong', 'IntegerOverflow', 'DecodeIntegerOverflow',
    'InvalidType',
]
