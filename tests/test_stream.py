import io

import pytest

from bencodekit.decoder import StreamDecoder, decode, decode_stream, decode_view, iterdecode
from bencodekit.errors import UnexpectedEndOfInput, UnexpectedToken
from bencodekit.readers import SequentialReader
from bencodekit.structure import BencodeInt, BencodeList, BencodeString


def test_decode_file_object():
    obj = decode(io.BytesIO(b"d3:cow3:moo4:spam4:eggse"))
    assert obj.to_python() == {b"cow": b"moo", b"spam": b"eggs"}


def test_decode_stream_sets_eof():
    reader = SequentialReader(io.BytesIO(b"i42e"))
    assert decode_stream(reader) == BencodeInt(42)
    assert reader.eof is True


def test_decode_stream_without_eof_check():
    reader = SequentialReader(io.BytesIO(b"i42e"))
    decode_stream(reader, check_eof=False)
    assert reader.eof is False


def test_decode_stream_stops_after_value():
    stream = io.BytesIO(b"i1eTRAILER")
    decode_stream(stream, check_eof=False)
    assert stream.read() == b"TRAILER"


def test_buffered_stream_probe_does_not_consume():
    stream = io.BufferedReader(io.BytesIO(b"i7ei8e"))
    reader = SequentialReader(stream)

    assert decode_stream(reader) == BencodeInt(7)
    assert reader.eof is False
    assert stream.peek(1)[:1] == b"i"

    assert decode_stream(reader) == BencodeInt(8)
    assert reader.eof is True


def test_probe_keeps_byte_for_next_value():
    reader = SequentialReader(io.BytesIO(b"i7ei8e"))
    assert decode_stream(reader) == BencodeInt(7)
    assert reader.eof is False
    assert decode_stream(reader) == BencodeInt(8)
    assert reader.eof is True


def test_decode_chunk_iterator():
    chunks = [b"l4:sp", b"", b"am4:eg", bytearray(b"gs"), b"e"]
    obj = decode(iter(chunks))
    assert obj == BencodeList([BencodeString(b"spam"), BencodeString(b"eggs")])


def test_decode_byte_iterator():
    # iterating bytes yields ints
    assert decode(iter(b"i-13e")) == BencodeInt(-13)


def test_truncated_stream():
    with pytest.raises(UnexpectedEndOfInput):
        decode(io.BytesIO(b"5:ab"))
    with pytest.raises(UnexpectedEndOfInput):
        decode(iter([b"l1:a"]))


def test_empty_stream_is_an_error():
    with pytest.raises(UnexpectedEndOfInput):
        decode(io.BytesIO(b""))


def test_stream_errors_match_buffer_errors():
    with pytest.raises(UnexpectedToken):
        decode(io.BytesIO(b"i03e"))


def test_view_mode_needs_a_buffer():
    with pytest.raises(TypeError):
        decode_view(io.BytesIO(b"4:spam"))
    with pytest.raises(TypeError):
        SequentialReader(io.BytesIO(b"ab")).read_run(2, view=True)


def test_stream_decoder_yields_consecutive_values():
    decoder = StreamDecoder(io.BytesIO(b"i1e4:spamle"))
    values = list(decoder)
    assert values == [BencodeInt(1), BencodeString(b"spam"), BencodeList([])]
    assert decoder.eof is True


def test_stream_decoder_decode_one_at_a_time():
    decoder = StreamDecoder(io.BytesIO(b"i1ei2e"))
    assert decoder.decode() == BencodeInt(1)
    assert decoder.eof is False
    assert decoder.decode() == BencodeInt(2)
    assert decoder.eof is True


def test_iterdecode_empty_source():
    assert list(iterdecode(io.BytesIO(b""))) == []


def test_iterdecode_truncated_value():
    with pytest.raises(UnexpectedEndOfInput):
        list(iterdecode(iter([b"i1e", b"i2"])))


def test_long_string_from_stream():
    payload = b"x" * 100000
    obj = decode(io.BytesIO(b"100000:" + payload))
    assert obj.value == payload


def test_stream_position():
    reader = SequentialReader(io.BytesIO(b"4:spami1e"))
    decode_stream(reader, check_eof=False)
    assert reader.position == 6


def test_decode_twice_from_one_stream():
    stream = io.BytesIO(b"i1ei2e")
    assert decode(stream) == BencodeInt(1)
    assert decode(stream) == BencodeInt(2)


def test_decode_stream_default_leaves_rest_of_stream():
    stream = io.BytesIO(b"i1eTRAILER")
    assert decode_stream(stream) == BencodeInt(1)
    assert stream.read() == b"TRAILER"


def test_decode_leaves_rest_of_stream():
    stream = io.BytesIO(b"4:spamTRAILER")
    assert decode(stream) == BencodeString(b"spam")
    assert stream.read() == b"TRAILER"


def test_decode_stream_leaves_rest_of_iterator():
    chunks = iter([b"i1e", b"i2e"])
    assert decode_stream(chunks) == BencodeInt(1)
    assert next(chunks) == b"i2e"


def test_decode_real_file(tmp_path):
    path = tmp_path / "values.bin"
    path.write_bytes(b"d3:cow3:mooei7e")

    with open(path, "rb") as f:
        assert decode(f).to_python() == {b"cow": b"moo"}
        assert decode_stream(f) == BencodeInt(7)
        assert f.read() == b""


def test_real_file_eof_flag(tmp_path):
    path = tmp_path / "value.bin"
    path.write_bytes(b"l4:spame")

    with open(path, "rb") as f:
        reader = SequentialReader(f)
        decode_stream(reader)
        assert reader.eof is True


def test_unbuffered_file(tmp_path):
    path = tmp_path / "values.bin"
    path.write_bytes(b"i1ei2e")

    with open(path, "rb", buffering=0) as f:
        assert decode_stream(f) == BencodeInt(1)
        assert f.read() == b"i2e"


@pytest.mark.parametrize("data", [b"999999999999999:ab", b"99999999999999999999:ab"])
def test_huge_length_prefix_on_short_file(tmp_path, data):
    path = tmp_path / "short.bin"
    path.write_bytes(data)

    with open(path, "rb") as f:
        with pytest.raises(UnexpectedEndOfInput):
            decode(f)


def test_huge_length_prefix_on_iterator():
    with pytest.raises(UnexpectedEndOfInput):
        decode(iter([b"999999999999999:", b"ab"]))
