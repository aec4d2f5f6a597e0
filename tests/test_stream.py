import pytest

from kbeclient.stream import MemoryStream


@pytest.mark.parametrize(
    "kind, value",
    [
        ("int8", -128),
        ("int8", 127),
        ("int16", -32768),
        ("int16", 32767),
        ("int32", -(2**31)),
        ("int32", 2**31 - 1),
        ("int64", -(2**63)),
        ("int64", 2**63 - 1),
        ("uint8", 255),
        ("uint16", 65535),
        ("uint32", 2**32 - 1),
        ("uint64", 2**64 - 1),
    ],
)
def test_integer_round_trip(kind, value):
    stream = MemoryStream()
    getattr(stream, f"write_{kind}")(value)
    assert getattr(stream, f"read_{kind}")() == value
    assert len(stream) == 0


def test_float_and_double_round_trip():
    stream = MemoryStream()
    stream.write_float(1.5)
    stream.write_double(0.1)
    assert stream.read_float() == 1.5
    assert stream.read_double() == 0.1


def test_uint32_is_little_endian():
    stream = MemoryStream()
    stream.write_uint32(1)
    assert stream.getvalue() == b"\x01\x00\x00\x00"


def test_string_is_nul_terminated():
    stream = MemoryStream()
    stream.write_string("ab")
    assert stream.getvalue() == b"ab\x00"
    assert stream.read_string() == "ab"


def test_blob_has_length_prefix():
    stream = MemoryStream()
    stream.write_blob(b"xy")
    assert stream.getvalue() == b"\x02\x00\x00\x00xy"
    assert stream.read_blob() == b"xy"


def test_unicode_round_trip():
    stream = MemoryStream()
    stream.write_unicode("héllo 世界")
    assert stream.read_unicode() == "héllo 世界"


def test_vectors_round_trip():
    stream = MemoryStream()
    stream.write_vector2((1.0, 2.0))
    stream.write_vector3((1.0, -2.5, 3.0))
    stream.write_vector4((0.5, 0.25, 4.0, 8.0))
    assert stream.read_vector2() == (1.0, 2.0)
    assert stream.read_vector3() == (1.0, -2.5, 3.0)
    assert stream.read_vector4() == (0.5, 0.25, 4.0, 8.0)


def test_vector_with_wrong_arity_raises():
    with pytest.raises(ValueError):
        MemoryStream().write_vector3((1.0, 2.0))


def test_read_past_end_raises():
    stream = MemoryStream(b"\x01")
    with pytest.raises(EOFError):
        stream.read_uint16()


def test_unterminated_string_raises():
    with pytest.raises(EOFError):
        MemoryStream(b"abc").read_string()


def test_blob_shorter_than_prefix_raises():
    stream = MemoryStream()
    stream.write_uint32(10)
    stream.append(b"abc")
    with pytest.raises(EOFError):
        stream.read_blob()


def test_out_of_range_write_raises():
    with pytest.raises(ValueError):
        MemoryStream().write_uint8(256)
    with pytest.raises(ValueError):
        MemoryStream().write_int16(-40000)


def test_string_with_nul_rejected():
    with pytest.raises(ValueError):
        MemoryStream().write_string("a\0b")


def test_space_tracks_writes():
    stream = MemoryStream(capacity=16)
    stream.write_uint32(7)
    stream.write_uint16(3)
    assert stream.space() + len(stream.getvalue()) == 16


def test_space_never_negative():
    stream = MemoryStream(capacity=2)
    stream.write_uint64(5)
    assert stream.space() == 0


def test_reading_shrinks_length():
    stream = MemoryStream()
    stream.write_uint16(1)
    stream.write_uint16(2)
    before = len(stream)
    stream.read_uint16()
    assert len(stream) == before - 2
    assert stream.read_uint16() == 2


def test_initial_data_and_append():
    stream = MemoryStream(b"\x05")
    stream.append(b"\x06")
    assert stream.read_uint8() == 5
    assert stream.read_uint8() == 6


def test_clear_resets():
    stream = MemoryStream()
    stream.write_uint32(9)
    stream.clear()
    assert len(stream) == 0
    assert stream.getvalue() == b""