import pytest

from kbeclient.bundle import Bundle
from kbeclient.custom_types import (
    AvatarData,
    AvatarInfos,
    AvatarInfosList,
    Bag,
    Examples,
    read_entityid_list,
    read_forbid_counter,
    read_int32_array,
    write_entityid_list,
    write_forbid_counter,
    write_int32_array,
)
from kbeclient.stream import MemoryStream


def _encode(write) -> bytes:
    bundle = Bundle()
    write(bundle)
    return b"".join(bundle.packets())


def _roundtrip(write, read):
    stream = MemoryStream(_encode(write))
    result = read(stream)
    assert len(stream) == 0
    return result


def test_int32_array_wire_bytes():
    data = _encode(lambda b: write_int32_array(b, [1]))
    assert data == b"\x01\x00\x00\x00\x01\x00\x00\x00"


def test_forbid_counter_wire_bytes():
    data = _encode(lambda b: write_forbid_counter(b, [-1, 2]))
    assert data == b"\x02\x00\x00\x00\xff\x02"


@pytest.mark.parametrize(
    "write, read, values",
    [
        (write_forbid_counter, read_forbid_counter, [0, -128, 127, 5]),
        (write_entityid_list, read_entityid_list, [1, 2, -2147483648, 2147483647]),
        (write_int32_array, read_int32_array, [10, -20, 30]),
        (write_int32_array, read_int32_array, []),
    ],
)
def test_array_roundtrip(write, read, values):
    assert _roundtrip(lambda b: write(b, values), read) == values


def test_forbid_counter_rejects_out_of_range():
    with pytest.raises(ValueError):
        write_forbid_counter(Bundle(), [200])


def test_avatar_data_roundtrip():
    value = AvatarData(-3, b"\x00\x01payload")
    assert _roundtrip(value.write, AvatarData.read) == value


def test_avatar_infos_roundtrip():
    value = AvatarInfos(
        dbid=2**64 - 1, name="勇者", role_type=2, level=65535,
        data=AvatarData(1, b"blob"),
    )
    assert _roundtrip(value.write, AvatarInfos.read) == value


def test_avatar_infos_list_roundtrip():
    value = AvatarInfosList(
        [AvatarInfos(1, "a", 1, 1), AvatarInfos(2, "b", 2, 3, AvatarData(4, b"x"))]
    )
    assert _roundtrip(value.write, AvatarInfosList.read) == value


def test_empty_avatar_infos_list_is_a_zero_count():
    assert _encode(AvatarInfosList().write) == b"\x00\x00\x00\x00"


def test_bag_roundtrip():
    value = Bag([[1, -2, 2**63 - 1], [], [-(2**63)]])
    assert _roundtrip(value.write, Bag.read) == value


def test_examples_roundtrip():
    value = Examples(-9, 2**40)
    assert _roundtrip(value.write, Examples.read) == value


def test_examples_encoded_size():
    assert len(_encode(Examples(1, 2).write)) == 16


def test_truncated_stream_raises():
    data = _encode(AvatarInfos(7, "name", 1, 2).write)
    with pytest.raises(EOFError):
        AvatarInfos.read(MemoryStream(data[:-1]))


def test_truncated_array_raises():
    data = _encode(lambda b: write_int32_array(b, [1, 2, 3]))
    with pytest.raises(EOFError):
        read_int32_array(MemoryStream(data[:8]))