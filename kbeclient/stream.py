"""Little-endian binary stream used for packet payloads."""

from __future__ import annotations

import struct
from typing import Sequence

PACKET_MAX_SIZE = 1460

_INT8 = struct.Struct("<b")
_INT16 = struct.Struct("<h")
_INT32 = struct.Struct("<i")
_INT64 = struct.Struct("<q")
_UINT8 = struct.Struct("<B")
_UINT16 = struct.Struct("<H")
_UINT32 = struct.Struct("<I")
_UINT64 = struct.Struct("<Q")
_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")
_VECTOR2 = struct.Struct("<2f")
_VECTOR3 = struct.Struct("<3f")
_VECTOR4 = struct.Struct("<4f")


class MemoryStream:
    """A growable byte buffer with a read cursor and a soft capacity."""

    def __init__(self, data: bytes = b"", capacity: int = PACKET_MAX_SIZE) -> None:
        self._buf = bytearray(data)
        self._rpos = 0
        self.capacity = capacity

    def __len__(self) -> int:
        """Number of bytes not yet read."""
        return len(self._buf) - self._rpos

    def __repr__(self) -> str:
        return f"MemoryStream(unread={len(self)}, capacity={self.capacity})"

    def space(self) -> int:
        """Bytes that can still be written before the capacity is reached."""
        return max(0, self.capacity - len(self._buf))

    def getvalue(self) -> bytes:
        """The unread bytes."""
        return bytes(self._buf[self._rpos:])

    def clear(self) -> None:
        self._buf = bytearray()
        self._rpos = 0

    def append(self, data: bytes) -> None:
        self._buf += data

    def _overwrite(self, offset: int, data: bytes) -> None:
        end = offset + len(data)
        if end > len(self._buf):
            raise IndexError("overwrite past end of stream")
        self._buf[offset:end] = data

    # reading

    def _take(self, size: int) -> bytes:
        end = self._rpos + size
        if end > len(self._buf):
            raise EOFError(f"need {size} bytes, {len(self)} available")
        chunk = bytes(self._buf[self._rpos:end])
        self._rpos = end
        return chunk

    def _read(self, codec: struct.Struct):
        return codec.unpack(self._take(codec.size))

    def read_int8(self) -> int:
        return self._read(_INT8)[0]

    def read_int16(self) -> int:
        return self._read(_INT16)[0]

    def read_int32(self) -> int:
        return self._read(_INT32)[0]

    def read_int64(self) -> int:
        return self._read(_INT64)[0]

    def read_uint8(self) -> int:
        return self._read(_UINT8)[0]

    def read_uint16(self) -> int:
        return self._read(_UINT16)[0]

    def read_uint32(self) -> int:
        return self._read(_UINT32)[0]

    def read_uint64(self) -> int:
        return self._read(_UINT64)[0]

    def read_float(self) -> float:
        return self._read(_FLOAT)[0]

    def read_double(self) -> float:
        return self._read(_DOUBLE)[0]

    def read_string(self) -> str:
        """Read a NUL-terminated string."""
        end = self._buf.find(0, self._rpos)
        if end < 0:
            raise EOFError("unterminated string")
        text = bytes(self._buf[self._rpos:end]).decode("utf-8", errors="replace")
        self._rpos = end + 1
        return text

    def read_blob(self) -> bytes:
        """Read a uint32 length followed by that many bytes."""
        return self._take(self.read_uint32())

    def read_unicode(self) -> str:
        return self.read_blob().decode("utf-8", errors="replace")

    def read_vector2(self) -> tuple[float, float]:
        return self._read(_VECTOR2)

    def read_vector3(self) -> tuple[float, float, float]:
        return self._read(_VECTOR3)

    def read_vector4(self) -> tuple[float, float, float, float]:
        return self._read(_VECTOR4)

    # writing

    def _write(self, codec: struct.Struct, *values) -> None:
        try:
            self._buf += codec.pack(*values)
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    def write_int8(self, v: int) -> None:
        self._write(_INT8, v)

    def write_int16(self, v: int) -> None:
        self._write(_INT16, v)

    def write_int32(self, v: int) -> None:
        self._write(_INT32, v)

    def write_int64(self, v: int) -> None:
        self._write(_INT64, v)

    def write_uint8(self, v: int) -> None:
        self._write(_UINT8, v)

    def write_uint16(self, v: int) -> None:
        self._write(_UINT16, v)

    def write_uint32(self, v: int) -> None:
        self._write(_UINT32, v)

    def write_uint64(self, v: int) -> None:
        self._write(_UINT64, v)

    def write_float(self, v: float) -> None:
        self._write(_FLOAT, v)

    def write_double(self, v: float) -> None:
        self._write(_DOUBLE, v)

    def write_string(self, v: str) -> None:
        """Write a NUL-terminated string."""
        encoded = v.encode("utf-8")
        if b"\0" in encoded:
            raise ValueError("string contains a NUL character")
        self._buf += encoded + b"\0"

    def write_blob(self, v: bytes) -> None:
        data = bytes(v)
        self.write_uint32(len(data))
        self._buf += data

    def write_unicode(self, v: str) -> None:
        self.write_blob(v.encode("utf-8"))

    def write_vector2(self, v: Sequence[float]) -> None:
        self._write(_VECTOR2, *v)

    def write_vector3(self, v: Sequence[float]) -> None:
        self._write(_VECTOR3, *v)

    def write_vector4(self, v: Sequence[float]) -> None:
        self._write(_VECTOR4, *v)