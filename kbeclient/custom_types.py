"""User-defined entity types: fixed dicts and arrays declared in the entity defs."""

from __future__ import annotations

from dataclasses import dataclass, field

from .bundle import Bundle
from .stream import MemoryStream


def _read_array(stream: MemoryStream, read_item) -> list:
    count = stream.read_uint32()
    return [read_item() for _ in range(count)]


def _write_array(bundle: Bundle, values, write_item) -> None:
    items = list(values)
    bundle.write_uint32(len(items))
    for item in items:
        write_item(item)


def read_forbid_counter(stream: MemoryStream) -> list[int]:
    """ENTITY_FORBID_COUNTER: an array of int8."""
    return _read_array(stream, stream.read_int8)


def write_forbid_counter(bundle: Bundle, values) -> None:
    _write_array(bundle, values, bundle.write_int8)


def read_entityid_list(stream: MemoryStream) -> list[int]:
    """ENTITYID_LIST: an array of int32 entity ids."""
    return _read_array(stream, stream.read_int32)


def write_entityid_list(bundle: Bundle, values) -> None:
    _write_array(bundle, values, bundle.write_int32)


def read_int32_array(stream: MemoryStream) -> list[int]:
    """An anonymous array of int32."""
    return _read_array(stream, stream.read_int32)


def write_int32_array(bundle: Bundle, values) -> None:
    _write_array(bundle, values, bundle.write_int32)


@dataclass
class AvatarData:
    param1: int = 0
    param2: bytes = b""

    @classmethod
    def read(cls, stream: MemoryStream) -> "AvatarData":
        param1 = stream.read_int8()
        param2 = stream.read_blob()
        return cls(param1, param2)

    def write(self, bundle: Bundle) -> None:
        bundle.write_int8(self.param1)
        bundle.write_blob(self.param2)


@dataclass
class AvatarInfos:
    dbid: int = 0
    name: str = ""
    role_type: int = 0
    level: int = 0
    data: AvatarData = field(default_factory=AvatarData)

    @classmethod
    def read(cls, stream: MemoryStream) -> "AvatarInfos":
        dbid = stream.read_uint64()
        name = stream.read_unicode()
        role_type = stream.read_uint8()
        level = stream.read_uint16()
        data = AvatarData.read(stream)
        return cls(dbid, name, role_type, level, data)

    def write(self, bundle: Bundle) -> None:
        bundle.write_uint64(self.dbid)
        bundle.write_unicode(self.name)
        bundle.write_uint8(self.role_type)
        bundle.write_uint16(self.level)
        self.data.write(bundle)


@dataclass
class AvatarInfosList:
    values: list[AvatarInfos] = field(default_factory=list)

    @classmethod
    def read(cls, stream: MemoryStream) -> "AvatarInfosList":
        return cls(_read_array(stream, lambda: AvatarInfos.read(stream)))

    def write(self, bundle: Bundle) -> None:
        _write_array(bundle, self.values, lambda info: info.write(bundle))


@dataclass
class Bag:
    values22: list[list[int]] = field(default_factory=list)

    @classmethod
    def read(cls, stream: MemoryStream) -> "Bag":
        return cls(
            _read_array(stream, lambda: _read_array(stream, stream.read_int64))
        )

    def write(self, bundle: Bundle) -> None:
        _write_array(
            bundle,
            self.values22,
            lambda row: _write_array(bundle, row, bundle.write_int64),
        )


@dataclass
class Examples:
    k1: int = 0
    k2: int = 0

    @classmethod
    def read(cls, stream: MemoryStream) -> "Examples":
        k1 = stream.read_int64()
        k2 = stream.read_int64()
        return cls(k1, k2)

    def write(self, bundle: Bundle) -> None:
        bundle.write_int64(self.k1)
        bundle.write_int64(self.k2)