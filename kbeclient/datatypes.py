"""Entity definition data types and their binary (de)serialisation."""

from __future__ import annotations

import re
import struct
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from .bundle import Bundle
from .stream import MemoryStream

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_F32 = struct.Struct("<f")


def _parse_int_prefix(text: str) -> int:
    """Leading integer of `text`, or 0 if there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _parse_float_prefix(text: str) -> float:
    """Leading floating-point number of `text`, or 0.0 if there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _to_f32(value: float) -> float:
    return _F32.unpack(_F32.pack(value))[0]


class DataType(ABC):
    """A type that can be read from a stream and written into a bundle."""

    name = "UNKNOWN"

    def __str__(self) -> str:
        return self.name

    def bind(self, registry: Mapping[int, "DataType"]) -> None:
        """Resolve references to other types by id; plain types need nothing."""

    @abstractmethod
    def create_from_stream(self, stream: MemoryStream) -> Any:
        """Read one value."""

    @abstractmethod
    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        """Write one value."""

    @abstractmethod
    def parse_default(self, text: str) -> Any:
        """The value described by a default-value string."""

    @abstractmethod
    def is_same_type(self, value: Any) -> bool:
        """Whether `value` can be written as this type."""


class IntType(DataType):
    """A fixed-width signed or unsigned integer."""

    def __init__(self, bits: int, signed: bool) -> None:
        if bits not in (8, 16, 32, 64):
            raise ValueError(f"unsupported integer width {bits}")
        self.bits = bits
        self.signed = signed
        self._suffix = f"{'int' if signed else 'uint'}{bits}"
        self.name = self._suffix.upper()
        if signed:
            self.min_value = -(1 << (bits - 1))
            self.max_value = (1 << (bits - 1)) - 1
        else:
            self.min_value = 0
            self.max_value = (1 << bits) - 1

    def _wrap(self, value: int) -> int:
        value &= (1 << self.bits) - 1
        if self.signed and value > self.max_value:
            value -= 1 << self.bits
        return value

    def create_from_stream(self, stream: MemoryStream) -> int:
        return getattr(stream, f"read_{self._suffix}")()

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        getattr(bundle, f"write_{self._suffix}")(int(value))

    def parse_default(self, text: str) -> int:
        return self._wrap(_parse_int_prefix(text))

    def is_same_type(self, value: Any) -> bool:
        return (
            isinstance(value, int)
            and not isinstance(value, bool)
            and self.min_value <= value <= self.max_value
        )


class FloatType(DataType):
    name = "FLOAT"

    def create_from_stream(self, stream: MemoryStream) -> float:
        return stream.read_float()

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        bundle.write_float(float(value))

    def parse_default(self, text: str) -> float:
        return _to_f32(_parse_float_prefix(text))

    def is_same_type(self, value: Any) -> bool:
        return isinstance(value, float)


class DoubleType(DataType):
    name = "DOUBLE"

    def create_from_stream(self, stream: MemoryStream) -> float:
        return stream.read_double()

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        bundle.write_double(float(value))

    def parse_default(self, text: str) -> float:
        return _parse_float_prefix(text)

    def is_same_type(self, value: Any) -> bool:
        return isinstance(value, float)


class StringType(DataType):
    """A NUL-terminated string."""

    name = "STRING"

    def create_from_stream(self, stream: MemoryStream) -> str:
        return stream.read_string()

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        bundle.write_string(str(value))

    def parse_default(self, text: str) -> str:
        return text

    def is_same_type(self, value: Any) -> bool:
        return isinstance(value, str)


class UnicodeType(DataType):
    """A length-prefixed UTF-8 string."""

    name = "UNICODE"

    def create_from_stream(self, stream: MemoryStream) -> str:
        return stream.read_unicode()

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        bundle.write_unicode(str(value))

    def parse_default(self, text: str) -> str:
        return text

    def is_same_type(self, value: Any) -> bool:
        return isinstance(value, str)


class VectorType(DataType):
    """A vector of 2, 3 or 4 single-precision floats."""

    def __init__(self, dims: int) -> None:
        if dims not in (2, 3, 4):
            raise ValueError(f"unsupported vector size {dims}")
        self.dims = dims
        self.name = f"VECTOR{dims}"

    def create_from_stream(self, stream: MemoryStream) -> tuple[float, ...]:
        return tuple(stream.read_float() for _ in range(self.dims))

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        components = tuple(value)
        if len(components) != self.dims:
            raise ValueError(
                f"{self.name} needs {self.dims} components, got {len(components)}"
            )
        for component in components:
            bundle.write_float(float(component))

    def parse_default(self, text: str) -> tuple[float, ...]:
        return (0.0,) * self.dims

    def is_same_type(self, value: Any) -> bool:
        return (
            isinstance(value, (tuple, list))
            and len(value) == self.dims
            and all(
                isinstance(c, (int, float)) and not isinstance(c, bool) for c in value
            )
        )


class BlobType(DataType):
    """Length-prefixed raw bytes (also used for PYTHON and ENTITYCALL)."""

    def __init__(self, name: str = "BLOB") -> None:
        self.name = name

    def create_from_stream(self, stream: MemoryStream) -> bytes:
        return stream.read_blob()

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        bundle.write_blob(bytes(value))

    def parse_default(self, text: str) -> bytes:
        return b""

    def is_same_type(self, value: Any) -> bool:
        return isinstance(value, (bytes, bytearray))


class ArrayType(DataType):
    """A uint32 count followed by that many items of one type."""

    name = "KB_ARRAY"

    def __init__(
        self,
        item_type: Optional[DataType] = None,
        item_type_id: Optional[int] = None,
    ) -> None:
        self.item_type = item_type
        self.item_type_id = item_type_id

    def _item(self) -> DataType:
        if self.item_type is None:
            raise RuntimeError("array item type is not bound")
        return self.item_type

    def bind(self, registry: Mapping[int, DataType]) -> None:
        if self.item_type_id is None:
            if self.item_type is not None:
                self.item_type.bind(registry)
        elif self.item_type_id in registry:
            self.item_type = registry[self.item_type_id]

    def create_from_stream(self, stream: MemoryStream) -> list:
        item = self._item()
        count = stream.read_uint32()
        return [item.create_from_stream(stream) for _ in range(count)]

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        item = self._item()
        items = list(value)
        bundle.write_uint32(len(items))
        for element in items:
            item.add_to_stream(bundle, element)

    def parse_default(self, text: str) -> list:
        return []

    def is_same_type(self, value: Any) -> bool:
        if not isinstance(value, (list, tuple, bytes, bytearray)):
            return False
        item = self._item()
        return all(item.is_same_type(element) for element in value)


class FixedDictType(DataType):
    """A record of named fields written in declaration order."""

    name = "KB_FIXED_DICT"

    def __init__(
        self,
        fields: Optional[Mapping[str, DataType]] = None,
        field_ids: Optional[Mapping[str, int]] = None,
        implemented_by: str = "",
    ) -> None:
        self.fields: dict[str, DataType] = dict(fields or {})
        self.field_ids: dict[str, int] = dict(field_ids or {})
        self.implemented_by = implemented_by

    def bind(self, registry: Mapping[int, DataType]) -> None:
        if self.field_ids:
            for key, type_id in self.field_ids.items():
                if type_id in registry:
                    self.fields[key] = registry[type_id]
            self.field_ids.clear()
        else:
            for field_type in self.fields.values():
                field_type.bind(registry)

    def create_from_stream(self, stream: MemoryStream) -> dict:
        return {
            key: field_type.create_from_stream(stream)
            for key, field_type in self.fields.items()
        }

    def add_to_stream(self, bundle: Bundle, value: Any) -> None:
        for key, field_type in self.fields.items():
            if key not in value:
                raise KeyError(f"missing field {key!r}")
            field_type.add_to_stream(bundle, value[key])

    def parse_default(self, text: str) -> dict:
        return {key: field_type.parse_default("") for key, field_type in self.fields.items()}

    def is_same_type(self, value: Any) -> bool:
        if not isinstance(value, Mapping):
            return False
        return all(
            key in value and field_type.is_same_type(value[key])
            for key, field_type in self.fields.items()
        )


def builtin_types() -> dict[str, DataType]:
    """Fresh instances of every built-in type, keyed by type name."""
    types: dict[str, DataType] = {}
    for signed in (True, False):
        for bits in (8, 16, 32, 64):
            int_type = IntType(bits, signed)
            types[int_type.name] = int_type
    types["FLOAT"] = FloatType()
    types["DOUBLE"] = DoubleType()
    types["STRING"] = StringType()
    for dims in (2, 3, 4):
        types[f"VECTOR{dims}"] = VectorType(dims)
    types["PYTHON"] = BlobType("PYTHON")
    types["UNICODE"] = UnicodeType()
    types["ENTITYCALL"] = BlobType("ENTITYCALL")
    types["BLOB"] = BlobType("BLOB")
    return types