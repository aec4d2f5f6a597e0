"""Batches outgoing messages into size-limited packets."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Protocol, Sequence

from .stream import PACKET_MAX_SIZE, MemoryStream

VARIABLE_LENGTH = -1


@dataclass(frozen=True)
class Message:
    """A message description: its id, name and fixed length (-1 if variable)."""

    id: int
    name: str
    msglen: int = VARIABLE_LENGTH


class NetworkInterface(Protocol):
    def valid(self) -> bool: ...

    def send(self, data: bytes) -> None: ...


class Bundle:
    """Writes one or more messages; large messages span several packets."""

    def __init__(self, packet_size: int = PACKET_MAX_SIZE) -> None:
        if packet_size < 4:
            raise ValueError("packet size must hold a message header")
        self._packet_size = packet_size
        self._current = self._new_packet()
        self._streams: list[MemoryStream] = []
        self.num_message = 0
        self.message_length = 0
        self.msgtype: Message | None = None
        self._cur_msg_stream_index = 0

    def _new_packet(self) -> MemoryStream:
        return MemoryStream(capacity=self._packet_size)

    def new_message(self, message: Message) -> None:
        """Start a new message; the previous one is finished first."""
        self.fini(False)
        self.msgtype = message
        self.num_message += 1
        self.write_uint16(message.id)
        if message.msglen == VARIABLE_LENGTH:
            self.write_uint16(0)
            self.message_length = 0
        self._cur_msg_stream_index = 0

    def fini(self, issend: bool) -> None:
        """Close the current message and move its packet to the finished list."""
        if self.num_message > 0:
            self.write_msg_length()
            self._streams.append(self._current)
            self._current = self._new_packet()
        if issend:
            self.num_message = 0
            self.msgtype = None
        self._cur_msg_stream_index = 0

    def write_msg_length(self) -> None:
        """Patch the length field of a variable-length message."""
        if self.msgtype is None or self.msgtype.msglen != VARIABLE_LENGTH:
            return
        packet = self._current
        if self._cur_msg_stream_index > 0:
            packet = self._streams[len(self._streams) - self._cur_msg_stream_index]
        packet._overwrite(2, struct.pack("<H", self.message_length & 0xFFFF))

    def check_stream(self, size: int) -> None:
        """Start a new packet if `size` more bytes do not fit in the current one."""
        if size > self._current.space():
            self._streams.append(self._current)
            self._current = self._new_packet()
            self._cur_msg_stream_index += 1
        self.message_length += size

    def send(self, network: NetworkInterface) -> None:
        """Send every packet and reset the bundle for reuse."""
        self.fini(True)
        try:
            if not network.valid():
                raise ConnectionError("network interface invalid")
            for stream in self._streams:
                network.send(stream.getvalue())
        finally:
            self.clear()

    def clear(self) -> None:
        self._streams = []
        self._current.clear()
        self.num_message = 0
        self.message_length = 0
        self.msgtype = None
        self._cur_msg_stream_index = 0

    def packets(self) -> list[bytes]:
        """Finished packets, followed by the current one if it holds data."""
        result = [stream.getvalue() for stream in self._streams]
        if len(self._current):
            result.append(self._current.getvalue())
        return result

    # value writers

    def write_int8(self, v: int) -> None:
        self.check_stream(1)
        self._current.write_int8(v)

    def write_int16(self, v: int) -> None:
        self.check_stream(2)
        self._current.write_int16(v)

    def write_int32(self, v: int) -> None:
        self.check_stream(4)
        self._current.write_int32(v)

    def write_int64(self, v: int) -> None:
        self.check_stream(8)
        self._current.write_int64(v)

    def write_uint8(self, v: int) -> None:
        self.check_stream(1)
        self._current.write_uint8(v)

    def write_uint16(self, v: int) -> None:
        self.check_stream(2)
        self._current.write_uint16(v)

    def write_uint32(self, v: int) -> None:
        self.check_stream(4)
        self._current.write_uint32(v)

    def write_uint64(self, v: int) -> None:
        self.check_stream(8)
        self._current.write_uint64(v)

    def write_float(self, v: float) -> None:
        self.check_stream(4)
        self._current.write_float(v)

    def write_double(self, v: float) -> None:
        self.check_stream(8)
        self._current.write_double(v)

    def write_bool(self, v: bool) -> None:
        self.check_stream(1)
        self._current.write_uint8(1 if v else 0)

    def write_string(self, v: str) -> None:
        self.check_stream(len(v.encode("utf-8")) + 1)
        self._current.write_string(v)

    def write_unicode(self, v: str) -> None:
        self.check_stream(len(v.encode("utf-8")) + 4)
        self._current.write_unicode(v)

    def write_blob(self, v: bytes) -> None:
        self.check_stream(len(v) + 4)
        self._current.write_blob(v)

    def write_python(self, v: bytes) -> None:
        self.write_blob(v)

    def write_entitycall(self, v: bytes) -> None:
        """Write an empty entity call reference; the argument is not encoded."""
        self.write_uint64(0)
        self.write_int32(0)
        self.write_uint16(0)
        self.write_uint16(0)

    def write_vector2(self, v: Sequence[float]) -> None:
        self.check_stream(8)
        self._current.write_vector2(v)

    def write_vector3(self, v: Sequence[float]) -> None:
        self.check_stream(12)
        self._current.write_vector3(v)

    def write_vector4(self, v: Sequence[float]) -> None:
        self.check_stream(16)
        self._current.write_vector4(v)