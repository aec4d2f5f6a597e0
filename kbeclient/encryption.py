"""Blowfish packet encryption with plaintext-block chaining and framing."""

from __future__ import annotations

import logging
import os
import struct
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional, Union

from Crypto.Cipher import Blowfish

log = logging.getLogger(__name__)

_HEADER = struct.Struct("<HB")
_ZERO_BLOCK = bytes(8)

Sender = Callable[[bytes], bool]
Reader = Optional[Callable[[bytes], None]]


class EncryptionFilter(ABC):
    """A filter that encrypts outgoing and decrypts incoming packets."""

    @abstractmethod
    def encrypt_blocks(self, data: bytes) -> bytes: ...

    @abstractmethod
    def decrypt_blocks(self, data: bytes) -> bytes: ...

    @abstractmethod
    def encrypt(self, payload: bytes) -> bytes: ...

    @abstractmethod
    def send(self, sender: Sender, payload: bytes) -> bool: ...

    @abstractmethod
    def recv(self, reader: Reader, packet: bytes) -> bool: ...


def _blocks(data: bytes, size: int) -> Iterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start:start + size]


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


class BlowfishFilter(EncryptionFilter):
    """Blowfish filter; packets are framed as uint16 length, uint8 pad, data."""

    BLOCK_SIZE = 8
    MIN_PACKET_SIZE = 2 + 1 + BLOCK_SIZE
    MIN_KEY_SIZE = 4
    MAX_KEY_SIZE = 56
    DEFAULT_KEY_SIZE = 16

    def __init__(self, key: Union[bytes, str, int, None] = None) -> None:
        if key is None:
            key = os.urandom(self.DEFAULT_KEY_SIZE)
        elif isinstance(key, int):
            key = os.urandom(key)
        elif isinstance(key, str):
            key = key.encode("utf-8")
        self._key = bytes(key)
        self._buffer = bytearray()
        self._pending: Optional[int] = None
        self._pad = 0
        if self.MIN_KEY_SIZE <= len(self._key) <= self.MAX_KEY_SIZE:
            self._cipher = Blowfish.new(self._key, Blowfish.MODE_ECB)
        else:
            log.error("BlowfishFilter: invalid key length %d", len(self._key))
            self._cipher = None

    def key(self) -> bytes:
        return self._key

    def is_good(self) -> bool:
        return self._cipher is not None

    def _checked_cipher(self, data: bytes):
        if self._cipher is None:
            raise RuntimeError("Blowfish filter has an invalid key")
        if len(data) % self.BLOCK_SIZE:
            raise ValueError(
                f"input length ({len(data)}) is not a multiple of block size"
            )
        return self._cipher

    def encrypt_blocks(self, data: bytes) -> bytes:
        """Encrypt whole blocks, XOR-ing each with the previous plaintext block."""
        cipher = self._checked_cipher(data)
        out = bytearray()
        prev = _ZERO_BLOCK
        for block in _blocks(bytes(data), self.BLOCK_SIZE):
            mixed = _xor(block, prev) if prev != _ZERO_BLOCK else block
            prev = block
            out += cipher.encrypt(mixed)
        return bytes(out)

    def decrypt_blocks(self, data: bytes) -> bytes:
        cipher = self._checked_cipher(data)
        out = bytearray()
        prev = _ZERO_BLOCK
        for block in _blocks(bytes(data), self.BLOCK_SIZE):
            plain = cipher.decrypt(block)
            if prev != _ZERO_BLOCK:
                plain = _xor(plain, prev)
            prev = plain
            out += plain
        return bytes(out)

    def encrypt(self, payload: bytes) -> bytes:
        """Pad, encrypt and frame a payload."""
        pad = -len(payload) % self.BLOCK_SIZE
        encrypted = self.encrypt_blocks(bytes(payload) + bytes(pad))
        try:
            header = _HEADER.pack(len(encrypted) + 1, pad)
        except struct.error as exc:
            raise ValueError("payload too large for one packet") from exc
        return header + encrypted

    def send(self, sender: Sender, payload: bytes) -> bool:
        if not self.is_good():
            log.error("BlowfishFilter.send: dropping packet due to invalid filter")
            return False
        return bool(sender(self.encrypt(payload)))

    def _deliver(self, reader: Reader, body: bytes, pad: int) -> None:
        plain = self.decrypt_blocks(body)
        if pad:
            plain = plain[: max(0, len(plain) - pad)]
        if reader is not None:
            reader(plain)

    def recv(self, reader: Reader, packet: bytes) -> bool:
        """Feed received bytes; returns False while a packet is incomplete."""
        if not self.is_good():
            log.error("BlowfishFilter.recv: dropping packet due to invalid filter")
            return False

        packet = bytes(packet)
        if not self._buffer and len(packet) > self.MIN_PACKET_SIZE:
            declared, pad = _HEADER.unpack_from(packet)
            if declared - 1 == len(packet) - 3:
                self._deliver(reader, packet[3:], pad)
                return True

        self._buffer += packet
        while self._buffer:
            if self._pending is None:
                if len(self._buffer) < self.MIN_PACKET_SIZE:
                    return False
                declared, self._pad = _HEADER.unpack_from(self._buffer)
                del self._buffer[:3]
                self._pending = max(declared - 1, 0)
            if len(self._buffer) < self._pending:
                return False
            body = bytes(self._buffer[: self._pending])
            del self._buffer[: self._pending]
            pad = self._pad
            self._pending = None
            self._pad = 0
            self._deliver(reader, body, pad)
        return True