"""Shannon-encrypted packet channel on top of a plain connection."""

from __future__ import annotations

import logging
import struct
import threading
from dataclasses import dataclass
from typing import Optional, Protocol

from .shannon import Shannon

__all__ = ["Packet", "ShannonConnection"]

log = logging.getLogger(__name__)

MAC_SIZE = 4


class _BlockIO(Protocol):
    def read_block(self, size: int) -> bytes: ...

    def write_block(self, data: bytes) -> int: ...


@dataclass(frozen=True)
class Packet:
    """A command byte with its payload."""

    command: int
    data: bytes


def _nonce_bytes(value: int) -> bytes:
    return struct.pack(">I", value & 0xFFFFFFFF)


class ShannonConnection:
    """Sends and receives packets encrypted and authenticated with Shannon."""

    def __init__(self) -> None:
        self.conn: Optional[_BlockIO] = None
        self._send_cipher: Optional[Shannon] = None
        self._recv_cipher: Optional[Shannon] = None
        self._send_nonce = 0
        self._recv_nonce = 0
        self._write_lock = threading.Lock()
        self._read_lock = threading.Lock()

    def wrap_connection(self, conn: _BlockIO, send_key: bytes, recv_key: bytes) -> None:
        """Start encrypting traffic on ``conn`` with the given keys."""
        self.conn = conn
        self._send_cipher = Shannon()
        self._recv_cipher = Shannon()
        self._send_cipher.key(send_key)
        self._recv_cipher.key(recv_key)
        self._send_nonce = 0
        self._recv_nonce = 0
        self._send_cipher.nonce(_nonce_bytes(0))
        self._recv_cipher.nonce(_nonce_bytes(0))

    def _require_wrapped(self):
        if self.conn is None or self._send_cipher is None or self._recv_cipher is None:
            raise RuntimeError("connection is not wrapped")
        return self.conn, self._send_cipher, self._recv_cipher

    def send_packet(self, cmd: int, data: bytes) -> None:
        """Encrypt and send ``[cmd][size][data]`` followed by its MAC."""
        data = bytes(data)
        if len(data) > 0xFFFF:
            raise ValueError("packet payload exceeds 65535 bytes")
        with self._write_lock:
            conn, cipher, _ = self._require_wrapped()
            raw = bytes([cmd & 0xFF]) + struct.pack(">H", len(data)) + data
            conn.write_block(cipher.encrypt(raw))
            mac = cipher.finish(MAC_SIZE)
            self._send_nonce += 1
            cipher.nonce(_nonce_bytes(self._send_nonce))
            conn.write_block(mac)

    def recv_packet(self) -> Packet:
        """Receive and decrypt one packet."""
        with self._read_lock:
            conn, _, cipher = self._require_wrapped()
            header = cipher.decrypt(conn.read_block(3))
            (size,) = struct.unpack(">H", header[1:3])
            body = cipher.decrypt(conn.read_block(size)) if size > 0 else b""
            mac = conn.read_block(MAC_SIZE)
            expected = cipher.finish(MAC_SIZE)
            if mac != expected:
                log.error("Shannon read: MAC doesn't match")
            self._recv_nonce += 1
            cipher.nonce(_nonce_bytes(self._recv_nonce))
            return Packet(header[0], body)