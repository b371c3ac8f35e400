"""Plain TCP connection to an access point, with length-prefixed packets."""

from __future__ import annotations

import logging
import socket
import struct
from typing import Callable, Optional

__all__ = ["ConnectionLostError", "PlainConnection"]

log = logging.getLogger(__name__)

_IO_TIMEOUT = 3.0
_WRITE_CHUNK = 64

TimeoutHandler = Callable[[], bool]


class ConnectionLostError(ConnectionError):
    """Raised when the connection is gone and must be re-established."""


class PlainConnection:
    """Unencrypted socket to an access point.

    ``timeout_handler`` is consulted whenever a read or write times out; if it
    returns true (or is not set) the connection is considered lost.
    """

    def __init__(
        self,
        sock: Optional[socket.socket] = None,
        timeout_handler: Optional[TimeoutHandler] = None,
    ) -> None:
        self.sock = sock
        self.timeout_handler = timeout_handler

    def __enter__(self) -> "PlainConnection":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def connect(self, ap_address: str) -> None:
        """Connect to an address of the form ``host:port``."""
        host, sep, port = ap_address.partition(":")
        if not sep or not host or not port:
            raise ValueError(f"address must be host:port, got {ap_address!r}")
        try:
            infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
        except socket.gaierror as exc:
            log.error("getaddrinfo failed for %s", ap_address)
            raise ConnectionError(f"cannot resolve {host}") from exc
        for family, socktype, proto, _, address in infos:
            if family not in (socket.AF_INET, socket.AF_INET6):
                continue
            sock = socket.socket(family, socktype, proto)
            try:
                sock.connect(address)
            except OSError as exc:
                sock.close()
                raise ConnectionError("cannot connect to access point") from exc
            sock.settimeout(_IO_TIMEOUT)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            self.sock = sock
            log.debug("Connected to access point %s", ap_address)
            return
        raise ConnectionError(f"no usable address for {ap_address}")

    def close(self) -> None:
        """Shut down and close the socket, if open."""
        sock, self.sock = self.sock, None
        if sock is None:
            return
        log.info("Closing socket...")
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()

    def _socket(self) -> socket.socket:
        if self.sock is None:
            raise ConnectionLostError("not connected")
        return self.sock

    def _handle_timeout(self) -> None:
        handler = self.timeout_handler
        if handler is None or handler():
            log.error("Connection lost, will need to reconnect...")
            raise ConnectionLostError("reconnection required")

    def send_prefix_packet(self, prefix: bytes, data: bytes) -> bytes:
        """Send ``prefix + size + data`` and return the bytes that were sent.

        ``size`` is a big-endian 32-bit count of the whole packet.
        """
        size = len(prefix) + len(data) + 4
        raw = bytes(prefix) + struct.pack(">I", size) + bytes(data)
        self.write_block(raw)
        return raw

    def recv_packet(self) -> bytes:
        """Read one size-prefixed packet, returning it with its size field."""
        size_field = self.read_block(4)
        (size,) = struct.unpack(">I", size_field)
        if size < 4:
            raise ValueError(f"invalid packet size {size}")
        return size_field + self.read_block(size - 4)

    def read_block(self, size: int) -> bytes:
        """Read exactly ``size`` bytes."""
        sock = self._socket()
        buf = bytearray()
        while len(buf) < size:
            try:
                chunk = sock.recv(size - len(buf))
            except (socket.timeout, BlockingIOError):
                self._handle_timeout()
                continue
            except OSError as exc:
                raise ConnectionLostError("read failed") from exc
            if not chunk:
                raise ConnectionLostError("connection closed by peer")
            buf += chunk
        return bytes(buf)

    def write_block(self, data: bytes) -> int:
        """Write all of ``data`` in small pieces and return its length."""
        sock = self._socket()
        view = memoryview(bytes(data))
        sent = 0
        while sent < len(view):
            try:
                n = sock.send(view[sent : sent + _WRITE_CHUNK])
            except (socket.timeout, BlockingIOError):
                self._handle_timeout()
                continue
            except OSError as exc:
                raise ConnectionLostError("write failed") from exc
            if n <= 0:
                raise ConnectionLostError("write failed")
            sent += n
        return len(view)