"""Clock synchronised with the server through ping packets."""

from __future__ import annotations

import struct
from typing import Callable

from .utils import current_timestamp

__all__ = ["TimeProvider"]


class TimeProvider:
    """Keeps the offset between the local clock and the server's clock."""

    def __init__(self, clock: Callable[[], int] = current_timestamp) -> None:
        self._clock = clock
        self.timestamp_diff = 0

    def sync_with_ping_packet(self, pong_packet: bytes) -> None:
        """Sync with a ping packet whose first four bytes are server seconds."""
        if len(pong_packet) < 4:
            raise ValueError("ping packet must hold at least 4 bytes")
        (remote_seconds,) = struct.unpack_from(">I", pong_packet, 0)
        self.timestamp_diff = remote_seconds * 1000 - self._clock()

    def synced_timestamp(self) -> int:
        """Return the current time in milliseconds on the server's clock."""
        return self._clock() + self.timestamp_diff