"""Parsing of mercury response packets."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List

__all__ = ["MercuryResponse", "parse_mercury_response"]


@dataclass
class MercuryResponse:
    """A decoded mercury response.

    ``header`` holds the raw encoded header message.
    """

    sequence_id: int
    flags: int
    header: bytes
    parts: List[bytes] = field(default_factory=list)


def _take(data: bytes, pos: int, size: int) -> bytes:
    if pos + size > len(data):
        raise ValueError("mercury response is truncated")
    return data[pos : pos + size]


def parse_mercury_response(data: bytes) -> MercuryResponse:
    """Parse ``[seq size][seq id][flags][part count][header][parts...]``."""
    data = bytes(data)
    (seq_len,) = struct.unpack(">H", _take(data, 0, 2))
    pos = 2
    sequence_id = int.from_bytes(_take(data, pos, seq_len), "big")
    pos += seq_len
    flags = _take(data, pos, 1)[0]
    pos += 1
    _take(data, pos, 2)  # part count; parts are read until the data ends
    pos += 2
    (header_size,) = struct.unpack(">H", _take(data, pos, 2))
    pos += 2
    header = _take(data, pos, header_size)
    pos += header_size

    parts = []
    while pos < len(data):
        (part_size,) = struct.unpack(">H", _take(data, pos, 2))
        pos += 2
        parts.append(_take(data, pos, part_size))
        pos += part_size
    return MercuryResponse(sequence_id, flags, header, parts)