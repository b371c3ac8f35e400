"""References to tracks and episodes in a playback queue."""

from __future__ import annotations

from typing import Optional

from .utils import big_num_add, big_num_multiply, bytes_to_hex

__all__ = ["TrackReference", "base62_decode"]

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def base62_decode(text: str) -> bytes:
    """Decode a base62 identifier into a big-endian byte string."""
    number = b"\x00"
    for char in text:
        digit = _ALPHABET.find(char)
        if digit < 0:
            raise ValueError(f"invalid base62 character {char!r}")
        number = big_num_multiply(number, 62)
        number = big_num_add(number, digit)
    return number


class TrackReference:
    """A track given by its gid, or an episode given by its URI."""

    def __init__(self, gid: Optional[bytes] = None, uri: Optional[str] = None) -> None:
        self.uri = uri
        self.is_episode = False
        if gid is not None:
            self.gid = bytes(gid)
        elif uri is not None:
            self.gid = base62_decode(uri.rpartition(":")[2])
            self.is_episode = True
        else:
            self.gid = b""

    def __repr__(self) -> str:
        return f"TrackReference(gid={self.gid!r}, uri={self.uri!r}, is_episode={self.is_episode})"

    def mercury_request_uri(self) -> str:
        """Return the metadata URI used to query this item."""
        kind = "episode" if self.is_episode else "track"
        return f"hm://metadata/3/{kind}/{bytes_to_hex(self.gid)}"