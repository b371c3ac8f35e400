"""Small helpers for timestamps, byte-string big numbers and URL decoding."""

from __future__ import annotations

import time

__all__ = [
    "current_timestamp",
    "big_num_add",
    "big_num_multiply",
    "h2int",
    "url_decode",
    "bytes_to_hex",
]


def current_timestamp() -> int:
    """Return the current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


def _big_num_op(num: bytes, step) -> bytes:
    """Apply ``step(byte, carry) -> value`` from the least significant byte up.

    When the most significant byte overflows, a single carry byte is
    prepended and the result is returned immediately.
    """
    digits = bytearray(num)
    carry = 0
    for index in reversed(range(len(digits))):
        result = step(digits[index], carry)
        if result < 256:
            carry = 0
            digits[index] = result
        else:
            carry = result // 256
            digits[index] = result % 256
            if index == 0:
                digits.insert(0, carry & 0xFF)
                break
    return bytes(digits)


def big_num_add(num: bytes, n: int) -> bytes:
    """Add ``n`` to the big-endian number held in ``num``."""
    first = True

    def step(digit: int, carry: int) -> int:
        nonlocal first
        if first:
            first = False
            return digit + n
        return digit + carry

    return _big_num_op(num, step)


def big_num_multiply(num: bytes, n: int) -> bytes:
    """Multiply the big-endian number held in ``num`` by ``n``."""
    return _big_num_op(num, lambda digit, carry: digit * n + carry)


def h2int(c: str) -> int:
    """Return the value of a hexadecimal digit, or 0 for any other character."""
    if "0" <= c <= "9":
        return ord(c) - ord("0")
    if "a" <= c <= "f":
        return ord(c) - ord("a") + 10
    if "A" <= c <= "F":
        return ord(c) - ord("A") + 10
    return 0


def url_decode(text: str) -> str:
    """Decode a form-urlencoded string: ``+`` becomes a space, ``%XY`` a byte."""
    out = bytearray()
    chars = iter(text)
    for c in chars:
        if c == "+":
            out += b" "
        elif c == "%":
            high = next(chars, "\0")
            low = next(chars, "\0")
            out.append((h2int(high) << 4) | h2int(low))
        else:
            out += c.encode("utf-8")
    return out.decode("utf-8", errors="surrogateescape")


def bytes_to_hex(data: bytes) -> str:
    """Return the lower-case hexadecimal representation of ``data``."""
    return bytes(data).hex()