"""The Shannon stream cipher with message authentication."""

from __future__ import annotations

__all__ = ["Shannon"]

_MASK = 0xFFFFFFFF
_N = 16
_FOLD = _N
_INITKONST = 0x6996C53A
_KEYP = 13


def _rotl(w: int, c: int) -> int:
    return ((w << c) | (w >> (32 - c))) & _MASK


def _sbox1(w: int) -> int:
    w ^= _rotl(w, 5) | _rotl(w, 7)
    w ^= _rotl(w, 19) | _rotl(w, 22)
    return w


def _sbox2(w: int) -> int:
    w ^= _rotl(w, 7) | _rotl(w, 22)
    w ^= _rotl(w, 5) | _rotl(w, 19)
    return w


def _word(buf, i: int) -> int:
    return int.from_bytes(buf[i : i + 4], "little")


class Shannon:
    """Shannon cipher state. Call :meth:`key` and :meth:`nonce` before use.

    The buffer operations take bytes-like input and return new bytes.
    """

    def __init__(self) -> None:
        self._r = [0] * _N
        self._crc = [0] * _N
        self._init_r = [0] * _N
        self._konst = 0
        self._sbuf = 0
        self._mbuf = 0
        self._nbuf = 0

    # -- internal state machinery -------------------------------------

    def _cycle(self) -> None:
        r = self._r
        t = r[12] ^ r[13] ^ self._konst
        t = _sbox1(t) ^ _rotl(r[0], 1)
        del r[0]
        r.append(t)
        t = _sbox2(r[2] ^ r[15])
        r[0] ^= t
        self._sbuf = t ^ r[8] ^ r[12]

    def _crcfunc(self, i: int) -> None:
        crc = self._crc
        t = crc[0] ^ crc[2] ^ crc[15] ^ i
        del crc[0]
        crc.append(t)

    def _macfunc(self, i: int) -> None:
        self._crcfunc(i)
        self._r[_KEYP] ^= i

    def _init_state(self) -> None:
        r = [1, 1]
        while len(r) < _N:
            r.append((r[-1] + r[-2]) & _MASK)
        self._r = r
        self._konst = _INITKONST

    def _diffuse(self) -> None:
        for _ in range(_FOLD):
            self._cycle()

    def _add_key(self, k: int) -> None:
        self._r[_KEYP] ^= k & _MASK

    def _load_key(self, key: bytes) -> None:
        key = bytes(key)
        whole = len(key) & ~3
        for i in range(0, whole, 4):
            self._add_key(_word(key, i))
            self._cycle()
        if whole < len(key):
            extra = key[whole:].ljust(4, b"\x00")
            self._add_key(_word(extra, 0))
            self._cycle()
        self._add_key(len(key))
        self._cycle()
        self._crc = list(self._r)
        self._diffuse()
        self._r = [r ^ c for r, c in zip(self._r, self._crc)]

    # -- public interface ---------------------------------------------

    def key(self, key: bytes) -> None:
        """Set the key."""
        self._init_state()
        self._load_key(key)
        self._konst = self._r[0]
        self._init_r = list(self._r)
        self._nbuf = 0

    def nonce(self, nonce: bytes) -> None:
        """Set the nonce, restarting from the keyed state."""
        self._r = list(self._init_r)
        self._konst = _INITKONST
        self._load_key(nonce)
        self._konst = self._r[0]
        self._nbuf = 0

    def stream(self, buf: bytes) -> bytes:
        """XOR ``buf`` with keystream, without touching the MAC."""
        out = bytearray(buf)
        i, n = 0, len(out)
        while self._nbuf != 0 and i < n:
            out[i] ^= self._sbuf & 0xFF
            self._sbuf >>= 8
            self._nbuf -= 8
            i += 1
        end = i + ((n - i) & ~3)
        while i < end:
            self._cycle()
            out[i : i + 4] = (_word(out, i) ^ self._sbuf).to_bytes(4, "little")
            i += 4
        if i < n:
            self._cycle()
            self._nbuf = 32
            while self._nbuf != 0 and i < n:
                out[i] ^= self._sbuf & 0xFF
                self._sbuf >>= 8
                self._nbuf -= 8
                i += 1
        return bytes(out)

    def _partial_mac(self, byte: int) -> None:
        self._mbuf = (self._mbuf ^ (byte << (32 - self._nbuf))) & _MASK

    def _keystream_byte(self) -> int:
        return (self._sbuf >> (32 - self._nbuf)) & 0xFF

    def maconly(self, buf: bytes) -> None:
        """Accumulate ``buf`` into the MAC without encrypting it."""
        data = bytes(buf)
        i, n = 0, len(data)
        if self._nbuf != 0:
            while self._nbuf != 0 and i < n:
                self._partial_mac(data[i])
                self._nbuf -= 8
                i += 1
            if self._nbuf != 0:
                return
            self._macfunc(self._mbuf)
        end = i + ((n - i) & ~3)
        while i < end:
            self._cycle()
            self._macfunc(_word(data, i))
            i += 4
        if i < n:
            self._cycle()
            self._mbuf = 0
            self._nbuf = 32
            while self._nbuf != 0 and i < n:
                self._partial_mac(data[i])
                self._nbuf -= 8
                i += 1

    def encrypt(self, buf: bytes) -> bytes:
        """Encrypt ``buf`` and accumulate its plaintext into the MAC."""
        out = bytearray(buf)
        i, n = 0, len(out)
        if self._nbuf != 0:
            while self._nbuf != 0 and i < n:
                self._partial_mac(out[i])
                out[i] ^= self._keystream_byte()
                self._nbuf -= 8
                i += 1
            if self._nbuf != 0:
                return bytes(out)
            self._macfunc(self._mbuf)
        end = i + ((n - i) & ~3)
        while i < end:
            self._cycle()
            t = _word(out, i)
            self._macfunc(t)
            out[i : i + 4] = (t ^ self._sbuf).to_bytes(4, "little")
            i += 4
        if i < n:
            self._cycle()
            self._mbuf = 0
            self._nbuf = 32
            while self._nbuf != 0 and i < n:
                self._partial_mac(out[i])
                out[i] ^= self._keystream_byte()
                self._nbuf -= 8
                i += 1
        return bytes(out)

    def decrypt(self, buf: bytes) -> bytes:
        """Decrypt ``buf`` and accumulate the recovered plaintext into the MAC."""
        out = bytearray(buf)
        i, n = 0, len(out)
        if self._nbuf != 0:
            while self._nbuf != 0 and i < n:
                out[i] ^= self._keystream_byte()
                self._partial_mac(out[i])
                self._nbuf -= 8
                i += 1
            if self._nbuf != 0:
                return bytes(out)
            self._macfunc(self._mbuf)
        end = i + ((n - i) & ~3)
        while i < end:
            self._cycle()
            t = _word(out, i) ^ self._sbuf
            self._macfunc(t)
            out[i : i + 4] = t.to_bytes(4, "little")
            i += 4
        if i < n:
            self._cycle()
            self._mbuf = 0
            self._nbuf = 32
            while self._nbuf != 0 and i < n:
                out[i] ^= self._keystream_byte()
                self._partial_mac(out[i])
                self._nbuf -= 8
                i += 1
        return bytes(out)

    def finish(self, size: int) -> bytes:
        """Finalise the MAC and return its first ``size`` bytes."""
        if size < 0:
            raise ValueError("MAC size must not be negative")
        if self._nbuf != 0:
            self._macfunc(self._mbuf)
        self._cycle()
        self._add_key(_INITKONST ^ (self._nbuf << 3))
        self._nbuf = 0
        self._r = [r ^ c for r, c in zip(self._r, self._crc)]
        self._diffuse()
        out = bytearray()
        remaining = size
        while remaining > 0:
            self._cycle()
            word = self._sbuf.to_bytes(4, "little")
            out += word[: min(4, remaining)]
            remaining -= 4
        return bytes(out)