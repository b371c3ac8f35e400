"""Login credentials: user/password, stored JSON, or a zeroconf blob."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

__all__ = ["LoginBlob", "AUTHENTICATION_USER_PASS"]

log = logging.getLogger(__name__)

AUTHENTICATION_USER_PASS = 0

_IV_SIZE = 16
_CHECKSUM_SIZE = 20
_CHECKSUM_LABEL = b"checksum"
_ENCRYPTION_LABEL = b"encryption"
_LENGTH_SUFFIX = b"\x00\x00\x00\x14"
_HASH_NAME = "sha1"
_AUTH_DATA_FIELD = "authData"
_AUTH_TYPE_FIELD = "authType"
_USERNAME_FIELD = "username"


def _sha1(data: bytes) -> bytes:
    return hashlib.sha1(data).digest()


def _hmac_sha1(key: bytes, message: bytes) -> bytes:
    return hmac.new(key, message, hashlib.sha1).digest()


def _aes_ctr(key: bytes, iv: bytes, data: bytes) -> bytes:
    cipher = Cipher(algorithms.AES(key), modes.CTR(iv)).decryptor()
    return cipher.update(data) + cipher.finalize()


def _aes_ecb_decrypt(key: bytes, data: bytes) -> bytes:
    if len(data) % 16:
        raise ValueError("ECB data must be a multiple of 16 bytes")
    cipher = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
    return cipher.update(data) + cipher.finalize()


class _BlobReader:
    """Cursor over decoded login data."""

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self.data = data
        self.pos = pos

    def _byte(self, index: int) -> int:
        if index >= len(self.data):
            raise ValueError("login blob is truncated")
        return self.data[index]

    def read_int(self) -> int:
        lo = self._byte(self.pos)
        if not lo & 0x80:
            self.pos += 1
            return lo
        hi = self._byte(self.pos + 1)
        self.pos += 2
        return (lo & 0x7F) | (hi << 7)

    def skip(self, count: int) -> None:
        self.pos += count

    def take(self, count: int) -> bytes:
        end = self.pos + count
        if end > len(self.data):
            raise ValueError("login blob is truncated")
        return self.data[self.pos : end]


class LoginBlob:
    """Credentials used to authenticate a session."""

    def __init__(self) -> None:
        self.username = ""
        self.auth_data = b""
        self.auth_type = 0

    def __repr__(self) -> str:
        return f"LoginBlob(username={self.username!r}, auth_type={self.auth_type})"

    @staticmethod
    def _decode_blob(blob: bytes, shared_key: bytes) -> bytes:
        if len(blob) < _IV_SIZE + _CHECKSUM_SIZE:
            raise ValueError("zeroconf blob is too short")
        iv = blob[:_IV_SIZE]
        encrypted = blob[_IV_SIZE:-_CHECKSUM_SIZE]
        checksum = blob[-_CHECKSUM_SIZE:]

        base_key = _sha1(shared_key)[:16]
        checksum_key = _hmac_sha1(base_key, _CHECKSUM_LABEL)
        encryption_key = _hmac_sha1(base_key, _ENCRYPTION_LABEL)[:16]

        mac = _hmac_sha1(checksum_key, encrypted)
        if not hmac.compare_digest(mac, checksum):
            log.error("Mac doesn't match!")
        return _aes_ctr(encryption_key, iv, encrypted)

    @staticmethod
    def _decode_blob_secondary(blob: bytes, username: str, device_id: str) -> bytes:
        blob_data = base64.b64decode(blob)
        device_digest = _sha1(device_id.encode())
        derived = hashlib.pbkdf2_hmac(_HASH_NAME, device_digest, username.encode(), 256, 20)
        aes_key = _sha1(derived) + _LENGTH_SUFFIX
        plain = _aes_ecb_decrypt(aes_key, blob_data)
        return plain[:16] + bytes(a ^ b for a, b in zip(plain[16:], plain))

    def load_zeroconf(
        self, blob: bytes, shared_key: bytes, device_id: str, username: str
    ) -> None:
        """Load credentials from a blob sent by a zeroconf client."""
        part_decoded = self._decode_blob(bytes(blob), bytes(shared_key))
        login_data = self._decode_blob_secondary(part_decoded, username, device_id)

        reader = _BlobReader(login_data, pos=1)
        skip = reader.read_int()
        reader.skip(skip)
        reader.skip(1)
        auth_type = reader.read_int()
        reader.skip(1)
        auth_size = reader.read_int()

        self.auth_data = reader.take(auth_size)
        self.auth_type = auth_type
        self.username = username

    def load_user_pass(self, username: str, password: str) -> None:
        """Load plain username and password credentials."""
        self.username = username
        self.auth_data = password.encode()
        self.auth_type = AUTHENTICATION_USER_PASS

    def load_json(self, text: str) -> None:
        """Load credentials stored by :meth:`to_json`."""
        try:
            root = json.loads(text)
            auth_data = base64.b64decode(root[_AUTH_DATA_FIELD])
            username = root[_USERNAME_FIELD]
            auth_type = int(root[_AUTH_TYPE_FIELD])
        except (KeyError, TypeError) as exc:
            raise ValueError("invalid credentials JSON") from exc
        if not isinstance(username, str):
            raise ValueError("invalid credentials JSON: username must be a string")
        self.auth_data = auth_data
        self.username = username
        self.auth_type = auth_type

    def to_json(self) -> str:
        """Serialise the credentials to JSON."""
        return json.dumps(
            {
                _AUTH_DATA_FIELD: base64.b64encode(self.auth_data).decode(),
                _AUTH_TYPE_FIELD: self.auth_type,
                _USERNAME_FIELD: self.username,
            }
        )