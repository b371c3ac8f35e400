"""A single encrypted piece of an audio file and its decryption."""

from __future__ import annotations

import threading
from typing import Optional

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .utils import big_num_add

__all__ = ["AudioChunk", "AUDIO_AES_IV"]

AUDIO_AES_IV = bytes(
    [
        0x72, 0xE0, 0x67, 0xFB, 0xDD, 0xCB, 0xCF, 0x77,
        0xEB, 0xE8, 0xBC, 0x64, 0x3F, 0x63, 0x0D, 0x93,
    ]
)

_AES_BLOCK = 16


class AudioChunk:
    """Holds the data of one requested range of an audio file.

    Positions are byte offsets in the file. ``header_file_size`` stays
    ``None`` until the header packet announcing the file size arrives.
    """

    def __init__(
        self,
        seq_id: int,
        audio_key: bytes,
        start_position: int,
        predicted_end_position: int,
    ) -> None:
        self.seq_id = seq_id
        self.audio_key = bytes(audio_key)
        self.start_position = start_position
        self.end_position = predicted_end_position
        self.decrypted_data = bytearray()
        self.keep_in_memory = False
        self.header_file_size: Optional[int] = None
        self.is_loaded = False
        self.is_failed = False
        self.loaded_event = threading.Event()
        self.header_loaded_event = threading.Event()
        self.data_lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"AudioChunk(seq_id={self.seq_id}, start={self.start_position}, "
            f"end={self.end_position}, loaded={self.is_loaded}, failed={self.is_failed})"
        )

    def append_data(self, data: bytes) -> None:
        """Append received encrypted data."""
        self.decrypted_data += bytes(data)

    @staticmethod
    def _iv_for_block(block: int) -> bytes:
        # Counter arithmetic wraps at 128 bits.
        return big_num_add(AUDIO_AES_IV, block)[-_AES_BLOCK:]

    def decrypt(self) -> None:
        """Decrypt the collected data in place with AES-CTR."""
        iv = self._iv_for_block(self.start_position // _AES_BLOCK)
        cipher = Cipher(algorithms.AES(self.audio_key), modes.CTR(iv)).decryptor()
        plain = cipher.update(bytes(self.decrypted_data)) + cipher.finalize()
        self.decrypted_data = bytearray(plain)
        self.start_position = self.end_position - len(self.decrypted_data)
        self.is_loaded = True