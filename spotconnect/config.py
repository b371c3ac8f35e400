"""Persistent device configuration stored as JSON."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

__all__ = [
    "AudioFormat",
    "FileStore",
    "LocalFile",
    "Config",
    "MAX_VOLUME",
    "DEFAULT_VOLUME",
    "DEFAULT_DEVICE_NAME",
    "INFORMATION_STRING",
    "BRAND_NAME",
    "VERSION_STRING",
    "PROTOCOL_VERSION",
    "SW_VERSION",
]

log = logging.getLogger(__name__)

MAX_VOLUME = 65536
DEFAULT_VOLUME = 32767

INFORMATION_STRING = "cspot"
BRAND_NAME = "corn"
VERSION_STRING = "cspot-1.0"
PROTOCOL_VERSION = "2.7.1"
DEFAULT_DEVICE_NAME = "CSpot"
SW_VERSION = "1.0.0"


class AudioFormat(enum.IntEnum):
    OGG_VORBIS_96 = 0
    OGG_VORBIS_160 = 1
    OGG_VORBIS_320 = 2


_BITRATE_TO_FORMAT = {
    320: AudioFormat.OGG_VORBIS_320,
    160: AudioFormat.OGG_VORBIS_160,
    96: AudioFormat.OGG_VORBIS_96,
}
_FORMAT_TO_BITRATE = {fmt: rate for rate, fmt in _BITRATE_TO_FORMAT.items()}


class FileStore(Protocol):
    def read_file(self, filename: str) -> str: ...

    def write_file(self, filename: str, content: str) -> None: ...


class LocalFile:
    """Reads and writes text files on the local filesystem."""

    def read_file(self, filename: str) -> str:
        """Return the file's contents, or an empty string if it does not exist."""
        try:
            return Path(filename).read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def write_file(self, filename: str, content: str) -> None:
        """Write ``content`` to ``filename``, replacing it."""
        Path(filename).write_text(content, encoding="utf-8")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Config:
    """Volume, device name and audio format, loaded from and saved to JSON."""

    filename: str
    file: FileStore = field(default_factory=LocalFile)
    volume: int = DEFAULT_VOLUME
    device_name: str = DEFAULT_DEVICE_NAME
    format: AudioFormat = AudioFormat.OGG_VORBIS_160

    def load(self) -> None:
        """Load settings; an empty or missing file resets them to defaults."""
        if not self.filename:
            raise ValueError("config file name is empty")
        text = self.file.read_file(self.filename)
        if not text:
            self.volume = DEFAULT_VOLUME
            self.device_name = DEFAULT_DEVICE_NAME
            self.format = AudioFormat.OGG_VORBIS_160
            return
        try:
            root = json.loads(text)
        except json.JSONDecodeError:
            log.warning("Config file %s is not valid JSON, ignoring it", self.filename)
            return
        if not isinstance(root, dict):
            return
        if isinstance(root.get("deviceName"), str):
            self.device_name = root["deviceName"]
        if "bitrate" in root:
            bitrate = root["bitrate"]
            key = int(bitrate) if _is_number(bitrate) else None
            self.format = _BITRATE_TO_FORMAT.get(key, AudioFormat.OGG_VORBIS_320)
        if _is_number(root.get("volume")):
            self.volume = int(root["volume"])

    def save(self) -> None:
        """Write the current settings to the config file."""
        document = {
            "volume": self.volume,
            "deviceName": self.device_name,
            "bitrate": _FORMAT_TO_BITRATE.get(self.format, 160),
        }
        self.file.write_file(self.filename, json.dumps(document))