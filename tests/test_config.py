import json

import pytest

from spotconnect.config import (
    DEFAULT_DEVICE_NAME,
    DEFAULT_VOLUME,
    AudioFormat,
    Config,
    LocalFile,
)


def test_local_file_missing_reads_empty(tmp_path):
    assert LocalFile().read_file(str(tmp_path / "absent.json")) == ""


def test_local_file_round_trip(tmp_path):
    path = str(tmp_path / "data.txt")
    store = LocalFile()
    store.write_file(path, "hello")
    assert store.read_file(path) == "hello"


def test_local_file_write_to_directory_raises(tmp_path):
    with pytest.raises(OSError):
        LocalFile().write_file(str(tmp_path), "x")


def test_load_missing_file_uses_defaults(tmp_path):
    config = Config(str(tmp_path / "config.json"))
    config.volume = 5
    config.device_name = "Other"
    config.format = AudioFormat.OGG_VORBIS_96
    config.load()
    assert config.volume == DEFAULT_VOLUME == 32767
    assert config.device_name == DEFAULT_DEVICE_NAME == "CSpot"
    assert config.format is AudioFormat.OGG_VORBIS_160


def test_save_then_load_round_trip(tmp_path):
    path = str(tmp_path / "config.json")
    saved = Config(path, volume=1234, device_name="Kitchen", format=AudioFormat.OGG_VORBIS_320)
    saved.save()
    loaded = Config(path)
    loaded.load()
    assert loaded.volume == saved.volume
    assert loaded.device_name == saved.device_name
    assert loaded.format is saved.format


def test_save_writes_expected_keys(tmp_path):
    path = tmp_path / "config.json"
    Config(str(path), volume=10, device_name="Desk", format=AudioFormat.OGG_VORBIS_96).save()
    document = json.loads(path.read_text())
    assert document == {"volume": 10, "deviceName": "Desk", "bitrate": 96}


@pytest.mark.parametrize(
    "bitrate, expected",
    [
        (320, AudioFormat.OGG_VORBIS_320),
        (160, AudioFormat.OGG_VORBIS_160),
        (96, AudioFormat.OGG_VORBIS_96),
        (128, AudioFormat.OGG_VORBIS_320),
    ],
)
def test_load_bitrate_mapping(tmp_path, bitrate, expected):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bitrate": bitrate}))
    config = Config(str(path))
    config.load()
    assert config.format is expected


def test_load_keeps_values_missing_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"volume": 42}))
    config = Config(str(path), device_name="Garage", format=AudioFormat.OGG_VORBIS_96)
    config.load()
    assert config.volume == 42
    assert config.device_name == "Garage"
    assert config.format is AudioFormat.OGG_VORBIS_96


def test_load_with_empty_filename_raises():
    with pytest.raises(ValueError):
        Config("").load()