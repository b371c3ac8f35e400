import pytest

from spotconnect.track_reference import TrackReference, base62_decode


def test_decode_zero():
    assert base62_decode("0") == b"\x00"


def test_decode_single_digit():
    assert base62_decode("z") == bytes([35])


def test_decode_two_digits():
    assert base62_decode("10") == bytes([62])


def test_decode_is_monotonic():
    values = [int.from_bytes(base62_decode(s), "big") for s in ["Z", "10", "11", "1Z", "20"]]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_decode_rejects_invalid_character():
    with pytest.raises(ValueError):
        base62_decode("ab-c")


def test_track_from_gid():
    ref = TrackReference(gid=b"\x01\xff")
    assert ref.gid == b"\x01\xff"
    assert ref.is_episode is False
    assert ref.mercury_request_uri() == "hm://metadata/3/track/01ff"


def test_episode_from_uri():
    ref = TrackReference(uri="spotify:episode:10")
    assert ref.is_episode is True
    assert ref.gid == base62_decode("10")
    assert ref.mercury_request_uri() == "hm://metadata/3/episode/" + ref.gid.hex()


def test_gid_takes_precedence_over_uri():
    ref = TrackReference(gid=b"\xaa", uri="spotify:episode:10")
    assert ref.gid == b"\xaa"
    assert ref.is_episode is False


def test_empty_reference():
    ref = TrackReference()
    assert ref.gid == b""
    assert ref.mercury_request_uri() == "hm://metadata/3/track/"