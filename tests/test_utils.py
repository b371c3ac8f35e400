import time
from urllib.parse import quote

import pytest

from spotconnect.utils import (
    big_num_add,
    big_num_multiply,
    bytes_to_hex,
    current_timestamp,
    h2int,
    url_decode,
)


def _value(data: bytes) -> int:
    return int.from_bytes(data, "big")


def test_current_timestamp_is_in_milliseconds():
    before = int(time.time() * 1000)
    stamp = current_timestamp()
    after = int(time.time() * 1000)
    assert before - 1 <= stamp <= after + 1


@pytest.mark.parametrize(
    "num, n",
    [
        (b"\x00", 5),
        (b"\x00\xff", 1),
        (b"\x12\x34\x56", 200),
        (bytes(range(16)), 0x1234),
        (b"\x00" * 4, 0),
    ],
)
def test_big_num_add_matches_integer_addition(num, n):
    result = big_num_add(num, n)
    assert _value(result) == _value(num) + n
    assert len(result) == len(num)


def test_big_num_add_extends_on_overflow():
    result = big_num_add(b"\xff\xff", 1)
    assert len(result) == 3
    assert _value(result) == 0x10000


def test_big_num_add_does_not_mutate_input():
    original = bytearray(b"\x01\x02")
    big_num_add(original, 300)
    assert original == bytearray(b"\x01\x02")


@pytest.mark.parametrize(
    "num, n",
    [
        (b"\x00", 62),
        (b"\x01", 62),
        (b"\x10\x00", 3),
        (b"\xff\xff\xff", 62),
        (bytes(range(1, 9)), 61),
    ],
)
def test_big_num_multiply_matches_integer_multiplication(num, n):
    assert _value(big_num_multiply(num, n)) == _value(num) * n


def test_multiply_then_add_builds_base62_number():
    digits = [1, 61, 0, 35, 10]
    number = b"\x00"
    expected = 0
    for digit in digits:
        number = big_num_add(big_num_multiply(number, 62), digit)
        expected = expected * 62 + digit
    assert _value(number) == expected


@pytest.mark.parametrize(
    "char, value",
    [("0", 0), ("9", 9), ("a", 10), ("f", 15), ("A", 10), ("F", 15), ("g", 0), ("%", 0)],
)
def test_h2int(char, value):
    assert h2int(char) == value


def test_url_decode_plus_and_percent():
    assert url_decode("a+b%20c") == "a b c"


@pytest.mark.parametrize(
    "text",
    ["plain", "with spaces", "slash/and=equals&amp", "base64+/==", "caf\u00e9"],
)
def test_url_decode_round_trips_quote(text):
    assert url_decode(quote(text, safe="")) == text


def test_url_decode_leaves_ordinary_text():
    assert url_decode("abcXYZ123") == "abcXYZ123"


def test_bytes_to_hex():
    assert bytes_to_hex(b"\x01\xab\x00") == "01ab00"
    assert bytes_to_hex(b"") == ""


def test_bytes_to_hex_round_trip():
    data = bytes(range(256))
    assert bytes.fromhex(bytes_to_hex(data)) == data