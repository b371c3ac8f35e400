import logging

import pytest

from spotconnect.shannon import Shannon
from spotconnect.shannon_connection import Packet, ShannonConnection

KEY_A = bytes(range(32))
KEY_B = bytes(range(32, 64))


class Pipe:
    def __init__(self):
        self.buffer = bytearray()

    def write_block(self, data):
        self.buffer += data
        return len(data)

    def read_block(self, size):
        if len(self.buffer) < size:
            raise EOFError("not enough data")
        chunk = bytes(self.buffer[:size])
        del self.buffer[:size]
        return chunk


@pytest.fixture
def link():
    pipe = Pipe()
    sender = ShannonConnection()
    receiver = ShannonConnection()
    sender.wrap_connection(pipe, KEY_A, KEY_B)
    receiver.wrap_connection(pipe, KEY_B, KEY_A)
    return pipe, sender, receiver


def test_round_trip_many_packets(link):
    _, sender, receiver = link
    messages = [(0x04, b"ping"), (0xB2, b"x" * 100), (0x1B, b"se"), (0x09, b"")]
    for cmd, data in messages:
        sender.send_packet(cmd, data)
    received = [receiver.recv_packet() for _ in messages]
    assert received == [Packet(cmd, data) for cmd, data in messages]


def test_wire_length(link):
    pipe, sender, _ = link
    sender.send_packet(0xAB, b"hello")
    assert len(pipe.buffer) == 3 + len(b"hello") + 4


def test_wire_format_matches_cipher(link):
    pipe, sender, _ = link
    sender.send_packet(0xAB, b"hello")
    wire = bytes(pipe.buffer)
    cipher = Shannon()
    cipher.key(KEY_A)
    cipher.nonce(b"\x00\x00\x00\x00")
    assert cipher.decrypt(wire[:3]) == b"\xab\x00\x05"
    assert cipher.decrypt(wire[3:8]) == b"hello"
    assert cipher.finish(4) == wire[8:]


def test_nonce_advances(link):
    pipe, sender, _ = link
    sender.send_packet(0x01, b"same")
    first = bytes(pipe.buffer)
    pipe.buffer.clear()
    sender.send_packet(0x01, b"same")
    assert bytes(pipe.buffer) != first
    assert len(pipe.buffer) == len(first)


def test_bad_mac_is_logged(link, caplog):
    pipe, sender, receiver = link
    sender.send_packet(0x02, b"data")
    pipe.buffer[-1] ^= 0xFF
    with caplog.at_level(logging.ERROR):
        packet = receiver.recv_packet()
    assert packet == Packet(0x02, b"data")
    assert "MAC" in caplog.text


def test_unwrapped_connection_raises():
    with pytest.raises(RuntimeError):
        ShannonConnection().send_packet(1, b"")


def test_oversized_payload_raises(link):
    _, sender, _ = link
    with pytest.raises(ValueError):
        sender.send_packet(1, bytes(0x10000))