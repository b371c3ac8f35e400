import struct

import pytest

from spotconnect.audio_chunk import AudioChunk
from spotconnect.audio_chunk_manager import (
    DATA_SIZE_HEADER,
    AudioChunkManager,
)

KEY = bytes(range(16))
WAIT = 2.0


@pytest.fixture
def manager():
    mgr = AudioChunkManager()
    mgr.start()
    yield mgr
    mgr.close()


def _header(seq_id, size_words):
    data = struct.pack(">H", seq_id) + b"\x00\x00\x00" + struct.pack(">I", size_words)
    return data.ljust(DATA_SIZE_HEADER, b"\x00")


def test_register_converts_words_to_bytes():
    mgr = AudioChunkManager()
    chunk = mgr.register_new_chunk(5, KEY, 10, 20)
    assert chunk.seq_id == 5
    assert chunk.start_position == 40
    assert chunk.end_position == 80


def test_header_sets_file_size(manager):
    chunk = manager.register_new_chunk(1, KEY, 0, 16)
    manager.handle_chunk_data(_header(1, 250))
    assert chunk.header_loaded_event.wait(WAIT)
    assert chunk.header_file_size == 1000


def test_data_then_footer_decrypts(manager):
    payload = bytes(range(64))
    chunk = manager.register_new_chunk(2, KEY, 0, 16)
    manager.handle_chunk_data(struct.pack(">H", 2) + payload)
    manager.handle_chunk_data(struct.pack(">H", 2))
    assert chunk.loaded_event.wait(WAIT)
    assert chunk.is_loaded

    reference = AudioChunk(9, KEY, 0, 64)
    reference.append_data(payload)
    reference.decrypt()
    assert bytes(chunk.decrypted_data) == bytes(reference.decrypted_data)
    assert chunk.start_position == 0


def test_footer_truncates_end_to_file_size(manager):
    chunk = manager.register_new_chunk(3, KEY, 0, 64)
    manager.handle_chunk_data(_header(3, 8))
    manager.handle_chunk_data(struct.pack(">H", 3) + bytes(16))
    manager.handle_chunk_data(struct.pack(">H", 3))
    assert chunk.loaded_event.wait(WAIT)
    assert chunk.end_position == chunk.header_file_size
    assert chunk.start_position == chunk.end_position - len(chunk.decrypted_data)


def test_failed_response_resets_positions(manager):
    chunk = manager.register_new_chunk(4, KEY, 4, 8)
    manager.handle_chunk_data(struct.pack(">H", 4), failed=True)
    assert chunk.loaded_event.wait(WAIT)
    assert chunk.header_loaded_event.is_set()
    assert chunk.start_position == 0
    assert chunk.end_position == 0
    assert not chunk.is_failed


def test_data_for_other_sequence_is_ignored(manager):
    chunk = manager.register_new_chunk(6, KEY, 0, 4)
    other = manager.register_new_chunk(7, KEY, 0, 4)
    manager.handle_chunk_data(struct.pack(">H", 7) + b"xyz")
    manager.handle_chunk_data(struct.pack(">H", 7))
    assert other.loaded_event.wait(WAIT)
    assert chunk.decrypted_data == bytearray()
    assert not chunk.is_loaded


def test_fail_all_chunks_marks_unloaded_chunks():
    mgr = AudioChunkManager()
    pending = mgr.register_new_chunk(1, KEY, 0, 4)
    done = mgr.register_new_chunk(2, KEY, 0, 4)
    done.is_loaded = True
    mgr.fail_all_chunks()
    assert pending.is_failed and pending.is_loaded
    assert pending.loaded_event.is_set()
    assert pending.header_loaded_event.is_set()
    assert not done.is_failed


def test_close_stops_worker_and_fails_chunks():
    mgr = AudioChunkManager()
    mgr.start()
    chunk = mgr.register_new_chunk(1, KEY, 0, 4)
    mgr.close()
    assert not mgr.is_running
    assert chunk.is_failed
    assert chunk.loaded_event.is_set()