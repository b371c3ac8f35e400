"""Routes incoming audio chunk packets to the chunks that requested them."""

from __future__ import annotations

import logging
import queue
import struct
import threading
import weakref
from typing import List, Optional, Tuple

from .audio_chunk import AudioChunk

__all__ = ["AudioChunkManager", "DATA_SIZE_HEADER", "DATA_SIZE_FOOTER"]

log = logging.getLogger(__name__)

DATA_SIZE_HEADER = 24
DATA_SIZE_FOOTER = 2

_POLL_SECONDS = 0.1


class AudioChunkManager:
    """Keeps registered chunks and feeds them data on a worker thread.

    Chunks are held weakly: once nobody else references a chunk, it is
    forgotten.
    """

    def __init__(self) -> None:
        self._chunks: List[weakref.ref] = []
        self._chunks_lock = threading.Lock()
        self._queue: "queue.Queue[Tuple[bytes, bool]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self.is_running = False

    def start(self) -> None:
        """Start the worker thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self.is_running = True
        self._thread = threading.Thread(
            target=self._run, name="AudioChunkManager", daemon=True
        )
        self._thread.start()

    def register_new_chunk(
        self, seq_id: int, audio_key: bytes, start_pos: int, end_pos: int
    ) -> AudioChunk:
        """Register a chunk; positions are given in 4-byte words."""
        chunk = AudioChunk(seq_id, audio_key, start_pos * 4, end_pos * 4)
        with self._chunks_lock:
            self._chunks.append(weakref.ref(chunk))
        log.debug("Chunk requested %d", seq_id)
        return chunk

    def handle_chunk_data(self, data: bytes, failed: bool = False) -> None:
        """Queue received data for the worker thread."""
        self._queue.put((bytes(data), failed))

    def _live_chunks(self) -> List[AudioChunk]:
        with self._chunks_lock:
            alive = []
            refs = []
            for ref in self._chunks:
                chunk = ref()
                if chunk is not None:
                    alive.append(chunk)
                    refs.append(ref)
            self._chunks = refs
            return alive

    def fail_all_chunks(self) -> None:
        """Mark every unfinished chunk as failed and wake its waiters."""
        for chunk in self._live_chunks():
            if not chunk.is_loaded:
                chunk.is_loaded = True
                chunk.is_failed = True
                chunk.header_loaded_event.set()
                chunk.loaded_event.set()

    def close(self) -> None:
        """Stop the worker, failing all pending chunks."""
        self.is_running = False
        self.fail_all_chunks()
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        while self.is_running:
            try:
                data, failed = self._queue.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                continue
            try:
                self._dispatch(data, failed)
            except Exception:
                log.exception("Failed to handle audio chunk data")

    def _dispatch(self, data: bytes, failed: bool) -> None:
        if len(data) < 2:
            log.warning("Ignoring audio chunk packet of %d bytes", len(data))
            return
        (seq_id,) = struct.unpack_from(">H", data, 0)
        for chunk in self._live_chunks():
            if chunk.seq_id != seq_id:
                continue
            if failed:
                chunk.start_position = 0
                chunk.end_position = 0
                chunk.header_loaded_event.set()
                chunk.loaded_event.set()
                break
            if len(data) == DATA_SIZE_HEADER:
                log.debug("ID: %d: header decrypt!", seq_id)
                (size_words,) = struct.unpack_from(">I", data, 5)
                chunk.header_file_size = size_words * 4
                chunk.header_loaded_event.set()
            elif len(data) == DATA_SIZE_FOOTER:
                if (
                    chunk.header_file_size is not None
                    and chunk.end_position > chunk.header_file_size
                ):
                    chunk.end_position = chunk.header_file_size
                log.debug("ID: %d: Starting decrypt!", seq_id)
                with chunk.data_lock:
                    chunk.decrypt()
                chunk.loaded_event.set()
            else:
                with chunk.data_lock:
                    chunk.append_data(data[2:])