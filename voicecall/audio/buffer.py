"""Sequence-ordered chunk buffer for the utterance in progress."""

from __future__ import annotations

import bisect
import logging

from voicecall.state.models import AudioChunk

logger = logging.getLogger(__name__)


class ChunkBuffer:
    """Hold received chunks sorted by sequence number.

    Insertion is stable: a chunk whose sequence number repeats lands after the
    ones already buffered. When capacity is exceeded the lowest sequence
    numbers are evicted so the most recent audio survives.
    """

    def __init__(self, *, max_chunks: int = 30) -> None:
        self.max_chunks = max(1, int(max_chunks))
        self._chunks: list[AudioChunk] = []
        self._keys: list[int] = []
        self.evicted: int = 0

    def __len__(self) -> int:
        return len(self._chunks)

    def add(self, chunk: AudioChunk) -> None:
        idx = bisect.bisect_right(self._keys, chunk.sequence_number)
        self._keys.insert(idx, chunk.sequence_number)
        self._chunks.insert(idx, chunk)

        overflow = len(self._chunks) - self.max_chunks
        if overflow > 0:
            del self._chunks[:overflow]
            del self._keys[:overflow]
            self.evicted += overflow
            logger.debug("chunk buffer full; evicted %d oldest chunk(s)", overflow)

    def chunks(self) -> list[AudioChunk]:
        return list(self._chunks)

    def drain_chunks(self) -> list[AudioChunk]:
        chunks = self._chunks
        self._chunks = []
        self._keys = []
        return chunks

    def drain(self) -> bytes:
        return b"".join(chunk.data for chunk in self.drain_chunks())

    def clear(self) -> None:
        self._chunks.clear()
        self._keys.clear()


__all__ = ["ChunkBuffer"]
