from __future__ import annotations

from voicecall.audio.buffer import ChunkBuffer
from voicecall.state.models import AudioChunk


def _chunk(seq: int, data: bytes | None = None) -> AudioChunk:
    return AudioChunk(data=data if data is not None else bytes([seq]), sequence_number=seq, timestamp=0.0)


def test_drain_returns_sequence_order() -> None:
    buf = ChunkBuffer(max_chunks=10)
    for seq in [3, 1, 2]:
        buf.add(_chunk(seq))
    assert buf.drain() == bytes([1, 2, 3])
    assert len(buf) == 0


def test_duplicate_sequence_numbers_keep_arrival_order() -> None:
    buf = ChunkBuffer(max_chunks=10)
    buf.add(_chunk(5, b"a"))
    buf.add(_chunk(4, b"x"))
    buf.add(_chunk(5, b"b"))
    assert [c.data for c in buf.chunks()] == [b"x", b"a", b"b"]


def test_overflow_evicts_lowest_sequence_numbers() -> None:
    buf = ChunkBuffer(max_chunks=3)
    for seq in [10, 11, 12, 13]:
        buf.add(_chunk(seq))
    assert [c.sequence_number for c in buf.chunks()] == [11, 12, 13]
    assert buf.evicted == 1

    # A late chunk older than everything buffered is the one that goes.
    buf.add(_chunk(2))
    assert [c.sequence_number for c in buf.chunks()] == [11, 12, 13]
    assert buf.evicted == 2


def test_clear_and_drain_chunks() -> None:
    buf = ChunkBuffer(max_chunks=4)
    buf.add(_chunk(1))
    buf.add(_chunk(2))
    drained = buf.drain_chunks()
    assert [c.sequence_number for c in drained] == [1, 2]
    assert buf.drain() == b""
    buf.add(_chunk(3))
    buf.clear()
    assert len(buf) == 0
