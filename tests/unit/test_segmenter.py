from __future__ import annotations

import numpy as np

from voicecall.state.models import AudioChunk, SegmentState
from voicecall.audio.vad import VoiceActivityDetector
from voicecall.state.settings import SegmenterSettings
from voicecall.audio.segmenter import (
    FLUSH_MANUAL,
    FLUSH_SPEECH_ENDED,
    FLUSH_HIGH_WATERMARK,
    UtteranceSegmenter,
)

_SILENT = bytes(640)


def _speech(n: int = 320) -> bytes:
    t = np.arange(n) / 16000
    return (0.3 * np.sin(2 * np.pi * 1000.0 * t) * 32767).astype("<i2").tobytes()


def _segmenter(low: int = 5, high: int = 8, max_chunks: int = 30) -> UtteranceSegmenter:
    settings = SegmenterSettings(buffer_max_chunks=max_chunks, low_watermark=low, high_watermark=high)
    return UtteranceSegmenter(detector=VoiceActivityDetector(), settings=settings)


def _feed(segmenter: UtteranceSegmenter, payloads: list[bytes], start: int = 0):
    return [
        segmenter.process(AudioChunk(data=data, sequence_number=start + i, timestamp=0.0))
        for i, data in enumerate(payloads)
    ]


def test_silent_chunks_flush_once_at_high_watermark() -> None:
    segmenter = _segmenter(low=5, high=6)
    decisions = _feed(segmenter, [_SILENT] * 6)

    flushed = [d for d in decisions if d.flushed is not None]
    assert len(flushed) == 1
    assert decisions[-1].reason == FLUSH_HIGH_WATERMARK
    assert decisions[-1].flushed == _SILENT * 6
    assert segmenter.buffered == 0


def test_buffer_never_exceeds_high_watermark() -> None:
    segmenter = _segmenter(low=3, high=4)
    payloads = [_speech() if i % 3 else _SILENT for i in range(25)]
    for decision in _feed(segmenter, payloads):
        assert decision.chunk_count <= 4
        assert segmenter.buffered < 4


def test_speech_then_silence_flushes_at_low_watermark() -> None:
    segmenter = _segmenter(low=5, high=8)
    decisions = _feed(segmenter, [_speech()] * 3 + [_SILENT] * 2)

    assert decisions[0].state is SegmentState.SPEAKING
    assert all(d.flushed is None for d in decisions[:4])
    assert decisions[4].reason == FLUSH_SPEECH_ENDED
    assert decisions[4].chunk_count == 5
    assert decisions[4].flushed == _speech() * 3 + _SILENT * 2


def test_ongoing_speech_is_not_cut_at_low_watermark() -> None:
    segmenter = _segmenter(low=3, high=8)
    decisions = _feed(segmenter, [_speech()] * 5)
    assert all(d.flushed is None for d in decisions)
    assert segmenter.state is SegmentState.SPEAKING


def test_manual_flush_and_reset() -> None:
    segmenter = _segmenter()
    _feed(segmenter, [_speech(), _SILENT])
    assert segmenter.flush(FLUSH_MANUAL) == _speech() + _SILENT
    assert segmenter.flush() is None
    assert segmenter.flush_count == 1

    _feed(segmenter, [_speech()])
    segmenter.reset()
    assert segmenter.buffered == 0
    assert segmenter.state is SegmentState.SILENCE
    assert len(segmenter.detector.history) == 0


def test_out_of_order_chunks_are_flushed_in_sequence() -> None:
    segmenter = _segmenter(low=2, high=3)
    a, b, c = _SILENT[:320] + b"\x01\x00" * 160, _SILENT, _SILENT[:320] + b"\x02\x00" * 160
    segmenter.process(AudioChunk(data=c, sequence_number=2, timestamp=0.0))
    segmenter.process(AudioChunk(data=a, sequence_number=0, timestamp=0.0))
    decision = segmenter.process(AudioChunk(data=b, sequence_number=1, timestamp=0.0))
    assert decision.flushed == a + b + c
