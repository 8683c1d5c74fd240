"""Utterance segmentation over VAD results and buffer fill."""

from __future__ import annotations

import logging

from voicecall.state.settings import SegmenterSettings
from voicecall.state.models import AudioChunk, SegmentState, SegmentDecision

from .buffer import ChunkBuffer
from .vad import VoiceActivityDetector

logger = logging.getLogger(__name__)

FLUSH_SPEECH_ENDED = "speech_ended"
FLUSH_HIGH_WATERMARK = "high_watermark"
FLUSH_MANUAL = "manual"


class UtteranceSegmenter:
    """Decide when buffered audio forms a complete utterance.

    The segmenter only hands audio back; it never waits on transcription, so
    the next utterance can start buffering straight away.
    """

    def __init__(
        self,
        *,
        detector: VoiceActivityDetector,
        settings: SegmenterSettings | None = None,
        buffer: ChunkBuffer | None = None,
    ) -> None:
        self._settings = settings or SegmenterSettings()
        self._detector = detector
        self._buffer = buffer or ChunkBuffer(max_chunks=self._settings.buffer_max_chunks)
        self._state = SegmentState.SILENCE
        self._heard_speech = False
        self.flush_count = 0

    @property
    def state(self) -> SegmentState:
        return self._state

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    @property
    def detector(self) -> VoiceActivityDetector:
        return self._detector

    def _flush_reason(self) -> str | None:
        count = len(self._buffer)
        if count >= self._settings.high_watermark:
            return FLUSH_HIGH_WATERMARK
        if count >= self._settings.low_watermark and self._state is SegmentState.SILENCE and self._heard_speech:
            return FLUSH_SPEECH_ENDED
        return None

    def process(self, chunk: AudioChunk) -> SegmentDecision:
        self._buffer.add(chunk)
        vad = self._detector.classify(chunk.data)

        if vad.is_speech:
            self._state = SegmentState.SPEAKING
            self._heard_speech = True
        else:
            self._state = SegmentState.SILENCE

        reason = self._flush_reason()
        if reason is None:
            return SegmentDecision(vad=vad, state=self._state, chunk_count=len(self._buffer))

        count = len(self._buffer)
        audio = self.flush(reason)
        return SegmentDecision(vad=vad, state=self._state, chunk_count=count, flushed=audio, reason=reason)

    def flush(self, reason: str = FLUSH_MANUAL) -> bytes | None:
        if not len(self._buffer):
            return None
        count = len(self._buffer)
        audio = self._buffer.drain()
        self._heard_speech = False
        self._state = SegmentState.SILENCE
        self.flush_count += 1
        logger.debug("utterance flushed reason=%s chunks=%d bytes=%d", reason, count, len(audio))
        return audio

    def reset(self) -> None:
        self._buffer.clear()
        self._detector.reset()
        self._heard_speech = False
        self._state = SegmentState.SILENCE


__all__ = [
    "FLUSH_HIGH_WATERMARK",
    "FLUSH_MANUAL",
    "FLUSH_SPEECH_ENDED",
    "UtteranceSegmenter",
]
