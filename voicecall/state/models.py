"""Value types shared by the audio and pipeline layers (dataclasses only)."""

from __future__ import annotations

import time
from enum import Enum
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class AudioChunk:
    data: bytes
    sequence_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class VadResult:
    is_speech: bool
    energy_level: float
    confidence: float
    threshold: float


class SegmentState(str, Enum):
    SILENCE = "silence"
    SPEAKING = "speaking"


@dataclass(frozen=True, slots=True)
class SegmentDecision:
    vad: VadResult
    state: SegmentState
    chunk_count: int
    flushed: bytes | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    role: str
    content: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class Transcript:
    text: str
    confidence: float | None = None


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    request_id: str
    status: OutcomeStatus
    transcription: str | None = None
    reply: str | None = None
    audio: bytes | None = None
    error: str | None = None


__all__ = [
    "AudioChunk",
    "ConversationTurn",
    "OutcomeStatus",
    "PipelineOutcome",
    "SegmentDecision",
    "SegmentState",
    "Transcript",
    "VadResult",
]
