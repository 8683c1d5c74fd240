"""Audio, VAD and segmentation configuration (env-resolved constants only)."""

from __future__ import annotations

import os


def _get_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except Exception:
        return float(default)


def _get_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except Exception:
        return int(default)


# Clients stream PCM16 mono at 16kHz unless told otherwise.
AUDIO_SAMPLE_RATE_HZ: int = max(1, _get_int("AUDIO_SAMPLE_RATE_HZ", 16000))

_SAMPLE_FORMAT_RAW = (os.getenv("AUDIO_SAMPLE_FORMAT") or "").strip().lower()
AUDIO_SAMPLE_FORMAT: str = _SAMPLE_FORMAT_RAW if _SAMPLE_FORMAT_RAW in {"pcm16", "u8"} else "pcm16"

# Rolling energy history used for the dynamic threshold.
VAD_HISTORY_SIZE: int = max(1, _get_int("VAD_HISTORY_SIZE", 50))
VAD_MIN_HISTORY: int = max(1, _get_int("VAD_MIN_HISTORY", 10))
VAD_MIN_SAMPLES: int = max(1, _get_int("VAD_MIN_SAMPLES", 100))

VAD_INITIAL_THRESHOLD: float = max(0.0, _get_float("VAD_INITIAL_THRESHOLD", 0.02))
VAD_MIN_THRESHOLD: float = max(0.0, _get_float("VAD_MIN_THRESHOLD", 0.015))
VAD_MAX_THRESHOLD: float = max(VAD_MIN_THRESHOLD, _get_float("VAD_MAX_THRESHOLD", 0.25))
VAD_NOISE_PERCENTILE: float = min(1.0, max(0.0, _get_float("VAD_NOISE_PERCENTILE", 0.25)))
VAD_MEDIAN_FRACTION: float = min(1.0, max(0.0, _get_float("VAD_MEDIAN_FRACTION", 0.5)))

# Two-path decision rule.
VAD_LOW_CONFIDENCE: float = _get_float("VAD_LOW_CONFIDENCE", 0.3)
VAD_HIGH_CONFIDENCE: float = _get_float("VAD_HIGH_CONFIDENCE", 0.6)
VAD_QUIET_ENERGY_FRACTION: float = _get_float("VAD_QUIET_ENERGY_FRACTION", 0.7)

# Chunk counts, not bytes.
BUFFER_MAX_CHUNKS: int = max(1, _get_int("BUFFER_MAX_CHUNKS", 30))
SEGMENT_LOW_WATERMARK: int = max(1, _get_int("SEGMENT_LOW_WATERMARK", 5))
SEGMENT_HIGH_WATERMARK: int = max(SEGMENT_LOW_WATERMARK, _get_int("SEGMENT_HIGH_WATERMARK", 8))

__all__ = [
    "AUDIO_SAMPLE_FORMAT",
    "AUDIO_SAMPLE_RATE_HZ",
    "BUFFER_MAX_CHUNKS",
    "SEGMENT_HIGH_WATERMARK",
    "SEGMENT_LOW_WATERMARK",
    "VAD_HIGH_CONFIDENCE",
    "VAD_HISTORY_SIZE",
    "VAD_INITIAL_THRESHOLD",
    "VAD_LOW_CONFIDENCE",
    "VAD_MAX_THRESHOLD",
    "VAD_MEDIAN_FRACTION",
    "VAD_MIN_HISTORY",
    "VAD_MIN_SAMPLES",
    "VAD_MIN_THRESHOLD",
    "VAD_NOISE_PERCENTILE",
    "VAD_QUIET_ENERGY_FRACTION",
]
