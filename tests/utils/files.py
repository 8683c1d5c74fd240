"""Audio file helpers for the test clients."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import soundfile as sf
import soxr

SAMPLE_RATE_HZ = 16000


def _downmix(x: np.ndarray) -> np.ndarray:
    if x.ndim > 1:
        return x.mean(axis=1)
    return x


def _resample_to_16k(x: np.ndarray, sr: int) -> np.ndarray:
    """Resample mono audio to 16kHz."""
    if sr == SAMPLE_RATE_HZ:
        return x
    # soxr expects float32 for best results.
    y = soxr.resample(x.astype(np.float32, copy=False), sr, SAMPLE_RATE_HZ)
    return y.astype(np.float32, copy=False)


def file_to_pcm16_mono_16k(path: str | Path) -> bytes:
    """Load any libsndfile-readable audio file and return PCM16 mono @16k bytes."""
    x, sr = sf.read(str(path), dtype="float32", always_2d=False)
    x = _resample_to_16k(_downmix(x), int(sr))
    x = np.clip(x, -1.0, 1.0)
    pcm = (x * 32767.0).astype("<i2")
    return pcm.tobytes()


def file_duration_seconds(path: str | Path) -> float:
    info = sf.info(str(path))
    return float(info.frames / info.samplerate)


def make_silence_pcm16(seconds: float, *, sr: int = SAMPLE_RATE_HZ) -> bytes:
    n = int(max(0.0, seconds) * sr)
    return np.zeros(n, dtype="<i2").tobytes()


__all__ = [
    "SAMPLE_RATE_HZ",
    "file_duration_seconds",
    "file_to_pcm16_mono_16k",
    "make_silence_pcm16",
]
