"""PCM helpers for raw client audio."""

from __future__ import annotations

import io
import wave

import numpy as np

# (numpy dtype, channel midpoint, full-scale deviation)
_FORMATS: dict[str, tuple[str, float, float]] = {
    "pcm16": ("<i2", 0.0, 32768.0),
    "u8": ("u1", 128.0, 128.0),
}


def bytes_per_sample(sample_format: str) -> int:
    dtype, _mid, _scale = _FORMATS[sample_format]
    return int(np.dtype(dtype).itemsize)


def decode_samples(data: bytes, sample_format: str = "pcm16") -> np.ndarray:
    """Return samples as float deviations from the channel midpoint in [-1, 1]."""
    if sample_format not in _FORMATS:
        raise ValueError(f"unsupported sample format: {sample_format}")
    dtype, midpoint, scale = _FORMATS[sample_format]
    width = np.dtype(dtype).itemsize
    usable = len(data) - (len(data) % width)
    if usable <= 0:
        return np.zeros(0, dtype=np.float64)
    raw = np.frombuffer(data[:usable], dtype=dtype).astype(np.float64)
    return np.clip((raw - midpoint) / scale, -1.0, 1.0)


def wrap_wav(data: bytes, *, sample_rate_hz: int, sample_format: str = "pcm16", channels: int = 1) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(bytes_per_sample(sample_format))
        wav.setframerate(sample_rate_hz)
        wav.writeframes(data)
    return buf.getvalue()


__all__ = ["bytes_per_sample", "decode_samples", "wrap_wav"]
