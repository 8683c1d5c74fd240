from .files import (
    SAMPLE_RATE_HZ,
    file_duration_seconds,
    file_to_pcm16_mono_16k,
    make_silence_pcm16,
)

__all__ = [
    "SAMPLE_RATE_HZ",
    "file_duration_seconds",
    "file_to_pcm16_mono_16k",
    "make_silence_pcm16",
]
