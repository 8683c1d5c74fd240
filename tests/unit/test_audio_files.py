from __future__ import annotations

from pathlib import Path

import numpy as np
import soundfile as sf

from utils.files import (
    SAMPLE_RATE_HZ,
    make_silence_pcm16,
    file_duration_seconds,
    file_to_pcm16_mono_16k,
)


def _tone(freq_hz: float, amplitude: float, sr: int, seconds: float = 1.0) -> np.ndarray:
    t = np.arange(int(sr * seconds)) / sr
    return (amplitude * np.sin(2 * np.pi * freq_hz * t)).astype(np.float32)


def _rms(pcm: bytes) -> float:
    x = np.frombuffer(pcm, dtype="<i2").astype(np.float64) / 32768.0
    return float(np.sqrt(np.mean(x * x)))


def test_stereo_44k_file_is_downmixed_and_resampled(tmp_path: Path) -> None:
    path = tmp_path / "stereo.wav"
    left = _tone(1000.0, 0.5, 44100)
    sf.write(str(path), np.stack([left, np.zeros_like(left)], axis=1), 44100)

    pcm = file_to_pcm16_mono_16k(path)

    assert abs(len(pcm) // 2 - SAMPLE_RATE_HZ) <= 1
    # Averaging with a silent channel halves the amplitude.
    assert abs(_rms(pcm) - 0.25 / np.sqrt(2)) < 0.01


def test_non_wav_container_is_supported(tmp_path: Path) -> None:
    path = tmp_path / "tone.flac"
    sf.write(str(path), _tone(1000.0, 0.3, 22050, seconds=0.5), 22050)

    pcm = file_to_pcm16_mono_16k(path)

    assert abs(len(pcm) // 2 - SAMPLE_RATE_HZ // 2) <= 1
    assert abs(_rms(pcm) - 0.3 / np.sqrt(2)) < 0.01


def test_16k_mono_file_passes_through(tmp_path: Path) -> None:
    path = tmp_path / "mono.wav"
    sf.write(str(path), _tone(440.0, 0.4, SAMPLE_RATE_HZ, seconds=0.25), SAMPLE_RATE_HZ, subtype="PCM_16")

    pcm = file_to_pcm16_mono_16k(path)

    assert len(pcm) == SAMPLE_RATE_HZ // 4 * 2
    assert file_duration_seconds(path) == 0.25


def test_make_silence_pcm16() -> None:
    assert make_silence_pcm16(0.1) == bytes(SAMPLE_RATE_HZ // 10 * 2)
    assert make_silence_pcm16(-1.0) == b""
