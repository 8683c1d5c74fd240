from __future__ import annotations

import io
import wave

import numpy as np
import pytest

from voicecall.audio.energy import EnergyProfile
from voicecall.audio.pcm import wrap_wav, decode_samples, bytes_per_sample


def test_percentile_uses_nearest_rank() -> None:
    profile = EnergyProfile(capacity=10)
    for value in [0.5, 0.1, 0.4, 0.2, 0.3]:
        profile.add(value)
    assert profile.percentile(0.0) == 0.1
    assert profile.percentile(0.25) == 0.2
    assert profile.median() == 0.3
    assert profile.percentile(1.0) == 0.5


def test_capacity_evicts_oldest_value() -> None:
    profile = EnergyProfile(capacity=3)
    for value in [0.9, 0.1, 0.2, 0.3]:
        profile.add(value)
    assert len(profile) == 3
    assert profile.values() == [0.1, 0.2, 0.3]
    assert profile.percentile(1.0) == 0.3


def test_duplicate_values_evict_one_copy() -> None:
    profile = EnergyProfile(capacity=2)
    profile.add(0.2)
    profile.add(0.2)
    profile.add(0.4)
    assert profile.values() == [0.2, 0.4]
    assert profile.percentile(0.0) == 0.2


def test_empty_profile() -> None:
    profile = EnergyProfile()
    assert profile.median() == 0.0
    profile.add(0.1)
    profile.clear()
    assert len(profile) == 0


def test_decode_pcm16() -> None:
    raw = np.array([0, 16384, -32768], dtype="<i2").tobytes()
    samples = decode_samples(raw, "pcm16")
    assert samples.tolist() == [0.0, 0.5, -1.0]


def test_decode_u8_is_offset_from_midpoint() -> None:
    samples = decode_samples(bytes([128, 192, 0]), "u8")
    assert samples.tolist() == [0.0, 0.5, -1.0]


def test_decode_drops_trailing_partial_sample() -> None:
    assert decode_samples(b"\x00\x40\x01", "pcm16").size == 1
    assert decode_samples(b"\x01", "pcm16").size == 0


def test_decode_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        decode_samples(b"\x00\x00", "float32")


def test_wrap_wav_header() -> None:
    pcm = np.zeros(160, dtype="<i2").tobytes()
    data = wrap_wav(pcm, sample_rate_hz=16000, sample_format="pcm16")
    with wave.open(io.BytesIO(data), "rb") as wav:
        assert wav.getframerate() == 16000
        assert wav.getnchannels() == 1
        assert wav.getsampwidth() == bytes_per_sample("pcm16")
        assert wav.getnframes() == 160
