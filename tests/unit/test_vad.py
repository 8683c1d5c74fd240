from __future__ import annotations

import numpy as np

from voicecall.state.settings import VadSettings
from voicecall.audio.vad import VoiceActivityDetector, voice_confidence

SAMPLE_RATE = 16000


def _pcm16(samples: np.ndarray) -> bytes:
    clipped = np.clip(samples, -1.0, 1.0)
    return (clipped * 32767).astype("<i2").tobytes()


def _sine(freq_hz: float, amplitude: float, n: int = 320) -> bytes:
    t = np.arange(n) / SAMPLE_RATE
    return _pcm16(amplitude * np.sin(2 * np.pi * freq_hz * t))


def _constant(level: float, n: int = 320) -> bytes:
    return _pcm16(np.full(n, level))


def test_silence_is_not_speech() -> None:
    vad = VoiceActivityDetector()
    result = vad.classify(bytes(640))
    assert result.is_speech is False
    assert result.energy_level == 0.0
    assert result.confidence == 0.0


def test_mid_band_tone_is_speech() -> None:
    vad = VoiceActivityDetector()
    result = vad.classify(_sine(1000.0, 0.3))
    assert result.is_speech is True
    assert result.energy_level > result.threshold
    assert result.confidence > 0.6


def test_short_chunk_is_silence_and_skips_history() -> None:
    vad = VoiceActivityDetector(VadSettings(min_samples=100))
    result = vad.classify(_sine(1000.0, 0.3, n=50))
    assert result.is_speech is False
    assert result.energy_level == 0.0
    assert len(vad.history) == 0


def test_threshold_uses_initial_value_until_enough_history() -> None:
    settings = VadSettings(min_history=10, initial_threshold=0.02)
    vad = VoiceActivityDetector(settings)
    for _ in range(9):
        vad.classify(_constant(0.3))
    assert vad.threshold == 0.02
    vad.classify(_constant(0.3))
    assert vad.threshold == settings.max_threshold


def test_single_loud_spike_does_not_lift_threshold() -> None:
    settings = VadSettings()
    vad = VoiceActivityDetector(settings)
    # Speech-shaped background at RMS ~0.01.
    quiet = _sine(1000.0, 0.01 * np.sqrt(2))
    for _ in range(9):
        vad.classify(quiet)
    vad.classify(_sine(1000.0, 0.7))

    result = vad.classify(quiet)
    # The chunk has a clear speech shape, so only the threshold keeps it out.
    assert result.confidence > settings.high_confidence
    assert result.energy_level < settings.quiet_energy_fraction * result.threshold
    assert result.is_speech is False
    # Noise floor and median both stay at the quiet level; the floor clamp applies.
    assert result.threshold == settings.min_threshold


def test_white_noise_is_not_speech() -> None:
    settings = VadSettings()
    vad = VoiceActivityDetector(settings)
    rng = np.random.default_rng(0)
    result = vad.classify(_pcm16(rng.normal(0.0, 0.3, 320)))
    assert result.energy_level > result.threshold
    assert result.confidence < settings.low_confidence
    assert result.is_speech is False


def test_high_frequency_hiss_is_not_speech() -> None:
    settings = VadSettings()
    vad = VoiceActivityDetector(settings)
    result = vad.classify(_sine(6000.0, 0.3))
    assert result.energy_level > result.threshold
    assert result.confidence < settings.low_confidence
    assert result.is_speech is False


def test_steady_noise_never_becomes_speech() -> None:
    vad = VoiceActivityDetector()
    rng = np.random.default_rng(1)
    results = [vad.classify(_pcm16(rng.normal(0.0, 0.3, 320))) for _ in range(30)]
    assert not any(r.is_speech for r in results)
    # Once history fills, the threshold tracks the noise level.
    assert results[-1].threshold > VadSettings().initial_threshold


def test_threshold_stays_within_bounds() -> None:
    settings = VadSettings()
    vad = VoiceActivityDetector(settings)
    for _ in range(20):
        vad.classify(_constant(0.9))
    assert vad.threshold == settings.max_threshold
    vad.reset()
    assert vad.threshold == settings.initial_threshold
    assert len(vad.history) == 0


def test_voice_confidence_zero_for_flat_signal() -> None:
    samples = np.full(320, 0.25)
    assert voice_confidence(samples, 0.25) == 0.0


def test_quiet_audio_needs_strong_spectral_shape() -> None:
    settings = VadSettings(initial_threshold=0.1)
    vad = VoiceActivityDetector(settings)
    # RMS ~0.078: above 0.7 * threshold but below the threshold itself.
    result = vad.classify(_sine(1000.0, 0.11))
    assert result.energy_level < result.threshold
    assert result.energy_level > settings.quiet_energy_fraction * result.threshold
    assert result.is_speech is True

    # A flat (DC) signal at the same energy has no spectral shape.
    flat = vad.classify(_constant(0.078))
    assert flat.confidence == 0.0
    assert flat.is_speech is False


def test_constant_midpoint_u8_is_not_speech() -> None:
    vad = VoiceActivityDetector(VadSettings(sample_format="u8"))
    for _ in range(12):
        result = vad.classify(bytes([128]) * 320)
        assert result.is_speech is False
        assert result.energy_level == 0.0
