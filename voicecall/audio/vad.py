"""Energy/spectral voice activity detection.

This is a hand-tuned heuristic, not a trained model. Each chunk is scored on
two axes:

* RMS energy against a dynamic threshold derived from recent history
  (noise floor plus a fraction of the gap to the median), so the cutoff
  follows ambient noise.
* A coarse spectral shape. Mean absolute differences at three sample strides
  stand in for high/mid/low frequency bands. The medium and long strides are
  taken on a 4-tap moving average so content near the Nyquist frequency does
  not alias into them. Speech is assumed to carry most of its difference
  energy in the middle stride; white noise lands near a mid ratio of 0.25
  and scores nothing on that axis.

Speech is declared when energy clears the threshold with modest confidence,
or when quieter audio has an unambiguous spectral shape.
"""

from __future__ import annotations

import logging

import numpy as np

from voicecall.state.models import VadResult
from voicecall.state.settings import VadSettings

from .pcm import decode_samples
from .energy import EnergyProfile

logger = logging.getLogger(__name__)

# Sample strides standing in for high/mid/low bands (at 16kHz the difference
# filter peaks near 8kHz, 2kHz and 500Hz respectively).
_STRIDE_SHORT = 1
_STRIDE_MEDIUM = 4
_STRIDE_LONG = 16
_SMOOTHING_TAPS = 4
_SMOOTHING_KERNEL = np.full(_SMOOTHING_TAPS, 1.0 / _SMOOTHING_TAPS)

# Mid ratios at or below the floor (white noise sits at 0.25, hiss lower)
# score zero; the score saturates at full scale.
_MID_RATIO_FLOOR = 0.3
_MID_RATIO_FULL_SCALE = 0.6
_VARIATION_FULL_SCALE = 1.5
_MID_WEIGHT = 0.7
_VARIATION_WEIGHT = 0.3
_EPS = 1e-9


def _mean_abs_diff(samples: np.ndarray, stride: int) -> float:
    if samples.size <= stride:
        return 0.0
    return float(np.mean(np.abs(samples[stride:] - samples[:-stride])))


def _clip_unit(value: float) -> float:
    return min(1.0, max(0.0, value))


def voice_confidence(samples: np.ndarray, rms: float) -> float:
    """Score in [0, 1] for how speech-like the chunk's spectral shape is."""
    if samples.size <= _STRIDE_LONG + _SMOOTHING_TAPS or rms <= _EPS:
        return 0.0

    smoothed = np.convolve(samples, _SMOOTHING_KERNEL, mode="valid")
    high = _mean_abs_diff(samples, _STRIDE_SHORT)
    mid = _mean_abs_diff(smoothed, _STRIDE_MEDIUM)
    low = _mean_abs_diff(smoothed, _STRIDE_LONG)
    total = high + mid + low
    if total <= _EPS:
        return 0.0

    mid_ratio = mid / total
    short_diffs = np.abs(samples[_STRIDE_SHORT:] - samples[:-_STRIDE_SHORT])
    variation = float(np.std(short_diffs)) / rms

    mid_score = _clip_unit((mid_ratio - _MID_RATIO_FLOOR) / (_MID_RATIO_FULL_SCALE - _MID_RATIO_FLOOR))
    variation_score = _clip_unit(variation / _VARIATION_FULL_SCALE)
    return float(_clip_unit(_MID_WEIGHT * mid_score + _VARIATION_WEIGHT * variation_score))


class VoiceActivityDetector:
    def __init__(self, settings: VadSettings | None = None) -> None:
        self._settings = settings or VadSettings()
        self._history = EnergyProfile(capacity=self._settings.history_size)
        self._threshold = float(self._settings.initial_threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def history(self) -> EnergyProfile:
        return self._history

    def reset(self) -> None:
        self._history.clear()
        self._threshold = float(self._settings.initial_threshold)

    def _recompute_threshold(self) -> float:
        s = self._settings
        if len(self._history) < s.min_history:
            return float(s.initial_threshold)
        noise_floor = self._history.percentile(s.noise_percentile)
        median = self._history.median()
        dynamic = noise_floor + s.median_fraction * (median - noise_floor)
        return float(min(s.max_threshold, max(s.min_threshold, dynamic)))

    def classify(self, chunk: bytes) -> VadResult:
        s = self._settings
        samples = decode_samples(chunk, s.sample_format)
        if samples.size < s.min_samples:
            return VadResult(is_speech=False, energy_level=0.0, confidence=0.0, threshold=self._threshold)

        energy = float(min(1.0, np.sqrt(np.mean(samples * samples))))
        self._history.add(energy)
        self._threshold = self._recompute_threshold()

        confidence = voice_confidence(samples, energy)
        threshold = self._threshold
        is_speech = (energy > threshold and confidence > s.low_confidence) or (
            energy > s.quiet_energy_fraction * threshold and confidence > s.high_confidence
        )
        return VadResult(
            is_speech=bool(is_speech),
            energy_level=energy,
            confidence=confidence,
            threshold=threshold,
        )


__all__ = ["VoiceActivityDetector", "voice_confidence"]
