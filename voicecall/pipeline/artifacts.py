"""Transient on-disk audio handed to transcription."""

from __future__ import annotations

import re
import time
import logging
import contextlib
from pathlib import Path

from voicecall.audio.pcm import wrap_wav

logger = logging.getLogger(__name__)

PCM_FORMAT = "pcm"

_SAFE_NAME = re.compile(r"[^A-Za-z0-9_.-]+")


class ArtifactStore:
    def __init__(
        self,
        directory: Path,
        *,
        keep: bool = False,
        sample_rate_hz: int = 16000,
        sample_format: str = "pcm16",
    ) -> None:
        self.directory = Path(directory)
        self.keep = bool(keep)
        self._sample_rate_hz = int(sample_rate_hz)
        self._sample_format = sample_format

    def write(self, request_id: str, audio: bytes, *, audio_format: str = PCM_FORMAT) -> Path:
        """Persist one utterance. Raw PCM is wrapped as WAV; anything else is written as-is."""
        self.directory.mkdir(parents=True, exist_ok=True)
        if audio_format == PCM_FORMAT:
            data = wrap_wav(audio, sample_rate_hz=self._sample_rate_hz, sample_format=self._sample_format)
            suffix = "wav"
        else:
            data = audio
            suffix = _SAFE_NAME.sub("", audio_format.lower()) or "bin"
        stamp = time.strftime("%Y%m%dT%H%M%S")
        name = _SAFE_NAME.sub("_", f"utterance_{stamp}_{request_id}")
        path = self.directory / f"{name}.{suffix}"
        path.write_bytes(data)
        logger.debug("audio artifact written path=%s bytes=%d", path, len(data))
        return path

    def discard(self, path: Path) -> None:
        if self.keep:
            return
        with contextlib.suppress(FileNotFoundError):
            path.unlink()


__all__ = ["ArtifactStore", "PCM_FORMAT"]
