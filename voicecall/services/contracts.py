"""Interfaces for the remote speech and language services."""

from __future__ import annotations

from typing import Any, Protocol
from pathlib import Path
from dataclasses import dataclass

from voicecall.state.models import Transcript
from voicecall.pipeline.cancellation import CancellationToken


class Transcriber(Protocol):
    async def transcribe(self, audio_path: Path) -> Transcript: ...


class Completer(Protocol):
    async def complete(self, messages: list[dict[str, Any]], token: CancellationToken) -> str: ...


class Synthesizer(Protocol):
    audio_format: str

    async def synthesize(self, text: str) -> bytes: ...


@dataclass(frozen=True, slots=True)
class ServiceClients:
    transcriber: Transcriber
    completer: Completer
    synthesizer: Synthesizer


__all__ = ["Completer", "ServiceClients", "Synthesizer", "Transcriber"]
