"""The three remote stages of a response pipeline.

Each stage receives the request context explicitly and checks its token
before doing work. Transcription and synthesis have no native cancel; their
results are simply dropped by the caller if the request was superseded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from voicecall.errors import TransientServiceError
from voicecall.state.models import Transcript
from voicecall.services.contracts import Completer, Synthesizer, Transcriber

from .context import RequestContext
from .artifacts import ArtifactStore

logger = logging.getLogger(__name__)


async def transcribe_stage(
    ctx: RequestContext,
    audio: bytes,
    *,
    audio_format: str,
    transcriber: Transcriber,
    artifacts: ArtifactStore,
) -> Transcript:
    ctx.token.raise_if_cancelled()
    path = await asyncio.to_thread(artifacts.write, ctx.request_id, audio, audio_format=audio_format)
    try:
        return await transcriber.transcribe(path)
    finally:
        await asyncio.to_thread(artifacts.discard, path)


def is_usable_transcript(transcript: Transcript, *, min_confidence: float) -> bool:
    if not transcript.text.strip():
        return False
    if transcript.confidence is not None and transcript.confidence < min_confidence:
        return False
    return True


async def complete_stage(ctx: RequestContext, messages: list[dict[str, Any]], *, completer: Completer) -> str:
    ctx.token.raise_if_cancelled()
    return await completer.complete(messages, ctx.token)


async def synthesize_stage(ctx: RequestContext, text: str, *, synthesizer: Synthesizer) -> bytes | None:
    """Return synthesized audio, or None when synthesis fails (text-only reply)."""
    ctx.token.raise_if_cancelled()
    try:
        return await synthesizer.synthesize(text)
    except TransientServiceError as exc:
        logger.warning("synthesis failed request_id=%s; replying text-only: %s", ctx.request_id, exc)
        return None


__all__ = ["complete_stage", "is_usable_transcript", "synthesize_stage", "transcribe_stage"]
