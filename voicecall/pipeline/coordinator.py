"""Single in-flight response pipeline per call session."""

from __future__ import annotations

import base64
import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

from voicecall.session import CallSession
from voicecall.state.settings import AppSettings
from voicecall.services.contracts import ServiceClients
from voicecall.state.models import OutcomeStatus, PipelineOutcome
from voicecall.errors import PipelineCancelledError, TransientServiceError
from voicecall.config.websocket import WS_ERROR_INTERNAL, WS_ERROR_SERVICE_UNAVAILABLE

from .context import RequestContext
from .artifacts import PCM_FORMAT, ArtifactStore
from .stages import complete_stage, synthesize_stage, transcribe_stage, is_usable_transcript

logger = logging.getLogger(__name__)

# (msg_type, request_id, payload) -> delivered
EventSink = Callable[[str, str, dict[str, Any]], Awaitable[bool]]

CANCEL_INTERRUPT = "interrupt"
CANCEL_SUPERSEDED = "superseded"
CANCEL_SESSION_ENDED = "session_ended"


class RequestCoordinator:
    """Run transcribe -> complete -> synthesize for one session.

    At most one RequestContext is current. Starting a new one cancels the
    previous one, and a context that is no longer current never touches the
    session history or emits anything to the client.
    """

    def __init__(
        self,
        *,
        session: CallSession,
        services: ServiceClients,
        emit: EventSink,
        artifacts: ArtifactStore,
        settings: AppSettings,
    ) -> None:
        self._session = session
        self._services = services
        self._emit = emit
        self._artifacts = artifacts
        self._settings = settings
        self._current: RequestContext | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def current(self) -> RequestContext | None:
        return self._current

    @property
    def busy(self) -> bool:
        return self._current is not None and self._current.is_processing

    def is_current(self, ctx: RequestContext) -> bool:
        return ctx is self._current and not ctx.token.cancelled and not self._session.is_ending

    def _begin(self, request_id: str) -> RequestContext:
        previous = self._current
        if previous is not None:
            previous.token.cancel(CANCEL_SUPERSEDED)
            logger.info("request superseded request_id=%s by=%s", previous.request_id, request_id)
        ctx = RequestContext(request_id=request_id)
        self._current = ctx
        return ctx

    async def submit(self, audio: bytes, request_id: str, *, audio_format: str = PCM_FORMAT) -> PipelineOutcome:
        ctx = self._begin(request_id)
        return await self._run(ctx, audio, audio_format)

    def spawn(self, audio: bytes, request_id: str, *, audio_format: str = PCM_FORMAT) -> asyncio.Task:
        """Supersede now, run the pipeline in the background."""
        ctx = self._begin(request_id)
        task = asyncio.create_task(self._run(ctx, audio, audio_format), name=f"pipeline-{request_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel(self, request_id: str | None = None, *, reason: str = CANCEL_INTERRUPT) -> bool:
        ctx = self._current
        if ctx is None:
            return False
        if request_id is not None and ctx.request_id != request_id:
            return False
        ctx.token.cancel(reason)
        self._current = None
        logger.info("request cancelled request_id=%s reason=%s", ctx.request_id, reason)
        return True

    def interrupt(self) -> bool:
        return self.cancel(reason=CANCEL_INTERRUPT)

    async def aclose(self) -> None:
        self.cancel(reason=CANCEL_SESSION_ENDED)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._tasks.clear()

    def _ensure_current(self, ctx: RequestContext) -> None:
        if not self.is_current(ctx):
            raise PipelineCancelledError(reason=ctx.token.reason or CANCEL_SUPERSEDED)

    async def _emit_if_current(self, ctx: RequestContext, msg_type: str, payload: dict[str, Any]) -> bool:
        if not self.is_current(ctx):
            return False
        return await self._emit(msg_type, ctx.request_id, payload)

    async def _emit_error(self, ctx: RequestContext, code: str, message: str, details: dict[str, Any]) -> None:
        await self._emit_if_current(
            ctx,
            "stream_error",
            {"code": code, "message": message, "details": details},
        )

    async def _run(self, ctx: RequestContext, audio: bytes, audio_format: str) -> PipelineOutcome:
        ctx.is_processing = True
        try:
            await self._emit_if_current(ctx, "processing_started", {"audio_bytes": len(audio)})
            return await self._pipeline(ctx, audio, audio_format)
        except PipelineCancelledError as exc:
            logger.info("request abandoned request_id=%s reason=%s", ctx.request_id, exc.reason)
            return PipelineOutcome(request_id=ctx.request_id, status=OutcomeStatus.CANCELLED, error=exc.reason)
        except TransientServiceError as exc:
            logger.warning("pipeline failed request_id=%s: %s", ctx.request_id, exc)
            await self._emit_error(
                ctx,
                WS_ERROR_SERVICE_UNAVAILABLE,
                str(exc),
                {"reason_code": f"{exc.service}_failed", "service": exc.service},
            )
            return PipelineOutcome(request_id=ctx.request_id, status=OutcomeStatus.FAILED, error=str(exc))
        except Exception as exc:
            logger.exception("pipeline crashed request_id=%s", ctx.request_id)
            await self._emit_error(ctx, WS_ERROR_INTERNAL, "internal error", {"reason_code": "internal_error"})
            return PipelineOutcome(request_id=ctx.request_id, status=OutcomeStatus.FAILED, error=str(exc))
        finally:
            ctx.is_processing = False
            if self._current is ctx:
                self._current = None

    async def _pipeline(self, ctx: RequestContext, audio: bytes, audio_format: str) -> PipelineOutcome:
        settings = self._settings
        transcript = await transcribe_stage(
            ctx,
            audio,
            audio_format=audio_format,
            transcriber=self._services.transcriber,
            artifacts=self._artifacts,
        )
        self._ensure_current(ctx)

        fallback = not is_usable_transcript(transcript, min_confidence=settings.transcription.min_confidence)
        if fallback:
            logger.info("no usable speech request_id=%s; using fallback reply", ctx.request_id)
            self._session.append_user(settings.pipeline.fallback_user_text)
            reply = settings.pipeline.fallback_reply_text
        else:
            self._session.append_user(transcript.text)
            messages = self._session.completion_messages(
                settings.completion.system_prompt,
                max_messages=settings.completion.max_history_messages,
            )
            reply = await complete_stage(ctx, messages, completer=self._services.completer)
            self._ensure_current(ctx)

        self._session.append_assistant(reply)

        speech = await synthesize_stage(ctx, reply, synthesizer=self._services.synthesizer)
        self._ensure_current(ctx)

        payload: dict[str, Any] = {
            "transcription": transcript.text,
            "reply": reply,
            "audio": base64.b64encode(speech).decode("ascii") if speech is not None else None,
            "audio_format": self._services.synthesizer.audio_format if speech is not None else None,
            "degraded": speech is None,
            "fallback": fallback,
        }
        await self._emit_if_current(ctx, "stream_response", payload)
        logger.info(
            "response delivered request_id=%s elapsed_ms=%.0f degraded=%s fallback=%s",
            ctx.request_id,
            ctx.elapsed_ms(),
            speech is None,
            fallback,
        )
        return PipelineOutcome(
            request_id=ctx.request_id,
            status=OutcomeStatus.COMPLETED,
            transcription=transcript.text,
            reply=reply,
            audio=speech,
        )


__all__ = [
    "CANCEL_INTERRUPT",
    "CANCEL_SESSION_ENDED",
    "CANCEL_SUPERSEDED",
    "EventSink",
    "RequestCoordinator",
]
