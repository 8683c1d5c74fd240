"""Dispatch handlers for WebSocket JSON envelope messages."""

from __future__ import annotations

import time
import uuid
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

from voicecall.session import SessionState
from voicecall.state.models import AudioChunk
from voicecall.errors import MalformedInputError
from voicecall.state.runtime import RuntimeDeps
from voicecall.pipeline.artifacts import PCM_FORMAT
from voicecall.config.websocket import WS_ERROR_INVALID_STATE, WS_CLOSE_CLIENT_REQUEST_CODE

from .errors import send_error, send_malformed
from .connection import CallConnection
from .parser import parse_timestamp, decode_audio_payload, parse_sequence_number

logger = logging.getLogger(__name__)

# Returns False when the connection should close.
HandlerFn = Callable[[RuntimeDeps, CallConnection, str | None, dict[str, Any]], Awaitable[bool]]


def _new_request_id() -> str:
    return uuid.uuid4().hex


async def _require_active(conn: CallConnection, request_id: str | None) -> bool:
    if conn.session.is_active:
        return True
    if conn.session.state is SessionState.IDLE:
        message, reason_code = "call not started; send call_start first", "call_not_started"
    else:
        message, reason_code = "call has ended", "call_ended"
    await send_error(
        conn.ws,
        session_id=conn.session.session_id,
        request_id=request_id,
        error_code=WS_ERROR_INVALID_STATE,
        message=message,
        reason_code=reason_code,
    )
    return False


async def _handle_call_start(
    _runtime_deps: RuntimeDeps,
    conn: CallConnection,
    request_id: str | None,
    _payload: dict[str, Any],
) -> bool:
    if conn.session.state is not SessionState.IDLE:
        await send_error(
            conn.ws,
            session_id=conn.session.session_id,
            request_id=request_id,
            error_code=WS_ERROR_INVALID_STATE,
            message=f"call already {conn.session.state.value}",
            reason_code="call_already_started",
        )
        return True
    conn.session.start()
    await conn.send("call_started", request_id, {"session_id": conn.session.session_id})
    return True


async def _handle_call_end(
    _runtime_deps: RuntimeDeps,
    conn: CallConnection,
    request_id: str | None,
    _payload: dict[str, Any],
) -> bool:
    await conn.release("client_request")
    await conn.send(
        "call_ended",
        request_id,
        {
            "reason": conn.session.end_reason,
            "duration_s": round(conn.session.duration_s(), 3),
            "turns": len(conn.session.history),
        },
    )
    with contextlib.suppress(Exception):
        await conn.ws.close(code=WS_CLOSE_CLIENT_REQUEST_CODE)
    return False


async def _handle_audio_chunk(
    _runtime_deps: RuntimeDeps,
    conn: CallConnection,
    request_id: str | None,
    payload: dict[str, Any],
) -> bool:
    if not await _require_active(conn, request_id):
        return True
    try:
        data = decode_audio_payload(payload)
        sequence_number = parse_sequence_number(payload, conn.next_sequence)
        timestamp = parse_timestamp(payload, time.time())
    except MalformedInputError as exc:
        await send_malformed(conn.ws, exc, session_id=conn.session.session_id, request_id=request_id)
        return True

    conn.next_sequence = max(conn.next_sequence, sequence_number + 1)
    decision = conn.segmenter.process(AudioChunk(data=data, sequence_number=sequence_number, timestamp=timestamp))
    await conn.send(
        "vad_status",
        request_id,
        {
            "is_speaking": decision.vad.is_speech,
            "energy_level": round(decision.vad.energy_level, 5),
            "threshold": round(decision.vad.threshold, 5),
            "confidence": round(decision.vad.confidence, 3),
        },
    )

    if decision.flushed is not None:
        pipeline_request_id = _new_request_id()
        logger.info(
            "utterance complete session_id=%s request_id=%s reason=%s chunks=%d",
            conn.session.session_id,
            pipeline_request_id,
            decision.reason,
            decision.chunk_count,
        )
        conn.coordinator.spawn(decision.flushed, pipeline_request_id, audio_format=PCM_FORMAT)
    return True


async def _handle_audio_complete(
    runtime_deps: RuntimeDeps,
    conn: CallConnection,
    request_id: str | None,
    payload: dict[str, Any],
) -> bool:
    if not await _require_active(conn, request_id):
        return True
    try:
        data = decode_audio_payload(payload, max_bytes=runtime_deps.settings.limits.max_utterance_audio_bytes)
    except MalformedInputError as exc:
        await send_malformed(conn.ws, exc, session_id=conn.session.session_id, request_id=request_id)
        return True

    audio_format = payload.get("format")
    if not isinstance(audio_format, str) or not audio_format.strip():
        audio_format = PCM_FORMAT
    conn.coordinator.spawn(data, request_id or _new_request_id(), audio_format=audio_format.strip().lower())
    return True


async def _handle_interrupt(
    _runtime_deps: RuntimeDeps,
    conn: CallConnection,
    request_id: str | None,
    _payload: dict[str, Any],
) -> bool:
    if not await _require_active(conn, request_id):
        return True
    current = conn.coordinator.current
    cancelled = conn.coordinator.interrupt()
    await conn.send(
        "ai_interrupted",
        request_id,
        {"cancelled": cancelled, "cancelled_request_id": current.request_id if cancelled and current else None},
    )
    return True


async def _handle_heartbeat_ack(
    _runtime_deps: RuntimeDeps,
    conn: CallConnection,
    _request_id: str | None,
    _payload: dict[str, Any],
) -> bool:
    if conn.lifecycle is not None:
        conn.lifecycle.ack_heartbeat()
    return True


HANDLERS: dict[str, HandlerFn] = {
    "call_start": _handle_call_start,
    "call_end": _handle_call_end,
    "audio_chunk": _handle_audio_chunk,
    "audio_complete": _handle_audio_complete,
    "interrupt": _handle_interrupt,
    "heartbeat_ack": _handle_heartbeat_ack,
}

__all__ = ["HANDLERS", "HandlerFn"]
