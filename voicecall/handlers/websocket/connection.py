"""Everything one WebSocket connection owns for the lifetime of its call."""

from __future__ import annotations

import logging
from typing import Any
from dataclasses import dataclass

from fastapi import WebSocket

from voicecall.session import CallSession
from voicecall.state.runtime import RuntimeDeps
from voicecall.pipeline.coordinator import RequestCoordinator
from voicecall.audio import UtteranceSegmenter, VoiceActivityDetector

from .errors import safe_send_envelope
from .lifecycle import WebSocketLifecycle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CallConnection:
    ws: WebSocket
    session: CallSession
    segmenter: UtteranceSegmenter
    coordinator: RequestCoordinator
    lifecycle: WebSocketLifecycle | None = None
    next_sequence: int = 0

    async def send(self, msg_type: str, request_id: str | None = None, payload: dict[str, Any] | None = None) -> bool:
        return await safe_send_envelope(
            self.ws,
            msg_type=msg_type,
            session_id=self.session.session_id,
            request_id=request_id,
            payload=payload,
        )

    def expire(self, reason: str) -> None:
        """End the call without awaiting (used from the watchdog)."""
        if self.session.end(reason):
            self.segmenter.reset()
            self.coordinator.cancel(reason=reason)

    async def release(self, reason: str) -> None:
        self.session.end(reason)
        self.segmenter.reset()
        await self.coordinator.aclose()


def open_call_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> CallConnection:
    settings = runtime_deps.settings
    session = CallSession()

    async def emit(msg_type: str, request_id: str, payload: dict[str, Any]) -> bool:
        return await safe_send_envelope(
            ws,
            msg_type=msg_type,
            session_id=session.session_id,
            request_id=request_id,
            payload=payload,
        )

    segmenter = UtteranceSegmenter(detector=VoiceActivityDetector(settings.vad), settings=settings.segmenter)
    coordinator = RequestCoordinator(
        session=session,
        services=runtime_deps.services,
        emit=emit,
        artifacts=runtime_deps.artifacts,
        settings=settings,
    )
    return CallConnection(ws=ws, session=session, segmenter=segmenter, coordinator=coordinator)


__all__ = ["CallConnection", "open_call_connection"]
