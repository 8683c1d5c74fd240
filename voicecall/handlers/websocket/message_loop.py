"""WebSocket message loop for one call connection."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from voicecall.errors import ConnectionLostError
from voicecall.state.runtime import RuntimeDeps
from voicecall.config.websocket import WS_ERROR_INVALID_MESSAGE

from .dispatch import HANDLERS
from .errors import send_error
from .parser import parse_client_message
from .connection import CallConnection
from .lifecycle import WebSocketLifecycle

logger = logging.getLogger(__name__)


async def _recv_text_with_watchdog(
    ws: WebSocket,
    lifecycle: WebSocketLifecycle,
    *,
    timeout_s: float,
) -> str | None:
    try:
        return await asyncio.wait_for(ws.receive_text(), timeout=timeout_s)
    except TimeoutError:
        if lifecycle.should_close():
            raise ConnectionLostError(reason=lifecycle.close_reason or "watchdog") from None
        return None


async def _parse_or_send_error(conn: CallConnection, raw: str) -> dict[str, Any] | None:
    try:
        return parse_client_message(raw)
    except ValueError as exc:
        await send_error(
            conn.ws,
            session_id=conn.session.session_id,
            request_id=None,
            error_code=WS_ERROR_INVALID_MESSAGE,
            message=str(exc),
            reason_code="invalid_message",
        )
        return None


async def run_message_loop(
    conn: CallConnection,
    lifecycle: WebSocketLifecycle,
    runtime_deps: RuntimeDeps,
) -> str:
    """Process client messages until the call ends. Returns the end reason."""
    ws = conn.ws
    receive_timeout_s = max(0.05, runtime_deps.settings.websocket.watchdog_tick_s * 2)
    try:
        while True:
            raw = await _recv_text_with_watchdog(ws, lifecycle, timeout_s=receive_timeout_s)
            if raw is None:
                continue

            lifecycle.touch()
            conn.session.touch()

            msg = await _parse_or_send_error(conn, raw)
            if msg is None:
                continue

            msg_type = msg["type"]
            request_id = msg["request_id"]
            payload = msg["payload"] or {}

            if msg_type == "ping":
                await conn.send("pong", request_id, {})
                continue

            handler = HANDLERS.get(msg_type)
            if handler is not None:
                if not await handler(runtime_deps, conn, request_id, payload):
                    return conn.session.end_reason or "client_request"
                continue

            await send_error(
                ws,
                session_id=conn.session.session_id,
                request_id=request_id,
                error_code=WS_ERROR_INVALID_MESSAGE,
                message=f"message type '{msg_type}' is not supported",
                reason_code="unknown_message_type",
            )
    except ConnectionLostError as exc:
        return exc.reason
    except WebSocketDisconnect:
        return "connection_lost"
    except RuntimeError:
        # Starlette raises RuntimeError when receiving on a socket the watchdog already closed.
        logger.debug("receive on closed socket", exc_info=True)
        return lifecycle.close_reason or "connection_lost"
    finally:
        await conn.release(lifecycle.close_reason or "connection_lost")


__all__ = ["run_message_loop"]
