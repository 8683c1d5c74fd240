"""Per-socket entry point: admission, call wiring and teardown."""

from __future__ import annotations

import time
import logging
import contextlib

from fastapi import WebSocket

from voicecall.state.runtime import RuntimeDeps
from voicecall.config.websocket import WS_CLOSE_BUSY_CODE, WS_ERROR_SERVER_AT_CAPACITY

from .errors import reject_connection
from .lifecycle import WebSocketLifecycle
from .message_loop import run_message_loop
from .connection import CallConnection, open_call_connection

logger = logging.getLogger(__name__)

_AT_CAPACITY_MESSAGE = "Server is at capacity. Please try again later."


def _build_lifecycle(conn: CallConnection, runtime_deps: RuntimeDeps) -> WebSocketLifecycle:
    ws_settings = runtime_deps.settings.websocket

    async def send_heartbeat() -> bool:
        return await conn.send("heartbeat", None, {"ts": time.time()})

    return WebSocketLifecycle(
        conn.ws,
        send_heartbeat=send_heartbeat,
        on_expire=conn.expire,
        is_busy_fn=lambda: conn.coordinator.busy,
        idle_timeout_s=ws_settings.idle_timeout_s,
        watchdog_tick_s=ws_settings.watchdog_tick_s,
        max_connection_duration_s=ws_settings.max_connection_duration_s,
        heartbeat_interval_s=ws_settings.heartbeat_interval_s,
        heartbeat_timeout_s=ws_settings.heartbeat_timeout_s,
    )


async def _serve_call(ws: WebSocket, runtime_deps: RuntimeDeps) -> tuple[str, str]:
    conn = open_call_connection(ws, runtime_deps)
    lifecycle = _build_lifecycle(conn, runtime_deps)
    conn.lifecycle = lifecycle
    lifecycle.start()
    logger.info(
        "connection open session_id=%s active=%d",
        conn.session.session_id,
        runtime_deps.connections.count,
    )
    try:
        reason = await run_message_loop(conn, lifecycle, runtime_deps)
    finally:
        with contextlib.suppress(Exception):
            await lifecycle.stop()
    return conn.session.session_id, reason


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    connections = runtime_deps.connections
    if not await connections.admit(ws):
        await reject_connection(
            ws,
            error_code=WS_ERROR_SERVER_AT_CAPACITY,
            message=_AT_CAPACITY_MESSAGE,
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return

    session_id: str | None = None
    reason = "connection_lost"
    try:
        await ws.accept()
        session_id, reason = await _serve_call(ws, runtime_deps)
    finally:
        held_s = await connections.release(ws)
        logger.info(
            "connection closed session_id=%s reason=%s held_s=%.1f active=%d",
            session_id,
            reason,
            held_s or 0.0,
            connections.count,
        )


__all__ = ["handle_websocket_connection"]
