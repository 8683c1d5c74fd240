"""Outbound envelope encoding, protocol error replies and admission rejects."""

from __future__ import annotations

import logging
import contextlib
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from voicecall.errors import MalformedInputError
from voicecall.config.websocket import (
    WS_KEY_TYPE,
    WS_KEY_PAYLOAD,
    WS_KEY_REQUEST_ID,
    WS_KEY_SESSION_ID,
    WS_UNKNOWN_REQUEST_ID,
    WS_UNKNOWN_SESSION_ID,
    WS_ERROR_INVALID_PAYLOAD,
)

logger = logging.getLogger(__name__)


def error_payload(
    code: str,
    message: str,
    *,
    reason_code: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    merged = {"reason_code": reason_code} if reason_code else {}
    merged.update(details or {})
    return {"code": code, "message": message, "details": merged}


def build_envelope(
    msg_type: str,
    session_id: str | None,
    request_id: str | None,
    payload: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Outbound ids are never null; clients get "unknown" for missing ones."""
    return {
        WS_KEY_TYPE: msg_type,
        WS_KEY_SESSION_ID: session_id or WS_UNKNOWN_SESSION_ID,
        WS_KEY_REQUEST_ID: request_id or WS_UNKNOWN_REQUEST_ID,
        WS_KEY_PAYLOAD: payload or {},
    }


async def safe_send_envelope(
    ws: WebSocket,
    *,
    msg_type: str,
    session_id: str | None,
    request_id: str | None,
    payload: dict[str, Any] | None = None,
) -> bool:
    """Send one envelope. Returns False instead of raising once the peer is gone."""
    text = orjson.dumps(build_envelope(msg_type, session_id, request_id, payload)).decode("utf-8")
    try:
        await ws.send_text(text)
        return True
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("dropping %s envelope; send failed", msg_type, exc_info=True)
        return False


async def send_error(
    ws: WebSocket,
    *,
    session_id: str | None,
    request_id: str | None,
    error_code: str,
    message: str,
    reason_code: str | None = None,
    details: dict[str, Any] | None = None,
) -> bool:
    return await safe_send_envelope(
        ws,
        msg_type="error",
        session_id=session_id,
        request_id=request_id,
        payload=error_payload(error_code, message, reason_code=reason_code, details=details),
    )


async def send_malformed(
    ws: WebSocket,
    exc: MalformedInputError,
    *,
    session_id: str | None,
    request_id: str | None,
) -> bool:
    return await send_error(
        ws,
        session_id=session_id,
        request_id=request_id,
        error_code=WS_ERROR_INVALID_PAYLOAD,
        message=exc.message,
        reason_code=exc.reason_code,
    )


async def reject_connection(ws: WebSocket, *, error_code: str, message: str, close_code: int) -> None:
    # The handshake has to complete before the client can read why it was turned away.
    try:
        await ws.accept()
    except Exception:
        logger.debug("reject: accept failed", exc_info=True)
        return
    await send_error(ws, session_id=None, request_id=None, error_code=error_code, message=message, reason_code=error_code)
    with contextlib.suppress(Exception):
        await ws.close(code=close_code, reason=message)


__all__ = [
    "build_envelope",
    "error_payload",
    "reject_connection",
    "safe_send_envelope",
    "send_error",
    "send_malformed",
]
