"""Client message parsing/validation for the call envelope."""

from __future__ import annotations

import base64
import binascii
from typing import Any

import orjson

from voicecall.errors import MalformedInputError
from voicecall.config.websocket import WS_KEY_TYPE, WS_KEY_PAYLOAD, WS_KEY_REQUEST_ID, WS_KEY_SESSION_ID


def _optional_str(msg: dict[str, Any], key: str) -> str | None:
    value = msg.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"message '{key}' must be a string")
    return value.strip() or None


def parse_client_message(raw: str | bytes) -> dict[str, Any]:
    try:
        msg = orjson.loads(raw)
    except Exception as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc

    if not isinstance(msg, dict):
        raise ValueError("message must be a JSON object")

    msg_type = msg.get(WS_KEY_TYPE)
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise ValueError("message missing non-empty 'type'")

    payload = msg.get(WS_KEY_PAYLOAD, {})
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValueError("message 'payload' must be an object")

    # Normalize
    msg[WS_KEY_TYPE] = msg_type.strip()
    msg[WS_KEY_SESSION_ID] = _optional_str(msg, WS_KEY_SESSION_ID)
    msg[WS_KEY_REQUEST_ID] = _optional_str(msg, WS_KEY_REQUEST_ID)
    msg[WS_KEY_PAYLOAD] = payload
    return msg


def decode_audio_payload(payload: dict[str, Any], *, max_bytes: int = 0) -> bytes:
    audio = payload.get("audio")
    if not isinstance(audio, str) or not audio.strip():
        raise MalformedInputError(reason_code="missing_audio", message="payload.audio (base64) is required")
    try:
        data = base64.b64decode(audio, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedInputError(reason_code="invalid_audio", message="payload.audio is not valid base64") from exc
    if not data:
        raise MalformedInputError(reason_code="missing_audio", message="payload.audio decoded to zero bytes")
    if max_bytes > 0 and len(data) > max_bytes:
        raise MalformedInputError(
            reason_code="audio_too_large",
            message=f"payload.audio exceeds {max_bytes} bytes",
        )
    return data


def parse_sequence_number(payload: dict[str, Any], default: int) -> int:
    value = payload.get("sequence_number")
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(reason_code="invalid_sequence_number", message="sequence_number must be an integer")
    return value


def parse_timestamp(payload: dict[str, Any], default: float) -> float:
    value = payload.get("timestamp")
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInputError(reason_code="invalid_timestamp", message="timestamp must be a number")
    return float(value)


__all__ = ["decode_audio_payload", "parse_client_message", "parse_sequence_number", "parse_timestamp"]
