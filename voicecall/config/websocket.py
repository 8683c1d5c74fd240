"""WebSocket protocol configuration and constants."""

from __future__ import annotations

import os

WS_ENDPOINT_PATH: str = (os.getenv("WS_ENDPOINT_PATH") or "").strip() or "/ws"

# Envelope keys
WS_KEY_TYPE = "type"
WS_KEY_SESSION_ID = "session_id"
WS_KEY_REQUEST_ID = "request_id"
WS_KEY_PAYLOAD = "payload"

WS_UNKNOWN_SESSION_ID = "unknown"
WS_UNKNOWN_REQUEST_ID = "unknown"

# Close codes
WS_CLOSE_CLIENT_REQUEST_CODE = 1000
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_HEARTBEAT_CODE = 4003
WS_CLOSE_MAX_DURATION_CODE = 4004

WS_CLOSE_IDLE_REASON = "idle timeout"
WS_CLOSE_HEARTBEAT_REASON = "heartbeat timeout"
WS_CLOSE_MAX_DURATION_REASON = "max connection duration"

# Watchdog / heartbeat
WS_IDLE_TIMEOUT_S = float(os.getenv("WS_IDLE_TIMEOUT_S", "150"))
WS_WATCHDOG_TICK_S = float(os.getenv("WS_WATCHDOG_TICK_S", "1"))
WS_MAX_CONNECTION_DURATION_S = float(os.getenv("WS_MAX_CONNECTION_DURATION_S", "5400"))
WS_HEARTBEAT_INTERVAL_S = float(os.getenv("WS_HEARTBEAT_INTERVAL_S", "5"))
WS_HEARTBEAT_TIMEOUT_S = float(os.getenv("WS_HEARTBEAT_TIMEOUT_S", "10"))

# Errors (payload.code values)
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"
WS_ERROR_INVALID_MESSAGE = "invalid_message"
WS_ERROR_INVALID_PAYLOAD = "invalid_payload"
WS_ERROR_INVALID_STATE = "invalid_state"
WS_ERROR_SERVICE_UNAVAILABLE = "service_unavailable"
WS_ERROR_INTERNAL = "internal_error"

__all__ = [
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_CLIENT_REQUEST_CODE",
    "WS_CLOSE_HEARTBEAT_CODE",
    "WS_CLOSE_HEARTBEAT_REASON",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_MAX_DURATION_CODE",
    "WS_CLOSE_MAX_DURATION_REASON",
    "WS_ENDPOINT_PATH",
    "WS_ERROR_INTERNAL",
    "WS_ERROR_INVALID_MESSAGE",
    "WS_ERROR_INVALID_PAYLOAD",
    "WS_ERROR_INVALID_STATE",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_ERROR_SERVICE_UNAVAILABLE",
    "WS_HEARTBEAT_INTERVAL_S",
    "WS_HEARTBEAT_TIMEOUT_S",
    "WS_IDLE_TIMEOUT_S",
    "WS_KEY_PAYLOAD",
    "WS_KEY_REQUEST_ID",
    "WS_KEY_SESSION_ID",
    "WS_KEY_TYPE",
    "WS_MAX_CONNECTION_DURATION_S",
    "WS_UNKNOWN_REQUEST_ID",
    "WS_UNKNOWN_SESSION_ID",
    "WS_WATCHDOG_TICK_S",
]
