"""Per-connection WebSocket lifecycle helpers (heartbeat and idle enforcement)."""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

from voicecall.config.websocket import (
    WS_IDLE_TIMEOUT_S,
    WS_CLOSE_IDLE_CODE,
    WS_WATCHDOG_TICK_S,
    WS_CLOSE_IDLE_REASON,
    WS_HEARTBEAT_TIMEOUT_S,
    WS_CLOSE_HEARTBEAT_CODE,
    WS_HEARTBEAT_INTERVAL_S,
    WS_CLOSE_HEARTBEAT_REASON,
    WS_CLOSE_MAX_DURATION_CODE,
    WS_CLOSE_MAX_DURATION_REASON,
    WS_MAX_CONNECTION_DURATION_S,
)

logger = logging.getLogger(__name__)

END_HEARTBEAT_TIMEOUT = "heartbeat_timeout"
END_IDLE_TIMEOUT = "idle_timeout"
END_MAX_DURATION = "max_duration"


class WebSocketLifecycle:
    """Watchdog task for one connection.

    Sends a heartbeat every `heartbeat_interval_s`. A heartbeat left without
    an ack for `heartbeat_timeout_s` means the transport is dead: `on_expire`
    runs (the session moves to ENDING) and the socket is closed. Idle timeout
    and max connection duration are enforced the same way.
    """

    def __init__(
        self,
        websocket: Any,
        *,
        send_heartbeat: Callable[[], Awaitable[Any]] | None = None,
        on_expire: Callable[[str], None] | None = None,
        is_busy_fn: Callable[[], bool] | None = None,
        idle_timeout_s: float | None = None,
        watchdog_tick_s: float | None = None,
        max_connection_duration_s: float | None = None,
        heartbeat_interval_s: float | None = None,
        heartbeat_timeout_s: float | None = None,
        now_fn: Callable[[], float] | None = None,
    ) -> None:
        self._ws = websocket
        self._send_heartbeat = send_heartbeat
        self._on_expire = on_expire
        self._is_busy_fn = is_busy_fn or (lambda: False)
        self._idle_timeout_s = float(WS_IDLE_TIMEOUT_S if idle_timeout_s is None else idle_timeout_s)
        self._watchdog_tick_s = float(WS_WATCHDOG_TICK_S if watchdog_tick_s is None else watchdog_tick_s)
        self._max_connection_duration_s = float(
            WS_MAX_CONNECTION_DURATION_S if max_connection_duration_s is None else max_connection_duration_s
        )
        self._heartbeat_interval_s = float(
            WS_HEARTBEAT_INTERVAL_S if heartbeat_interval_s is None else heartbeat_interval_s
        )
        self._heartbeat_timeout_s = float(WS_HEARTBEAT_TIMEOUT_S if heartbeat_timeout_s is None else heartbeat_timeout_s)
        self._now = now_fn or time.monotonic
        self._connection_start = self._now()
        self._last_activity = self._connection_start
        self._last_heartbeat_sent = self._connection_start
        self._awaiting_ack_since: float | None = None
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.close_reason: str | None = None

    @property
    def heartbeat_pending(self) -> bool:
        return self._awaiting_ack_since is not None

    def touch(self) -> None:
        self._last_activity = self._now()

    def ack_heartbeat(self) -> None:
        self._awaiting_ack_since = None

    def should_close(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        if self._task is not asyncio.current_task():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await self._task
        self._task = None

    async def _expire(self, end_reason: str, code: int, reason: str) -> None:
        self.close_reason = end_reason
        self._stop_event.set()
        if self._on_expire is not None:
            try:
                self._on_expire(end_reason)
            except Exception:
                logger.exception("lifecycle expire callback failed")
        with contextlib.suppress(Exception):
            await self._ws.close(code=code, reason=reason)

    async def _maybe_send_heartbeat(self, now: float) -> None:
        if self._heartbeat_interval_s <= 0 or self._send_heartbeat is None:
            return
        if (now - self._last_heartbeat_sent) < self._heartbeat_interval_s:
            return
        self._last_heartbeat_sent = now
        if self._awaiting_ack_since is None:
            self._awaiting_ack_since = now
        with contextlib.suppress(Exception):
            await self._send_heartbeat()

    async def check(self) -> bool:
        """Run one watchdog pass. Returns True once the connection was closed."""
        now = self._now()
        if self._max_connection_duration_s > 0 and (now - self._connection_start) >= self._max_connection_duration_s:
            logger.info("WebSocket max duration reached; closing connection")
            await self._expire(END_MAX_DURATION, WS_CLOSE_MAX_DURATION_CODE, WS_CLOSE_MAX_DURATION_REASON)
            return True

        if (
            self._heartbeat_timeout_s > 0
            and self._awaiting_ack_since is not None
            and (now - self._awaiting_ack_since) >= self._heartbeat_timeout_s
        ):
            logger.info("WebSocket heartbeat unacknowledged for %.1fs; closing connection", now - self._awaiting_ack_since)
            await self._expire(END_HEARTBEAT_TIMEOUT, WS_CLOSE_HEARTBEAT_CODE, WS_CLOSE_HEARTBEAT_REASON)
            return True

        await self._maybe_send_heartbeat(now)

        if self._is_busy_fn():
            return False
        if self._idle_timeout_s > 0 and (now - self._last_activity) >= self._idle_timeout_s:
            logger.info("WebSocket idle timeout reached; closing connection")
            await self._expire(END_IDLE_TIMEOUT, WS_CLOSE_IDLE_CODE, WS_CLOSE_IDLE_REASON)
            return True
        return False

    async def _watchdog_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._watchdog_tick_s)
                if self._stop_event.is_set():
                    break
                if await self.check():
                    break
        except asyncio.CancelledError:
            return
        except Exception:
            logger.debug("watchdog exiting due to unexpected error", exc_info=True)


__all__ = ["END_HEARTBEAT_TIMEOUT", "END_IDLE_TIMEOUT", "END_MAX_DURATION", "WebSocketLifecycle"]
