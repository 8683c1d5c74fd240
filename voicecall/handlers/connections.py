"""Socket admission for the call server."""

from __future__ import annotations

import time
import asyncio
import logging
from typing import Any
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Cap the number of concurrently admitted sockets.

    Only admission bookkeeping lives here. Each call's session is owned by its
    connection handler and is never registered globally.
    """

    def __init__(self, *, max_connections: int, now_fn: Callable[[], float] | None = None) -> None:
        self.max_connections = max(1, int(max_connections))
        self._now = now_fn or time.monotonic
        self._admitted: dict[int, float] = {}
        self._lock = asyncio.Lock()

    @property
    def count(self) -> int:
        return len(self._admitted)

    async def admit(self, ws: Any) -> bool:
        async with self._lock:
            if id(ws) in self._admitted:
                return True
            if len(self._admitted) >= self.max_connections:
                logger.warning("admission refused: %d/%d sockets in use", len(self._admitted), self.max_connections)
                return False
            self._admitted[id(ws)] = self._now()
            return True

    async def release(self, ws: Any) -> float | None:
        """Forget `ws`. Returns how long it was admitted, or None if it never was."""
        async with self._lock:
            admitted_at = self._admitted.pop(id(ws), None)
        if admitted_at is None:
            return None
        return self._now() - admitted_at

    def snapshot(self) -> dict[str, int]:
        return {"connected_clients": self.count, "max_connections": self.max_connections}


__all__ = ["ConnectionManager"]
