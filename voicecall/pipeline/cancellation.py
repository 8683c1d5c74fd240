"""Cooperative cancellation for pipeline stages."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TypeVar
from collections.abc import Awaitable

from voicecall.errors import PipelineCancelledError

T = TypeVar("T")


class CancellationToken:
    """One-shot cancel signal handed explicitly to every pipeline stage."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> bool:
        if self._event.is_set():
            return False
        self.reason = reason
        self._event.set()
        return True

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelledError(reason=self.reason or "cancelled")

    async def wait(self) -> None:
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable`, aborting it if the token fires first."""
        self.raise_if_cancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work.done():
            return work.result()

        work.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await work
        raise PipelineCancelledError(reason=self.reason or "cancelled")


__all__ = ["CancellationToken"]
