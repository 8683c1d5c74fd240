"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from voicecall.state.settings import AppSettings
    from voicecall.services.contracts import ServiceClients
    from voicecall.pipeline.artifacts import ArtifactStore
    from voicecall.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    connections: ConnectionManager
    services: ServiceClients
    artifacts: ArtifactStore
    settings: AppSettings
    _http_client: Any = None

    async def shutdown(self) -> None:
        if self._http_client is None:
            return
        try:
            await self._http_client.aclose()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
