"""Per-attempt request tracking (dataclasses only)."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from .cancellation import CancellationToken


@dataclass(slots=True)
class RequestContext:
    request_id: str
    token: CancellationToken = field(default_factory=CancellationToken)
    is_processing: bool = False
    started_at: float = field(default_factory=time.monotonic)

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.started_at) * 1000


__all__ = ["RequestContext"]
