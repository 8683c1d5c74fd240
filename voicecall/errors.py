"""Shared error types for the voice-call server."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TransientServiceError(Exception):
    """Raised when a remote speech or language service call fails."""

    service: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.service} failed ({self.status_code}): {self.message}"
        return f"{self.service} failed: {self.message}"


@dataclass(frozen=True, slots=True)
class MalformedInputError(Exception):
    """Raised when a client payload is missing or cannot be decoded."""

    reason_code: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class PipelineCancelledError(Exception):
    """Raised inside a pipeline stage once its cancellation token fires."""

    reason: str

    def __str__(self) -> str:
        return f"cancelled: {self.reason}"


@dataclass(frozen=True, slots=True)
class ConnectionLostError(Exception):
    """Raised when the transport is gone (heartbeat timeout or close)."""

    reason: str

    def __str__(self) -> str:
        return f"connection lost: {self.reason}"


__all__ = [
    "ConnectionLostError",
    "MalformedInputError",
    "PipelineCancelledError",
    "TransientServiceError",
]
