"""Admission control configuration (env-resolved constants only)."""

from __future__ import annotations

import os

_MAX_CONCURRENT_CONNECTIONS_RAW = (os.getenv("MAX_CONCURRENT_CONNECTIONS") or "").strip()
try:
    MAX_CONCURRENT_CONNECTIONS: int = int(_MAX_CONCURRENT_CONNECTIONS_RAW) if _MAX_CONCURRENT_CONNECTIONS_RAW else 100
except Exception:
    MAX_CONCURRENT_CONNECTIONS = 100
MAX_CONCURRENT_CONNECTIONS = max(1, int(MAX_CONCURRENT_CONNECTIONS))

# Upper bound on a single audio_complete payload. Full utterances recorded
# client-side are usually a few hundred KB of compressed audio.
_MAX_UTTERANCE_AUDIO_BYTES_RAW = (os.getenv("MAX_UTTERANCE_AUDIO_BYTES") or "").strip()
try:
    MAX_UTTERANCE_AUDIO_BYTES: int = (
        int(_MAX_UTTERANCE_AUDIO_BYTES_RAW) if _MAX_UTTERANCE_AUDIO_BYTES_RAW else 25 * 1024 * 1024
    )
except Exception:
    MAX_UTTERANCE_AUDIO_BYTES = 25 * 1024 * 1024
MAX_UTTERANCE_AUDIO_BYTES = max(0, int(MAX_UTTERANCE_AUDIO_BYTES))

__all__ = ["MAX_CONCURRENT_CONNECTIONS", "MAX_UTTERANCE_AUDIO_BYTES"]
