"""Service credentials."""

from __future__ import annotations

import os

ASSEMBLYAI_API_KEY: str = (os.getenv("ASSEMBLYAI_API_KEY") or "").strip()
GROQ_API_KEY: str = (os.getenv("GROQ_API_KEY") or "").strip()
GOOGLE_TTS_API_KEY: str = (os.getenv("GOOGLE_TTS_API_KEY") or "").strip()

__all__ = ["ASSEMBLYAI_API_KEY", "GOOGLE_TTS_API_KEY", "GROQ_API_KEY"]
