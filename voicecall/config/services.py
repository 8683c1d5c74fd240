"""Remote speech/LLM service configuration (env-resolved constants only)."""

from __future__ import annotations

import os
from pathlib import Path

_DISABLED_VALUES = {"0", "none", "null", "disabled", "disable", "off", "false"}


def _get_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except Exception:
        return float(default)


def _get_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return bool(default)
    if raw in _DISABLED_VALUES:
        return False
    return raw in {"1", "true", "yes", "y", "on"}


# Speech-to-text (AssemblyAI REST).
STT_BASE_URL: str = (os.getenv("STT_BASE_URL") or "").strip() or "https://api.assemblyai.com/v2"
STT_SPEECH_MODEL: str = (os.getenv("STT_SPEECH_MODEL") or "").strip() or "best"
# Second attempt when the first one comes back empty.
STT_RELAXED_SPEECH_MODEL: str = (os.getenv("STT_RELAXED_SPEECH_MODEL") or "").strip() or "nano"
STT_RETRY_ON_EMPTY: bool = _get_bool("STT_RETRY_ON_EMPTY", True)
STT_POLL_INTERVAL_S: float = max(0.05, _get_float("STT_POLL_INTERVAL_S", 0.5))
STT_TIMEOUT_S: float = max(1.0, _get_float("STT_TIMEOUT_S", 60.0))
STT_MIN_CONFIDENCE: float = min(1.0, max(0.0, _get_float("STT_MIN_CONFIDENCE", 0.3)))

# Completion (Groq, OpenAI-compatible).
LLM_BASE_URL: str = (os.getenv("LLM_BASE_URL") or "").strip() or "https://api.groq.com/openai/v1"
LLM_MODEL: str = (os.getenv("LLM_MODEL") or "").strip() or "llama-3.1-8b-instant"
LLM_TEMPERATURE: float = _get_float("LLM_TEMPERATURE", 0.7)
# Short replies read well aloud.
LLM_MAX_TOKENS: int = max(1, int(_get_float("LLM_MAX_TOKENS", 150)))
LLM_TIMEOUT_S: float = max(1.0, _get_float("LLM_TIMEOUT_S", 30.0))
LLM_MAX_HISTORY_MESSAGES: int = max(0, int(_get_float("LLM_MAX_HISTORY_MESSAGES", 40)))
LLM_SYSTEM_PROMPT: str = (os.getenv("LLM_SYSTEM_PROMPT") or "").strip() or (
    "You are a helpful voice assistant. Provide clear, concise, and friendly responses to user queries."
)

# Text-to-speech (Google Cloud TTS REST).
TTS_BASE_URL: str = (os.getenv("TTS_BASE_URL") or "").strip() or "https://texttospeech.googleapis.com/v1"
TTS_LANGUAGE_CODE: str = (os.getenv("TTS_LANGUAGE_CODE") or "").strip() or "en-US"
TTS_VOICE_NAME: str = (os.getenv("TTS_VOICE_NAME") or "").strip() or "en-US-Standard-D"
TTS_AUDIO_ENCODING: str = (os.getenv("TTS_AUDIO_ENCODING") or "").strip().upper() or "MP3"
TTS_SPEAKING_RATE: float = _get_float("TTS_SPEAKING_RATE", 1.0)
TTS_TIMEOUT_S: float = max(1.0, _get_float("TTS_TIMEOUT_S", 30.0))

# Transient per-utterance audio files handed to transcription.
_ARTIFACT_DIR_RAW = (os.getenv("AUDIO_ARTIFACT_DIR") or "").strip()
AUDIO_ARTIFACT_DIR: Path = Path(_ARTIFACT_DIR_RAW).expanduser() if _ARTIFACT_DIR_RAW else (Path("audio") / "utterances")
KEEP_AUDIO_ARTIFACTS: bool = _get_bool("KEEP_AUDIO_ARTIFACTS", False)

FALLBACK_USER_TEXT: str = "[unintelligible]"
FALLBACK_REPLY_TEXT: str = (os.getenv("FALLBACK_REPLY_TEXT") or "").strip() or (
    "Sorry, I didn't catch that. Could you say that again?"
)

__all__ = [
    "AUDIO_ARTIFACT_DIR",
    "FALLBACK_REPLY_TEXT",
    "FALLBACK_USER_TEXT",
    "KEEP_AUDIO_ARTIFACTS",
    "LLM_BASE_URL",
    "LLM_MAX_HISTORY_MESSAGES",
    "LLM_MAX_TOKENS",
    "LLM_MODEL",
    "LLM_SYSTEM_PROMPT",
    "LLM_TEMPERATURE",
    "LLM_TIMEOUT_S",
    "STT_BASE_URL",
    "STT_MIN_CONFIDENCE",
    "STT_POLL_INTERVAL_S",
    "STT_RELAXED_SPEECH_MODEL",
    "STT_RETRY_ON_EMPTY",
    "STT_SPEECH_MODEL",
    "STT_TIMEOUT_S",
    "TTS_AUDIO_ENCODING",
    "TTS_BASE_URL",
    "TTS_LANGUAGE_CODE",
    "TTS_SPEAKING_RATE",
    "TTS_TIMEOUT_S",
    "TTS_VOICE_NAME",
]
