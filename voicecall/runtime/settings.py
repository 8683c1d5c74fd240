"""Load runtime settings.

Configuration values are resolved from the environment in `voicecall/config/*`
and exposed here as structured dataclasses for the rest of the server.
"""

from __future__ import annotations

from voicecall.config.secrets import GROQ_API_KEY, ASSEMBLYAI_API_KEY, GOOGLE_TTS_API_KEY
from voicecall.config.limits import MAX_UTTERANCE_AUDIO_BYTES, MAX_CONCURRENT_CONNECTIONS
from voicecall.config.websocket import (
    WS_IDLE_TIMEOUT_S,
    WS_WATCHDOG_TICK_S,
    WS_HEARTBEAT_TIMEOUT_S,
    WS_HEARTBEAT_INTERVAL_S,
    WS_MAX_CONNECTION_DURATION_S,
)
from voicecall.state.settings import (
    AppSettings,
    VadSettings,
    LimitsSettings,
    PipelineSettings,
    SegmenterSettings,
    SynthesisSettings,
    WebSocketSettings,
    CompletionSettings,
    TranscriptionSettings,
)
from voicecall.config.audio import (
    VAD_MIN_HISTORY,
    VAD_MIN_SAMPLES,
    VAD_HISTORY_SIZE,
    BUFFER_MAX_CHUNKS,
    VAD_MAX_THRESHOLD,
    VAD_MIN_THRESHOLD,
    AUDIO_SAMPLE_FORMAT,
    VAD_HIGH_CONFIDENCE,
    VAD_LOW_CONFIDENCE,
    VAD_MEDIAN_FRACTION,
    AUDIO_SAMPLE_RATE_HZ,
    VAD_NOISE_PERCENTILE,
    SEGMENT_LOW_WATERMARK,
    VAD_INITIAL_THRESHOLD,
    SEGMENT_HIGH_WATERMARK,
    VAD_QUIET_ENERGY_FRACTION,
)
from voicecall.config.services import (
    LLM_MODEL,
    TTS_BASE_URL,
    LLM_BASE_URL,
    STT_BASE_URL,
    LLM_TIMEOUT_S,
    STT_TIMEOUT_S,
    TTS_TIMEOUT_S,
    LLM_MAX_TOKENS,
    TTS_VOICE_NAME,
    LLM_TEMPERATURE,
    LLM_SYSTEM_PROMPT,
    STT_SPEECH_MODEL,
    TTS_LANGUAGE_CODE,
    TTS_SPEAKING_RATE,
    AUDIO_ARTIFACT_DIR,
    FALLBACK_USER_TEXT,
    STT_MIN_CONFIDENCE,
    STT_RETRY_ON_EMPTY,
    TTS_AUDIO_ENCODING,
    FALLBACK_REPLY_TEXT,
    STT_POLL_INTERVAL_S,
    KEEP_AUDIO_ARTIFACTS,
    LLM_MAX_HISTORY_MESSAGES,
    STT_RELAXED_SPEECH_MODEL,
)


def _load_vad_settings() -> VadSettings:
    return VadSettings(
        sample_format=AUDIO_SAMPLE_FORMAT,
        history_size=VAD_HISTORY_SIZE,
        min_history=VAD_MIN_HISTORY,
        min_samples=VAD_MIN_SAMPLES,
        initial_threshold=VAD_INITIAL_THRESHOLD,
        min_threshold=VAD_MIN_THRESHOLD,
        max_threshold=VAD_MAX_THRESHOLD,
        noise_percentile=VAD_NOISE_PERCENTILE,
        median_fraction=VAD_MEDIAN_FRACTION,
        low_confidence=VAD_LOW_CONFIDENCE,
        high_confidence=VAD_HIGH_CONFIDENCE,
        quiet_energy_fraction=VAD_QUIET_ENERGY_FRACTION,
    )


def _load_service_settings() -> tuple[TranscriptionSettings, CompletionSettings, SynthesisSettings]:
    transcription = TranscriptionSettings(
        api_key=ASSEMBLYAI_API_KEY,
        base_url=STT_BASE_URL,
        speech_model=STT_SPEECH_MODEL,
        relaxed_speech_model=STT_RELAXED_SPEECH_MODEL,
        retry_on_empty=STT_RETRY_ON_EMPTY,
        poll_interval_s=STT_POLL_INTERVAL_S,
        timeout_s=STT_TIMEOUT_S,
        min_confidence=STT_MIN_CONFIDENCE,
    )
    completion = CompletionSettings(
        api_key=GROQ_API_KEY,
        base_url=LLM_BASE_URL,
        model=LLM_MODEL,
        temperature=LLM_TEMPERATURE,
        max_tokens=LLM_MAX_TOKENS,
        timeout_s=LLM_TIMEOUT_S,
        max_history_messages=LLM_MAX_HISTORY_MESSAGES,
        system_prompt=LLM_SYSTEM_PROMPT,
    )
    synthesis = SynthesisSettings(
        api_key=GOOGLE_TTS_API_KEY,
        base_url=TTS_BASE_URL,
        language_code=TTS_LANGUAGE_CODE,
        voice_name=TTS_VOICE_NAME,
        audio_encoding=TTS_AUDIO_ENCODING,
        speaking_rate=TTS_SPEAKING_RATE,
        timeout_s=TTS_TIMEOUT_S,
    )
    return transcription, completion, synthesis


def load_settings() -> AppSettings:
    transcription, completion, synthesis = _load_service_settings()
    return AppSettings(
        limits=LimitsSettings(
            max_concurrent_connections=MAX_CONCURRENT_CONNECTIONS,
            max_utterance_audio_bytes=MAX_UTTERANCE_AUDIO_BYTES,
        ),
        websocket=WebSocketSettings(
            idle_timeout_s=WS_IDLE_TIMEOUT_S,
            watchdog_tick_s=WS_WATCHDOG_TICK_S,
            max_connection_duration_s=WS_MAX_CONNECTION_DURATION_S,
            heartbeat_interval_s=WS_HEARTBEAT_INTERVAL_S,
            heartbeat_timeout_s=WS_HEARTBEAT_TIMEOUT_S,
        ),
        vad=_load_vad_settings(),
        segmenter=SegmenterSettings(
            buffer_max_chunks=BUFFER_MAX_CHUNKS,
            low_watermark=SEGMENT_LOW_WATERMARK,
            high_watermark=SEGMENT_HIGH_WATERMARK,
        ),
        transcription=transcription,
        completion=completion,
        synthesis=synthesis,
        pipeline=PipelineSettings(
            sample_rate_hz=AUDIO_SAMPLE_RATE_HZ,
            sample_format=AUDIO_SAMPLE_FORMAT,
            artifact_dir=AUDIO_ARTIFACT_DIR,
            keep_artifacts=KEEP_AUDIO_ARTIFACTS,
            fallback_user_text=FALLBACK_USER_TEXT,
            fallback_reply_text=FALLBACK_REPLY_TEXT,
        ),
    )


__all__ = ["load_settings"]
