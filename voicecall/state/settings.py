"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int = 100
    max_utterance_audio_bytes: int = 25 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    idle_timeout_s: float = 150.0
    watchdog_tick_s: float = 1.0
    max_connection_duration_s: float = 5400.0
    heartbeat_interval_s: float = 5.0
    heartbeat_timeout_s: float = 10.0


@dataclass(frozen=True, slots=True)
class VadSettings:
    sample_format: str = "pcm16"
    history_size: int = 50
    min_history: int = 10
    min_samples: int = 100
    initial_threshold: float = 0.02
    min_threshold: float = 0.015
    max_threshold: float = 0.25
    noise_percentile: float = 0.25
    median_fraction: float = 0.5
    low_confidence: float = 0.3
    high_confidence: float = 0.6
    quiet_energy_fraction: float = 0.7


@dataclass(frozen=True, slots=True)
class SegmenterSettings:
    buffer_max_chunks: int = 30
    low_watermark: int = 5
    high_watermark: int = 8


@dataclass(frozen=True, slots=True)
class TranscriptionSettings:
    api_key: str = ""
    base_url: str = "https://api.assemblyai.com/v2"
    speech_model: str = "best"
    relaxed_speech_model: str = "nano"
    retry_on_empty: bool = True
    poll_interval_s: float = 0.5
    timeout_s: float = 60.0
    min_confidence: float = 0.3


@dataclass(frozen=True, slots=True)
class CompletionSettings:
    api_key: str = ""
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama-3.1-8b-instant"
    temperature: float = 0.7
    max_tokens: int = 150
    timeout_s: float = 30.0
    max_history_messages: int = 40
    system_prompt: str = "You are a helpful voice assistant."


@dataclass(frozen=True, slots=True)
class SynthesisSettings:
    api_key: str = ""
    base_url: str = "https://texttospeech.googleapis.com/v1"
    language_code: str = "en-US"
    voice_name: str = "en-US-Standard-D"
    audio_encoding: str = "MP3"
    speaking_rate: float = 1.0
    timeout_s: float = 30.0


@dataclass(frozen=True, slots=True)
class PipelineSettings:
    sample_rate_hz: int = 16000
    sample_format: str = "pcm16"
    artifact_dir: Path = Path("audio") / "utterances"
    keep_artifacts: bool = False
    fallback_user_text: str = "[unintelligible]"
    fallback_reply_text: str = "Sorry, I didn't catch that. Could you say that again?"


@dataclass(frozen=True, slots=True)
class AppSettings:
    limits: LimitsSettings = field(default_factory=LimitsSettings)
    websocket: WebSocketSettings = field(default_factory=WebSocketSettings)
    vad: VadSettings = field(default_factory=VadSettings)
    segmenter: SegmenterSettings = field(default_factory=SegmenterSettings)
    transcription: TranscriptionSettings = field(default_factory=TranscriptionSettings)
    completion: CompletionSettings = field(default_factory=CompletionSettings)
    synthesis: SynthesisSettings = field(default_factory=SynthesisSettings)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)


__all__ = [
    "AppSettings",
    "CompletionSettings",
    "LimitsSettings",
    "PipelineSettings",
    "SegmenterSettings",
    "SynthesisSettings",
    "TranscriptionSettings",
    "VadSettings",
    "WebSocketSettings",
]
