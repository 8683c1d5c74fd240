"""Runtime dependency construction (HTTP clients, services and admission control)."""

from __future__ import annotations

import logging

import httpx

from voicecall.state import RuntimeDeps
from voicecall.state.settings import AppSettings
from voicecall.pipeline.artifacts import ArtifactStore
from voicecall.handlers.connections import ConnectionManager
from voicecall.services import (
    GroqCompleter,
    ServiceClients,
    GoogleSynthesizer,
    AssemblyAITranscriber,
)

from .settings import load_settings

logger = logging.getLogger(__name__)


def _warn_missing_keys(settings: AppSettings) -> None:
    missing = [
        name
        for name, key in (
            ("ASSEMBLYAI_API_KEY", settings.transcription.api_key),
            ("GROQ_API_KEY", settings.completion.api_key),
            ("GOOGLE_TTS_API_KEY", settings.synthesis.api_key),
        )
        if not key
    ]
    if missing:
        logger.warning("runtime: missing API keys %s; the affected stages will fail per request", ", ".join(missing))


def build_services(client: httpx.AsyncClient, settings: AppSettings) -> ServiceClients:
    return ServiceClients(
        transcriber=AssemblyAITranscriber(client, settings.transcription),
        completer=GroqCompleter(client, settings.completion),
        synthesizer=GoogleSynthesizer(client, settings.synthesis),
    )


async def build_runtime_deps(settings: AppSettings | None = None) -> RuntimeDeps:
    settings = settings or load_settings()
    _warn_missing_keys(settings)

    http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))
    artifacts = ArtifactStore(
        settings.pipeline.artifact_dir,
        keep=settings.pipeline.keep_artifacts,
        sample_rate_hz=settings.pipeline.sample_rate_hz,
        sample_format=settings.pipeline.sample_format,
    )
    connections = ConnectionManager(max_connections=settings.limits.max_concurrent_connections)

    return RuntimeDeps(
        connections=connections,
        services=build_services(http_client, settings),
        artifacts=artifacts,
        settings=settings,
        _http_client=http_client,
    )


__all__ = ["RuntimeDeps", "build_runtime_deps", "build_services"]
