"""AssemblyAI speech-to-text over REST (upload, create transcript, poll)."""

from __future__ import annotations

import time
import asyncio
import logging
from typing import Any
from pathlib import Path

import httpx

from voicecall.errors import TransientServiceError
from voicecall.state.models import Transcript
from voicecall.state.settings import TranscriptionSettings

logger = logging.getLogger(__name__)

_SERVICE = "transcription"


class AssemblyAITranscriber:
    def __init__(self, client: httpx.AsyncClient, settings: TranscriptionSettings) -> None:
        self._client = client
        self._settings = settings
        self._base_url = settings.base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {"authorization": self._settings.api_key}

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers(),
                timeout=self._settings.timeout_s,
                **kwargs,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise TransientServiceError(
                service=_SERVICE,
                message=exc.response.text[:200] or str(exc),
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise TransientServiceError(service=_SERVICE, message=str(exc) or type(exc).__name__) from exc

    async def _upload(self, audio_path: Path) -> str:
        data = await asyncio.to_thread(audio_path.read_bytes)
        body = await self._request("POST", "/upload", content=data)
        upload_url = body.get("upload_url")
        if not isinstance(upload_url, str) or not upload_url:
            raise TransientServiceError(service=_SERVICE, message="upload returned no upload_url")
        return upload_url

    async def _poll(self, transcript_id: str) -> dict[str, Any]:
        deadline = time.monotonic() + self._settings.timeout_s
        while True:
            body = await self._request("GET", f"/transcript/{transcript_id}")
            status = body.get("status")
            if status == "completed":
                return body
            if status == "error":
                raise TransientServiceError(service=_SERVICE, message=str(body.get("error") or "transcription error"))
            if time.monotonic() >= deadline:
                raise TransientServiceError(service=_SERVICE, message="timed out waiting for transcript")
            await asyncio.sleep(self._settings.poll_interval_s)

    async def _transcribe_once(self, upload_url: str, params: dict[str, Any]) -> Transcript:
        created = await self._request("POST", "/transcript", json={"audio_url": upload_url, **params})
        transcript_id = created.get("id")
        if not isinstance(transcript_id, str) or not transcript_id:
            raise TransientServiceError(service=_SERVICE, message="transcript request returned no id")
        body = await self._poll(transcript_id)
        text = (body.get("text") or "").strip()
        confidence = body.get("confidence")
        return Transcript(text=text, confidence=float(confidence) if isinstance(confidence, (int, float)) else None)

    async def transcribe(self, audio_path: Path) -> Transcript:
        start = time.perf_counter()
        upload_url = await self._upload(audio_path)

        result = await self._transcribe_once(upload_url, {"speech_model": self._settings.speech_model})
        if not result.text and self._settings.retry_on_empty:
            # Relaxed second pass: lighter model with language detection.
            logger.info("empty transcript; retrying with relaxed parameters")
            result = await self._transcribe_once(
                upload_url,
                {"speech_model": self._settings.relaxed_speech_model, "language_detection": True},
            )

        logger.debug(
            "transcription done in %.0fms chars=%d confidence=%s",
            (time.perf_counter() - start) * 1000,
            len(result.text),
            result.confidence,
        )
        return result


__all__ = ["AssemblyAITranscriber"]
