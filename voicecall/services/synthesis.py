"""Google Cloud Text-to-Speech over REST."""

from __future__ import annotations

import time
import base64
import logging
import binascii

import httpx

from voicecall.errors import TransientServiceError
from voicecall.state.settings import SynthesisSettings

logger = logging.getLogger(__name__)

_SERVICE = "synthesis"


class GoogleSynthesizer:
    def __init__(self, client: httpx.AsyncClient, settings: SynthesisSettings) -> None:
        self._client = client
        self._settings = settings
        self._base_url = settings.base_url.rstrip("/")
        self.audio_format = settings.audio_encoding.lower()

    def _request_body(self, text: str) -> dict[str, object]:
        return {
            "input": {"text": text},
            "voice": {"languageCode": self._settings.language_code, "name": self._settings.voice_name},
            "audioConfig": {
                "audioEncoding": self._settings.audio_encoding,
                "speakingRate": self._settings.speaking_rate,
            },
        }

    async def synthesize(self, text: str) -> bytes:
        start = time.perf_counter()
        try:
            response = await self._client.post(
                f"{self._base_url}/text:synthesize",
                params={"key": self._settings.api_key},
                json=self._request_body(text),
                timeout=self._settings.timeout_s,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransientServiceError(
                service=_SERVICE,
                message=exc.response.text[:200] or str(exc),
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise TransientServiceError(service=_SERVICE, message=str(exc) or type(exc).__name__) from exc

        content = body.get("audioContent")
        if not isinstance(content, str) or not content:
            raise TransientServiceError(service=_SERVICE, message="no audio content received")
        try:
            audio = base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise TransientServiceError(service=_SERVICE, message="audio content is not valid base64") from exc

        logger.debug("synthesis done in %.0fms bytes=%d", (time.perf_counter() - start) * 1000, len(audio))
        return audio


__all__ = ["GoogleSynthesizer"]
