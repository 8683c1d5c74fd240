"""Groq chat completion (OpenAI-compatible API)."""

from __future__ import annotations

import time
import logging
from typing import Any

import httpx

from voicecall.errors import TransientServiceError
from voicecall.state.settings import CompletionSettings
from voicecall.pipeline.cancellation import CancellationToken

logger = logging.getLogger(__name__)

_SERVICE = "completion"
_EMPTY_REPLY = "I apologize, but I could not generate a response."


class GroqCompleter:
    def __init__(self, client: httpx.AsyncClient, settings: CompletionSettings) -> None:
        self._client = client
        self._settings = settings
        self._base_url = settings.base_url.rstrip("/")

    async def _post(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        payload = {
            "model": self._settings.model,
            "messages": messages,
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.max_tokens,
        }
        try:
            response = await self._client.post(
                f"{self._base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self._settings.api_key}"},
                timeout=self._settings.timeout_s,
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

    async def complete(self, messages: list[dict[str, Any]], token: CancellationToken) -> str:
        start = time.perf_counter()
        # The HTTP request itself is aborted if the token fires mid-flight.
        data = await token.run(self._post(messages))

        choices = data.get("choices") or [{}]
        message = (choices[0] or {}).get("message") or {}
        content = (message.get("content") or "").strip()
        logger.debug(
            "completion done in %.0fms usage=%s chars=%d",
            (time.perf_counter() - start) * 1000,
            data.get("usage", {}),
            len(content),
        )
        return content or _EMPTY_REPLY


__all__ = ["GroqCompleter"]
