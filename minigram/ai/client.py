# minigram/ai/client.py
from __future__ import annotations

import logging
import re

import httpx

from minigram.core.config import settings
from minigram.core.errors import ExternalServiceError

log = logging.getLogger("uvicorn")

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def split_image(base64_image: str, default_mime: str = "image/jpeg") -> tuple[str, str]:
    """
    Acepta base64 "crudo" o un data URI (data:image/png;base64,....)
    y devuelve (mime_type, data).
    """
    m = _DATA_URI.match(base64_image.strip())
    if m:
        return m.group("mime"), m.group("data")
    return default_mime, base64_image.strip()


class GenerativeTextClient:
    """
    Cliente mínimo para `models/{model}:generateContent` del API de
    Generative Language. Devuelve solo el texto del primer candidato.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, prompt: str, base64_image: str | None = None) -> dict:
        parts: list[dict] = [{"text": prompt}]
        if base64_image:
            mime, data = split_image(base64_image)
            parts.append({"inline_data": {"mime_type": mime, "data": data}})
        return {"contents": [{"parts": parts}]}

    @staticmethod
    def extract_text(body: dict) -> str:
        candidates = body.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))

    async def generate(self, prompt: str, base64_image: str | None = None) -> str:
        if not self.api_key:
            raise ExternalServiceError("GEMINI_API_KEY not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                res = await client.post(
                    self.endpoint,
                    headers={"x-goog-api-key": self.api_key},
                    json=self.build_payload(prompt, base64_image),
                )
                res.raise_for_status()
                body = res.json()
        except httpx.HTTPStatusError as e:
            log.error(f"❌ AI provider respondió {e.response.status_code}")
            raise ExternalServiceError(
                f"AI provider returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            log.error(f"❌ AI provider falló: {e!r}")
            raise ExternalServiceError("AI provider request failed") from e

        text = self.extract_text(body).strip()
        if not text:
            raise ExternalServiceError("AI provider returned no text")
        return text


def get_ai_client() -> GenerativeTextClient:
    return GenerativeTextClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_BASE_URL,
        timeout=settings.AI_TIMEOUT_SECONDS,
    )
