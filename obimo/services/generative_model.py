"""
Client for the external generative-text model used to re-rank recommendations.

The contract is deliberately narrow: a free-text prompt goes in, free text
comes out. Callers own prompt construction and response parsing.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Protocol

import httpx
import structlog

from obimo.core.config import Settings

logger = structlog.get_logger(__name__)


class GenerativeModelError(Exception):
    """Raised when the model cannot be reached or returns no usable text."""


class GenerativeModel(Protocol):
    async def generate(self, prompt: str) -> str:
        ...


class GeminiModelClient:
    """
    Calls the Gemini ``generateContent`` REST endpoint.

    Pass a persistent ``httpx.AsyncClient`` to reuse connections; otherwise a
    short-lived client is created per call. A caller-provided client is never
    closed here.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2},
        }
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        if self.http_client is not None:
            response = await self.http_client.post(
                self.endpoint, json=body, headers=headers, timeout=self.timeout
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, json=body, headers=headers)

        if response.status_code != 200:
            raise GenerativeModelError(
                f"Model API error: {response.status_code} - {response.text[:200]}"
            )

        text = self._extract_text(response.json())
        if not text:
            raise GenerativeModelError("Model response contained no text")
        return text

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def build_generative_model(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None
) -> Optional[GenerativeModel]:
    """Return a configured model client, or None when no API key is set."""
    if not settings.ai_api_key:
        logger.info("external re-ranking disabled: AI_API_KEY not set")
        return None
    return GeminiModelClient(
        api_key=settings.ai_api_key,
        model=settings.ai_model,
        base_url=settings.ai_base_url,
        timeout=settings.ai_timeout_seconds,
        http_client=http_client,
    )
