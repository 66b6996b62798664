"""Gemini provider via the ``google-genai`` SDK."""

from __future__ import annotations

import logging

from google import genai
from google.genai import types

from famai.nlp.providers.base import LLMProvider

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiProvider(LLMProvider):
    """Provider backed by Google's Gemini models.

    Unavailable without an API key; every call failure is reported as
    *None* so the generator can fall back.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = _DEFAULT_MODEL,
        temperature: float = 0.1,
        max_output_tokens: int = 8192,
        timeout_ms: int = 120_000,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._api_key = api_key or ""
        self._timeout_ms = timeout_ms
        self._client: genai.Client | None = None

    def is_available(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=self._timeout_ms),
            )
        return self._client

    def complete(self, prompt: str, system: str | None = None) -> str | None:
        if not self.is_available():
            return None
        try:
            response = self._get_client().models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    top_p=0.8,
                    top_k=1,
                    max_output_tokens=self.max_output_tokens,
                    response_mime_type="application/json",
                    system_instruction=system or None,
                ),
            )
        except Exception as exc:
            logger.debug("Gemini call failed: %s", exc)
            return None
        return response.text
