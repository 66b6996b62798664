"""Local Ollama provider over its HTTP API."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from famai.nlp.providers.base import LLMProvider

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "http://localhost:11434"
_DEFAULT_MODEL = "mistral"
_TAGS_TIMEOUT = 2.0

_NETWORK_ERRORS = (urllib.error.URLError, OSError, TimeoutError)


class OllamaProvider(LLMProvider):
    """Provider that calls a local Ollama server.

    The server counts as available only when it answers and has the
    configured model pulled.  Calls that fail return *None*.
    """

    name = "ollama"

    def __init__(
        self,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        model: str = _DEFAULT_MODEL,
        timeout: float = 60.0,
        temperature: float = 0.1,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    def _call(self, path: str, payload: dict[str, Any] | None, timeout: float) -> dict[str, Any]:
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(
            f"{self.base_url}{path}",
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST" if data is not None else "GET",
        )
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return json.loads(resp.read().decode("utf-8"))

    def _has_model(self, tags: dict[str, Any]) -> bool:
        wanted = {self.model, f"{self.model}:latest"}
        return any(entry.get("name") in wanted for entry in tags.get("models", []))

    def is_available(self) -> bool:
        try:
            tags = self._call("/api/tags", None, _TAGS_TIMEOUT)
        except (*_NETWORK_ERRORS, json.JSONDecodeError):
            return False
        if not self._has_model(tags):
            logger.debug("Ollama at %s has no model %s", self.base_url, self.model)
            return False
        return True

    def complete(self, prompt: str, system: str | None = None) -> str | None:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": self.temperature, "top_p": 0.8},
        }
        if system:
            payload["system"] = system

        try:
            body = self._call("/api/generate", payload, self.timeout)
        except (*_NETWORK_ERRORS, json.JSONDecodeError) as exc:
            logger.debug("Ollama call failed: %s", exc)
            return None
        if body.get("error"):
            logger.debug("Ollama reported: %s", body["error"])
            return None
        return body.get("response") or None
