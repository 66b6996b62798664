"""Language-model providers — abstract base + concrete collaborators."""

from __future__ import annotations

from famai.config import Settings
from famai.nlp.providers.base import LLMProvider
from famai.nlp.providers.gemini import GeminiProvider
from famai.nlp.providers.ollama import OllamaProvider


def build_provider(settings: Settings) -> LLMProvider | None:
    """Construct the provider named by *settings*, or *None* for offline mode."""
    if settings.llm_provider == "gemini":
        if not settings.gemini_api_key:
            return None
        return GeminiProvider(settings.gemini_api_key, model=settings.gemini_model)
    if settings.llm_provider == "ollama":
        return OllamaProvider(base_url=settings.ollama_host, model=settings.ollama_model)
    return None


__all__ = ["LLMProvider", "GeminiProvider", "OllamaProvider", "build_provider"]
