"""Abstract language-model provider interface."""

from __future__ import annotations

import abc


class LLMProvider(abc.ABC):
    """Base class for language-model collaborators.

    Implementations override :meth:`complete`, which sends a prompt and
    returns the raw reply text, or *None* on failure.
    """

    name: str = "llm"

    @abc.abstractmethod
    def complete(self, prompt: str, system: str | None = None) -> str | None:
        """Send *prompt* to the model and return raw response text.

        *system* carries the standing instructions (role, rules, schema)
        and goes in the provider's dedicated system slot rather than the
        user turn.

        Returns *None* if the provider is unavailable or the call fails,
        signalling the caller to fall back to the heuristic extractor.
        """

    @abc.abstractmethod
    def is_available(self) -> bool:
        """Return *True* if the provider is configured and ready."""
