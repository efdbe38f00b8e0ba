"""
Base LLM provider interface.

Summaries go through this interface so tests can swap in a fake model
without touching the network.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class LLMResponse:
    """Standardized response from a chat-completion call."""
    text: str
    model: str


class LLMProvider(ABC):
    """Abstract base class for chat-completion providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'openai')."""
        pass

    @abstractmethod
    def complete(self, user_prompt: str, model: str | None = None) -> LLMResponse:
        """
        Generate a completion from the model.

        Args:
            user_prompt: The user message/prompt
            model: Specific model to use (defaults to provider's default)

        Returns:
            LLMResponse with the generated text
        """
        pass
