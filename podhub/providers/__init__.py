"""
LLM Provider abstraction layer.

Summaries talk to OpenAI-compatible chat-completion servers through a
small interface that tests can replace with a fake.
"""

from .base import LLMProvider, LLMResponse
from .openai import OpenAIProvider
from .factory import create_provider, PROVIDERS

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "create_provider",
    "PROVIDERS",
]
