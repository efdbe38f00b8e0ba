"""
OpenAI-compatible chat-completion provider.

Works against api.openai.com or any server exposing the same
``/chat/completions`` contract via ``base_url``.
"""

import httpx
from openai import OpenAI

from .base import LLMProvider, LLMResponse

DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-3.5-turbo"


class OpenAIProvider(LLMProvider):
    """Chat completions through the official OpenAI SDK."""

    def __init__(
        self,
        api_key: str,
        default_model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        timeout: float = 120,
        http_client: httpx.Client | None = None,
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: API key sent as a bearer token
            default_model: Model used when ``complete`` gets none
            base_url: API root, e.g. ``https://api.openai.com/v1``
            timeout: Per-request timeout in seconds
            http_client: Optional preconfigured HTTP client
        """
        # No SDK retries; a failed summary is reported to the caller
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url or DEFAULT_API_BASE,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )
        self._default_model = default_model

    @property
    def name(self) -> str:
        return "openai"

    def complete(self, user_prompt: str, model: str | None = None) -> LLMResponse:
        resolved_model = model or self._default_model

        response = self.client.chat.completions.create(
            model=resolved_model,
            messages=[{"role": "user", "content": user_prompt}],
        )

        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=resolved_model,
        )
