"""
Summarizer - LLM-powered episode summaries from SRT transcripts.

Features:
- Cache-before-compute: a stored summary is returned without a model call
- Per-request model settings with environment defaults
- Any OpenAI-compatible chat-completion server
"""

import logging
from dataclasses import dataclass
from typing import Callable

from .config import config
from .database import Database, DBEpisode
from .exceptions import SummaryError, SummaryNotConfiguredError
from .providers import LLMProvider, create_provider

logger = logging.getLogger(__name__)


@dataclass
class ModelConfig:
    """Connection settings for one summary call; blanks fall back to config."""
    api_key: str = ""
    api_base: str = ""
    model: str = ""

    def resolve(self) -> "ModelConfig":
        return ModelConfig(
            api_key=self.api_key or config.OPENAI_API_KEY,
            api_base=self.api_base or config.OPENAI_API_BASE,
            model=self.model or config.OPENAI_MODEL,
        )


@dataclass
class SummaryResult:
    text: str
    cached: bool = False


ProviderFactory = Callable[[ModelConfig], LLMProvider]


def default_provider_factory(model_config: ModelConfig) -> LLMProvider:
    return create_provider(
        "openai",
        api_key=model_config.api_key,
        default_model=model_config.model,
        base_url=model_config.api_base,
        timeout=config.SUMMARY_TIMEOUT_SECONDS,
    )


class SummaryService:
    """Summarizes transcripts and stores the result on the episode."""

    PROMPT = """You are a podcast transcript summarization assistant. Based on the SRT transcript below, write a concise, lively summary of the episode.

Requirements:
1. Capture the core highlights
2. Mark key topics with their timestamps where available
3. Use plain, accessible language
4. Output only the summary text, without any subtitle formatting

Transcript:
"""

    def __init__(
        self,
        db: Database,
        provider_factory: ProviderFactory = default_provider_factory,
        max_chars: int = 8000,
    ):
        """
        Args:
            db: Store that holds the cached summaries
            provider_factory: Builds a provider from a resolved ModelConfig
            max_chars: Transcript prefix sent to the model
        """
        self.db = db
        self.provider_factory = provider_factory
        self.max_chars = max_chars

    def summarize(
        self,
        episode: DBEpisode | None,
        transcript: str,
        model_config: ModelConfig | None = None,
    ) -> SummaryResult:
        """
        Return the episode's summary, generating it on a cache miss.

        Args:
            episode: Episode the summary belongs to; None means nothing is
                cached or persisted
            transcript: SRT text; falls back to the stored transcript
            model_config: Request overrides for key, base URL and model

        Raises:
            ValueError: If there is no transcript to summarize
            SummaryNotConfiguredError: If no API key is available
            SummaryError: If the model call fails or returns nothing
        """
        if episode is not None and episode.summary:
            logger.info(f"Summary already exists for {episode.guid}, returning cached")
            return SummaryResult(text=episode.summary, cached=True)

        if not transcript and episode is not None:
            transcript = episode.transcript or ""
        if not transcript or not transcript.strip():
            raise ValueError("srtContent is required")

        resolved = (model_config or ModelConfig()).resolve()
        if not resolved.api_key:
            raise SummaryNotConfiguredError("API key not configured")

        provider = self.provider_factory(resolved)
        logger.info(f"Calling LLM ({resolved.model}) for summary...")
        try:
            response = provider.complete(
                user_prompt=self.PROMPT + transcript[:self.max_chars],
                model=resolved.model,
            )
        except Exception as e:
            logger.error(f"LLM summary error: {e}")
            raise SummaryError(f"Summary request failed: {e}") from e

        text = response.text.strip()
        if not text:
            raise SummaryError("Model returned an empty summary")

        if episode is not None:
            self.db.update_summary(episode.guid, text)
            logger.info(f"Summary generated successfully for {episode.guid}")
        return SummaryResult(text=text, cached=False)
