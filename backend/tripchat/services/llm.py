"""
TripChat - Dialogue Engine
Single chat completion call against an OpenAI-compatible API
"""

import logging
from functools import lru_cache
from typing import Optional

from openai import AsyncOpenAI

from tripchat.config import get_settings
from tripchat.exceptions import GenerationFailed

logger = logging.getLogger(__name__)


class DialogueEngine:
    """Sends the assembled messages to the model and returns its text."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        model: str = "gpt-4",
        temperature: float = 0.8,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def complete(self, messages: list[dict]) -> str:
        """
        Generate one completion.

        Raises:
            GenerationFailed: on any client error or an empty completion.
                The call is not retried.
        """
        if self.client is None:
            raise GenerationFailed("LLM API key is not configured")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error(f"LLM error: {e}")
            raise GenerationFailed(str(e), cause=e) from e

        content: Optional[str] = None
        if response.choices:
            content = response.choices[0].message.content

        if not content or not content.strip():
            raise GenerationFailed("Empty completion")

        return content


@lru_cache
def get_dialogue_engine() -> DialogueEngine:
    """Process-wide engine sharing one HTTP client."""
    settings = get_settings()

    client = None
    if settings.llm_api_key:
        client = AsyncOpenAI(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )
    else:
        logger.warning("LLM_API_KEY is not set, chat replies will fail")

    return DialogueEngine(
        client,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
    )
