"""
Gemini backend, the primary stage of the fallback chain.
"""
from __future__ import annotations

from typing import Any, Optional

from google import genai
from google.genai import types

from complexity_broker.config import Settings, logger
from complexity_broker.providers.base import BackendError, ComplexityBackend


def first_candidate_text(response: types.GenerateContentResponse) -> Optional[str]:
    """Text at candidates[0].content.parts[0].text, or None if any hop is missing."""
    if not response.candidates:
        return None
    content = response.candidates[0].content
    if content is None or not content.parts:
        return None
    return content.parts[0].text


class GeminiBackend(ComplexityBackend):
    """
    Gemini provider for complexity estimates.

    Args:
        settings: Application settings
        client: Pre-built client; created from GEMINI_API_KEY when omitted
    """

    provider_name = "gemini"

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        super().__init__(settings)
        self._client = client
        self._model = settings.GEMINI_MODEL
        if self._client is None:
            self._initialize()

    def _initialize(self) -> None:
        """Initialize Gemini client."""
        if not self._settings.primary_configured:
            logger.warning("GEMINI_API_KEY not configured")
            return

        try:
            self._client = genai.Client(api_key=self._settings.GEMINI_API_KEY)
            logger.info("Gemini client initialized (model=%s)", self._model)
        except Exception as exc:
            logger.error("Failed to initialize Gemini client: %s", exc)

    @property
    def configured(self) -> bool:
        """A key is set or a client was injected, even if client setup failed."""
        return self._client is not None or self._settings.primary_configured

    @property
    def model_name(self) -> str:
        return self._model

    async def _generate(self, prompt: str) -> Optional[str]:
        if self._client is None:
            raise BackendError("Gemini client not initialized")

        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
            config=types.GenerateContentConfig(
                temperature=self._settings.TEMPERATURE,
                max_output_tokens=self._settings.MAX_TOKENS,
            ),
        )
        return first_candidate_text(response)
