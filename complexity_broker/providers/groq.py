"""
Groq backend, the secondary stage of the fallback chain.

Talks to the OpenAI-compatible chat completions endpoint over httpx.
"""
from __future__ import annotations

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from complexity_broker.config import Settings, logger
from complexity_broker.providers.base import BackendError, ComplexityBackend


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    content: Optional[str] = None


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: Optional[ChatMessage] = None


class ChatCompletionResponse(BaseModel):
    """The part of a chat completions envelope the backend reads."""

    model_config = ConfigDict(extra="ignore")

    choices: list[ChatChoice] = Field(default_factory=list)

    def first_text(self) -> Optional[str]:
        if not self.choices or self.choices[0].message is None:
            return None
        return self.choices[0].message.content


class GroqBackend(ComplexityBackend):
    """
    Groq chat completions provider.

    Args:
        settings: Application settings
        transport: Optional httpx transport, used by tests
    """

    provider_name = "groq"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(settings)
        self._api_key = settings.GROQ_API_KEY.strip()
        self._model = settings.GROQ_MODEL
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        if not self._api_key:
            logger.warning("GROQ_API_KEY not configured")

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    @property
    def model_name(self) -> str:
        return self._model

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._settings.GROQ_BASE_URL,
                timeout=httpx.Timeout(self._settings.BACKEND_TIMEOUT_SECONDS),
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _generate(self, prompt: str) -> Optional[str]:
        client = self._get_client()

        payload = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._settings.TEMPERATURE,
            "max_tokens": self._settings.MAX_TOKENS,
        }

        response = await client.post("/chat/completions", json=payload)

        if response.status_code != 200:
            raise BackendError(
                f"API error ({response.status_code}): {_error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            envelope = ChatCompletionResponse.model_validate(response.json())
        except ValueError as exc:
            raise BackendError(f"Malformed response envelope: {str(exc)[:200]}") from exc

        return envelope.first_text()


def _error_detail(response: httpx.Response) -> str:
    detail = response.text
    try:
        body = response.json()
    except ValueError:
        return detail
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("message", detail))
    return detail
