"""
Pytest configuration and fixtures for Complexity Broker tests.
"""

from typing import Optional

import pytest

from complexity_broker.config import Settings
from complexity_broker.providers.base import ComplexityBackend

VALID_REPLY = "Time Complexity: O(n)\nSpace Complexity: O(1)"


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's .env and API keys."""
    values = {"GEMINI_API_KEY": "", "GROQ_API_KEY": ""}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class ScriptedBackend(ComplexityBackend):
    """Backend whose wire call returns a canned reply or raises."""

    def __init__(
        self,
        settings: Settings,
        reply: Optional[str] = VALID_REPLY,
        error: Optional[Exception] = None,
        configured: bool = True,
        name: str = "scripted",
        call_log: Optional[list] = None,
    ):
        super().__init__(settings)
        self.provider_name = name
        self.reply = reply
        self.error = error
        self._configured = configured
        self.prompts: list[str] = []
        self.call_log = call_log if call_log is not None else []
        self.closed = False

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def model_name(self) -> str:
        return f"{self.provider_name}-model"

    async def _generate(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        self.call_log.append(self.provider_name)
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def settings():
    """Settings with no backend credentials."""
    return make_settings()


@pytest.fixture
def call_log():
    return []
