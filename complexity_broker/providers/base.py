"""
Base class for remote complexity backends.

Every backend sends the same prompt and is judged by the same validity
predicate. Subclasses only implement the wire call and envelope parsing.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from complexity_broker.config import Settings, logger
from complexity_broker.models import (
    BackendOutcome,
    ComplexityReport,
    Failure,
    Invalid,
    Success,
    is_valid_report,
)
from complexity_broker.prompts import build_analysis_prompt

TRANSIENT_ERRORS = (asyncio.TimeoutError, httpx.TimeoutException, httpx.NetworkError)


class BackendError(Exception):
    """Exception for backend API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ComplexityBackend(ABC):
    """
    Remote LLM backend with a uniform invoke contract.

    invoke() never raises: transport errors become Failure, replies without
    a complexity report become Invalid.
    """

    provider_name: str = "backend"

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether credentials are present."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @abstractmethod
    async def _generate(self, prompt: str) -> Optional[str]:
        """
        Send the prompt and return the generated text.

        Returns None when the envelope carries no text. Raises on transport
        errors and non-success statuses.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def _generate_with_deadline(self, prompt: str) -> Optional[str]:
        text: Optional[str] = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.BACKEND_MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        ):
            with attempt:
                text = await asyncio.wait_for(
                    self._generate(prompt),
                    timeout=self._settings.BACKEND_TIMEOUT_SECONDS,
                )
        return text

    async def invoke(self, code: str) -> BackendOutcome:
        """
        Ask the backend for a complexity estimate.

        Args:
            code: Source code, embedded verbatim in the prompt

        Returns:
            Success, Invalid or Failure
        """
        prompt = build_analysis_prompt(code)

        try:
            text = await self._generate_with_deadline(prompt)
        except asyncio.TimeoutError:
            logger.error(
                "%s timed out after %ss", self.provider_name, self._settings.BACKEND_TIMEOUT_SECONDS
            )
            return Failure(error=f"Timed out after {self._settings.BACKEND_TIMEOUT_SECONDS}s")
        except Exception as exc:
            logger.error("%s request failed: %s: %s", self.provider_name, type(exc).__name__, str(exc)[:200])
            return Failure(error=f"{type(exc).__name__}: {str(exc)[:200]}")

        if not is_valid_report(text):
            logger.warning("%s reply has no complexity report", self.provider_name)
            logger.debug("Raw %s reply: %s", self.provider_name, (text or "")[:500])
            return Invalid(raw_response=text)

        return Success(report=ComplexityReport.from_text(text), raw_response=text)
