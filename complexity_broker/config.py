"""
Configuration for the Complexity Broker.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # Primary backend (Gemini)
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash-lite")

    # Secondary backend (Groq, OpenAI-compatible chat completions)
    GROQ_API_KEY: str = Field(default="")
    GROQ_MODEL: str = Field(default="llama-3.1-8b-instant")
    GROQ_BASE_URL: str = Field(default="https://api.groq.com/openai/v1")

    # Generation settings
    TEMPERATURE: float = Field(default=0.2)  # Low for consistent two-line output
    MAX_TOKENS: int = Field(default=256)

    # Request limits
    MAX_CODE_LENGTH: int = Field(default=50_000, ge=1)

    # Backend calls
    BACKEND_TIMEOUT_SECONDS: float = Field(default=8.0, gt=0)
    BACKEND_MAX_ATTEMPTS: int = Field(default=1, ge=1)

    @property
    def primary_configured(self) -> bool:
        return bool(self.GEMINI_API_KEY.strip())

    @property
    def secondary_configured(self) -> bool:
        return bool(self.GROQ_API_KEY.strip())


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


# Logging setup
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("google").setLevel(logging.WARNING)

logger = logging.getLogger("complexity-broker")
