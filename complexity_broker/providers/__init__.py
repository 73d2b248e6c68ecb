"""Remote complexity backends."""

from .base import BackendError, ComplexityBackend
from .gemini import GeminiBackend
from .groq import GroqBackend

__all__ = [
    "BackendError",
    "ComplexityBackend",
    "GeminiBackend",
    "GroqBackend",
]
