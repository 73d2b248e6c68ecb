"""
Data models for the Complexity Broker.

Pydantic models for the HTTP boundary and complexity reports, plus the
transient outcome types produced by backend adapters.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from complexity_broker.config import settings

TIME_LABEL = "Time Complexity"
SPACE_LABEL = "Space Complexity"
NOT_FOUND = "Not found"

# Label, optional markdown emphasis and colon, then the rest of the line.
_TIME_LINE = re.compile(r"Time Complexity[*: \t]*([^\n]*)")
_SPACE_LINE = re.compile(r"Space Complexity[*: \t]*([^\n]*)")

Source = Literal["primary", "secondary", "fallback"]


class AnalyzeRequest(BaseModel):
    """Request payload for code analysis."""
    code: str = Field(..., description="Source code to analyze")

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Code cannot be empty or whitespace only")
        if len(v) > settings.MAX_CODE_LENGTH:
            raise PydanticCustomError(
                "code_too_long",
                "Code exceeds {max_length} characters",
                {"max_length": settings.MAX_CODE_LENGTH},
            )
        return v


class ComplexityReport(BaseModel):
    """
    Time and space complexity estimate in Big-O notation.

    Produced either by parsing a backend's free-form reply or directly by
    the heuristic analyzer.
    """

    time: str = Field(description="Time complexity in Big-O notation")
    space: str = Field(description="Space complexity in Big-O notation")

    def render(self) -> str:
        """Format as the two-line text block returned to clients."""
        return f"{TIME_LABEL}: {self.time}\n{SPACE_LABEL}: {self.space}"

    @classmethod
    def from_text(cls, text: str) -> "ComplexityReport":
        """
        Extract the two labelled lines from model output.

        Args:
            text: Raw generated text

        Returns:
            ComplexityReport with "Not found" for any missing line
        """
        return cls(
            time=_match_line(_TIME_LINE, text),
            space=_match_line(_SPACE_LINE, text),
        )


def _match_line(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    value = match.group(1).strip(" \t*") if match else ""
    return value or NOT_FOUND


def is_valid_report(text: Optional[str]) -> bool:
    """Structural contract every backend reply must satisfy."""
    return bool(text) and TIME_LABEL in text


class AnalysisResult(BaseModel):
    """Response envelope, identical in shape whichever stage produced it."""

    model_config = ConfigDict(frozen=True)

    result: str = Field(..., description="Two-line complexity report")
    success: bool = Field(..., description="False when the heuristic fallback was used")
    source: Source = Field(..., description="Stage that produced the result")
    reason: Optional[str] = Field(default=None, description="Why the remote backends were not used")


class ErrorResponse(BaseModel):
    """Error response."""
    success: bool = Field(default=False)
    error: str = Field(..., description="Error message")


# ---------------------------------------------------------------------------
# Backend outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success:
    report: ComplexityReport
    raw_response: str


@dataclass(frozen=True)
class Invalid:
    raw_response: Optional[str]


@dataclass(frozen=True)
class Failure:
    error: str


BackendOutcome = Union[Success, Invalid, Failure]
