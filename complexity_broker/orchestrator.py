"""
Fallback orchestrator.

Tries the remote backends in a fixed priority order and falls back to the
local heuristic when none of them produces a usable report.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from complexity_broker import heuristic
from complexity_broker.config import Settings, logger
from complexity_broker.models import AnalysisResult, Failure, Invalid, Source, Success
from complexity_broker.providers import ComplexityBackend, GeminiBackend, GroqBackend

MISSING_API_KEY = "Missing API key"
ALL_FAILED = "Both primary and secondary failed"
INTERNAL_ERROR = "Exception during processing"

Stage = tuple[Source, ComplexityBackend]


@dataclass(frozen=True)
class StageAttempt:
    """What happened at one stage that did not succeed."""

    source: Source
    status: Literal["skipped", "invalid", "failed"]
    detail: Optional[str] = None


_STATUS_PHRASES = {
    "skipped": "missing API key",
    "invalid": "returned an invalid response",
    "failed": "request failed",
}


def describe_attempts(attempts: Sequence[StageAttempt]) -> str:
    """Summarize failed stages as the envelope's reason string."""
    if all(a.status == "skipped" for a in attempts):
        return MISSING_API_KEY
    if all(a.status != "skipped" for a in attempts):
        return ALL_FAILED
    reason = "; ".join(f"{a.source} {_STATUS_PHRASES[a.status]}" for a in attempts)
    return reason[0].upper() + reason[1:]


async def try_in_order(
    stages: Sequence[Stage], code: str
) -> tuple[Optional[AnalysisResult], list[StageAttempt]]:
    """
    Run stages sequentially until one succeeds.

    Returns:
        (result, attempts): result is None when every stage was skipped or failed
    """
    attempts: list[StageAttempt] = []

    for source, backend in stages:
        if not backend.configured:
            logger.debug("Skipping %s stage (%s not configured)", source, backend.provider_name)
            attempts.append(StageAttempt(source=source, status="skipped"))
            continue

        outcome = await backend.invoke(code)

        if isinstance(outcome, Success):
            result = AnalysisResult(result=outcome.report.render(), success=True, source=source)
            return result, attempts
        if isinstance(outcome, Invalid):
            attempts.append(StageAttempt(source=source, status="invalid"))
        elif isinstance(outcome, Failure):
            attempts.append(StageAttempt(source=source, status="failed", detail=outcome.error))

        logger.info("%s stage (%s) did not succeed, falling through", source, backend.provider_name)

    return None, attempts


def fallback_result(code: str, reason: str) -> AnalysisResult:
    report = heuristic.analyze(code)
    return AnalysisResult(result=report.render(), success=False, source="fallback", reason=reason)


class ComplexityOrchestrator:
    """
    Resolves a code snippet to a complexity report.

    Primary is always tried before secondary; each gets a single attempt.
    """

    def __init__(
        self,
        settings: Settings,
        primary: Optional[ComplexityBackend] = None,
        secondary: Optional[ComplexityBackend] = None,
    ):
        self._settings = settings
        self._primary = primary if primary is not None else GeminiBackend(settings)
        self._secondary = secondary if secondary is not None else GroqBackend(settings)

    @property
    def stages(self) -> list[Stage]:
        return [("primary", self._primary), ("secondary", self._secondary)]

    @property
    def primary(self) -> ComplexityBackend:
        return self._primary

    @property
    def secondary(self) -> ComplexityBackend:
        return self._secondary

    async def aclose(self) -> None:
        for _, backend in self.stages:
            await backend.aclose()

    async def resolve(self, code: str) -> AnalysisResult:
        """
        Produce the response envelope for one snippet.

        Args:
            code: Source code to analyze

        Returns:
            AnalysisResult; the heuristic fallback is used if anything goes wrong
        """
        try:
            result, attempts = await try_in_order(self.stages, code)
            if result is not None:
                return result
            return fallback_result(code, describe_attempts(attempts))
        except Exception:
            logger.exception("Unexpected error while resolving complexity")
            return fallback_result(code, INTERNAL_ERROR)
