"""Tests for request validation, report parsing and the envelope."""

import pytest
from pydantic import ValidationError

from complexity_broker.config import settings
from complexity_broker.models import (
    AnalysisResult,
    AnalyzeRequest,
    ComplexityReport,
    is_valid_report,
)
from complexity_broker.prompts import build_analysis_prompt


class TestAnalyzeRequest:
    def test_accepts_code(self):
        assert AnalyzeRequest(code="x = 1").code == "x = 1"

    def test_code_is_not_trimmed(self):
        assert AnalyzeRequest(code="  x = 1\n").code == "  x = 1\n"

    @pytest.mark.parametrize("payload", [{}, {"code": ""}, {"code": "   \n\t"}, {"code": 42}, {"code": None}])
    def test_rejects_bad_code(self, payload):
        with pytest.raises(ValidationError):
            AnalyzeRequest.model_validate(payload)

    def test_rejects_code_over_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            AnalyzeRequest(code="x" * (settings.MAX_CODE_LENGTH + 1))
        error = exc_info.value.errors()[0]
        assert error["type"] == "code_too_long"
        assert error["ctx"] == {"max_length": settings.MAX_CODE_LENGTH}


class TestComplexityReport:
    def test_render(self):
        report = ComplexityReport(time="O(n)", space="O(1)")
        assert report.render() == "Time Complexity: O(n)\nSpace Complexity: O(1)"

    def test_from_text_ignores_surrounding_prose(self):
        text = "Sure!\nTime Complexity: O(n log n)\nSpace Complexity: O(n)\nHope this helps."
        report = ComplexityReport.from_text(text)
        assert report.time == "O(n log n)"
        assert report.space == "O(n)"

    def test_from_text_strips_markdown_emphasis(self):
        report = ComplexityReport.from_text("**Time Complexity:** O(n*m)\n**Space Complexity:** O(1)")
        assert report.time == "O(n*m)"
        assert report.space == "O(1)"

    def test_missing_space_line(self):
        report = ComplexityReport.from_text("Time Complexity: O(n)")
        assert report.time == "O(n)"
        assert report.space == "Not found"

    def test_empty_label_value(self):
        report = ComplexityReport.from_text("Time Complexity:\nSpace Complexity: O(1)")
        assert report.time == "Not found"
        assert report.space == "O(1)"


class TestValidityPredicate:
    def test_valid(self):
        assert is_valid_report("Time Complexity: O(1)")

    @pytest.mark.parametrize("text", [None, "", "The runtime is linear.", "time complexity: O(n)"])
    def test_invalid(self, text):
        assert not is_valid_report(text)


class TestAnalysisResult:
    def test_reason_defaults_to_none(self):
        result = AnalysisResult(result="r", success=True, source="primary")
        assert result.reason is None
        assert "reason" not in result.model_dump(exclude_none=True)

    def test_rejects_unknown_source(self):
        with pytest.raises(ValidationError):
            AnalysisResult(result="r", success=True, source="tertiary")

    def test_frozen(self):
        result = AnalysisResult(result="r", success=True, source="primary")
        with pytest.raises(ValidationError):
            result.success = False


def test_prompt_embeds_code_verbatim():
    code = "for (i=0;i<n;i++) {\n  x++;\n}"
    prompt = build_analysis_prompt(code)
    assert f"```\n{code}\n```" in prompt
    assert "Time Complexity:" in prompt
    assert "Space Complexity:" in prompt
