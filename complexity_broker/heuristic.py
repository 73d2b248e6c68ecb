"""
Local heuristic complexity analyzer.

Used when no remote backend produced a usable answer. It only pattern-matches
the source text, so the estimate is rough: rules are applied in order and a
later match overrides an earlier one. Space is always reported as O(1).

Bracket pairs, line indentation and call sites are indexed once per input, so
every rule runs in roughly linear time whatever the snippet looks like.
"""
from __future__ import annotations

import re
from bisect import bisect_left, bisect_right
from collections import defaultdict
from typing import Optional

from complexity_broker.models import ComplexityReport

CONSTANT = "O(1)"
LINEAR = "O(n)"
QUADRATIC = "O(n^2)"
LINEARITHMIC = "O(n log n)"
EXPONENTIAL = "O(2^n)"

_LOOP_OPENER = re.compile(r"\b(for|while)\s*\(")
_FUNCTION_DEF = re.compile(r"\b(function|def)\s+([A-Za-z_]\w*)\s*\(")
_CALL_SITE = re.compile(r"\b([A-Za-z_]\w*)\s*\(")
_BRACKET = re.compile(r"[(){}]")

NLOGN_KEYWORDS = ("merge", "quick", "sort", "binary", "log")
EXPONENTIAL_KEYWORDS = ("recursion", "fibonacci", "factorial", "dp", "memo")


class _SourceIndex:
    """Positions of matching brackets, semicolons, loops and call sites."""

    def __init__(self, code: str):
        self.code = code
        self.closing: dict[int, int] = {}
        self._pair_brackets()
        self.semicolons = [i for i, ch in enumerate(code) if ch == ";"]
        self.loop_starts = [m.start() for m in _LOOP_OPENER.finditer(code)]
        self.calls: dict[str, list[int]] = defaultdict(list)
        for m in _CALL_SITE.finditer(code):
            self.calls[m.group(1)].append(m.start(1))

    def _pair_brackets(self) -> None:
        stacks: dict[str, list[int]] = {"(": [], "{": []}
        openers = {")": "(", "}": "{"}
        for m in _BRACKET.finditer(self.code):
            ch = m.group()
            if ch in stacks:
                stacks[ch].append(m.start())
            elif stacks[openers[ch]]:
                self.closing[stacks[openers[ch]].pop()] = m.start()

    def count_between(self, positions: list[int], start: int, end: int) -> int:
        """Number of positions strictly inside (start, end)."""
        return bisect_left(positions, end) - bisect_right(positions, start)

    def block_after(self, pos: int) -> Optional[tuple[int, int]]:
        """Span of the {...} block opening at the first non-space char from pos."""
        while pos < len(self.code) and self.code[pos].isspace():
            pos += 1
        if pos < len(self.code) and self.code[pos] == "{" and pos in self.closing:
            return pos, self.closing[pos]
        return None


def _loop_headers(index: _SourceIndex):
    """Yield (keyword, open paren, close paren) for each loop with a closed header."""
    for m in _LOOP_OPENER.finditer(index.code):
        open_paren = m.end() - 1
        close_paren = index.closing.get(open_paren)
        if close_paren is not None:
            yield m.group(1), open_paren, close_paren


def _has_counted_loop(index: _SourceIndex) -> bool:
    # for (init; cond; step) or while (cond)
    for keyword, open_paren, close_paren in _loop_headers(index):
        if keyword == "while" or index.count_between(index.semicolons, open_paren, close_paren) >= 2:
            return True
    return False


def _has_nested_loop(index: _SourceIndex) -> bool:
    for _, _, close_paren in _loop_headers(index):
        body = index.block_after(close_paren + 1)
        if body and index.count_between(index.loop_starts, *body):
            return True
    return False


def _indented_block_ends(code: str) -> dict[int, int]:
    """
    Map each non-blank line's start offset to the offset where its indented
    block ends: the start of the next non-blank line indented no deeper.
    """
    starts, indents = [], []
    offset = 0
    for line in code.split("\n"):
        if line.strip():
            starts.append(offset)
            indents.append(len(line) - len(line.lstrip()))
        offset += len(line) + 1

    ends: dict[int, int] = {}
    pending: list[int] = []
    for i, indent in enumerate(indents):
        while pending and indents[pending[-1]] >= indent:
            ends[starts[pending.pop()]] = starts[i]
        pending.append(i)
    for i in pending:
        ends[starts[i]] = len(code)
    return ends


def _calls_itself(index: _SourceIndex) -> bool:
    """True if a named function calls itself inside its own body."""
    code = index.code
    block_ends: Optional[dict[int, int]] = None

    for m in _FUNCTION_DEF.finditer(code):
        keyword, name = m.group(1), m.group(2)
        if keyword == "def":
            if block_ends is None:
                block_ends = _indented_block_ends(code)
            line_start = code.rfind("\n", 0, m.start()) + 1
            body = (m.end(), block_ends.get(line_start, len(code)))
        else:
            close_paren = index.closing.get(m.end() - 1)
            body = index.block_after(close_paren + 1) if close_paren is not None else None
        if body and index.count_between(index.calls.get(name, []), *body):
            return True
    return False


def estimate_time(code: str) -> str:
    lowered = code.lower()
    index = _SourceIndex(code)
    time = CONSTANT

    if _has_counted_loop(index):
        time = LINEAR
    if _has_nested_loop(index):
        time = QUADRATIC
    if any(keyword in lowered for keyword in NLOGN_KEYWORDS):
        time = LINEARITHMIC
    if any(keyword in lowered for keyword in EXPONENTIAL_KEYWORDS) or _calls_itself(index):
        time = EXPONENTIAL

    return time


def analyze(code: str) -> ComplexityReport:
    """
    Estimate complexity without any network access.

    Args:
        code: Source code in any language

    Returns:
        ComplexityReport; never raises
    """
    return ComplexityReport(time=estimate_time(code), space=CONSTANT)
