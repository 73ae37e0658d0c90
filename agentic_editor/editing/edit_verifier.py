"""
Edit verifier — sanity-checks the delta between two document versions
before the orchestrator accepts an applied edit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..language import bracket_pairs_for

logger = logging.getLogger(__name__)

DEFAULT_CHANGE_RATIO_THRESHOLD = 0.5
REWRITE_KEYWORD = "rewrite"

UNEXPECTED_CHANGE_PENALTY = 0.7
SYNTAX_PENALTY = 0.6
WARNING_PENALTY = 0.9

_QUOTES = ("'", '"', "`")


@dataclass
class VerifyResult:
    """Summary of an applied edit. ``valid`` is False when nothing changed."""
    valid: bool
    changes_count: int
    added_lines: int
    removed_lines: int
    unexpected_changes: bool = False
    syntax_valid: bool = True
    confidence: float = 1.0
    warnings: list[str] = field(default_factory=list)
    diff_summary: str = ""


def count_line_changes(before: str, after: str) -> tuple[int, int]:
    """Count distinct lines added and removed between two texts.

    Membership is checked against the *set* of lines on the other side, so
    a moved line counts as neither added nor removed, and duplicate lines
    are counted once.
    """
    before_lines = set(before.split("\n"))
    after_lines = set(after.split("\n"))
    added = len(after_lines - before_lines)
    removed = len(before_lines - after_lines)
    return added, removed


def check_bracket_balance(content: str, pairs: tuple[tuple[str, str], ...]) -> bool:
    """Return True when every bracket in *pairs* is closed in order.

    Characters inside single, double or backtick quoted spans are skipped;
    a quote preceded by a backslash does not open or close a span.
    """
    open_to_close = {o: c for o, c in pairs}
    close_to_open = {c: o for o, c in pairs}
    stack: list[str] = []
    quote: str | None = None

    prev = ""
    for char in content:
        if char in _QUOTES and prev != "\\":
            if quote is None:
                quote = char
            elif char == quote:
                quote = None
            prev = char
            continue
        prev = char

        if quote is not None:
            continue

        if char in open_to_close:
            stack.append(char)
        elif char in close_to_open:
            if not stack or stack.pop() != close_to_open[char]:
                return False

    return not stack


class EditVerifier:
    """Verify that an edit produced a plausible change."""

    def __init__(
        self,
        change_ratio_threshold: float = DEFAULT_CHANGE_RATIO_THRESHOLD,
    ) -> None:
        self._ratio_threshold = change_ratio_threshold

    def verify(
        self,
        before: str,
        after: str,
        intent: str,
        language: Optional[str] = None,
    ) -> VerifyResult:
        """Compare *before* and *after* and score the edit.

        Parameters
        ----------
        before, after:
            Document text before and after the edit.
        intent:
            Description of the requested edit. Mentioning "rewrite"
            excuses a large change ratio.
        language:
            Optional language tag enabling the bracket balance check.

        Returns
        -------
        VerifyResult
            Always returned; verification problems are reported in the
            result, never raised.
        """
        added, removed = count_line_changes(before, after)
        changes_count = added + removed

        if changes_count == 0:
            logger.warning("[Verify] Edit produced no changes")
            return VerifyResult(
                valid=False,
                changes_count=0,
                added_lines=0,
                removed_lines=0,
                confidence=0.0,
                warnings=["Edit produced no changes - SEARCH text may not have matched"],
                diff_summary="No changes detected",
            )

        warnings: list[str] = []

        total_lines = len(before.split("\n"))
        change_ratio = changes_count / total_lines
        unexpected = (
            change_ratio > self._ratio_threshold
            and REWRITE_KEYWORD not in intent.lower()
        )
        if unexpected:
            warnings.append(
                f"Large change ratio: {round(change_ratio * 100)}% of document modified"
            )

        syntax_valid = True
        pairs = bracket_pairs_for(language)
        if pairs is not None:
            syntax_valid = check_bracket_balance(after, pairs)
            if not syntax_valid:
                warnings.append("Syntax validation failed - output may have errors")

        confidence = 1.0
        if unexpected:
            confidence *= UNEXPECTED_CHANGE_PENALTY
        if not syntax_valid:
            confidence *= SYNTAX_PENALTY
        if warnings:
            confidence *= WARNING_PENALTY

        if warnings:
            logger.info("[Verify] %s", "; ".join(warnings))

        return VerifyResult(
            valid=True,
            changes_count=changes_count,
            added_lines=added,
            removed_lines=removed,
            unexpected_changes=unexpected,
            syntax_valid=syntax_valid,
            confidence=confidence,
            warnings=warnings,
            diff_summary=f"+{added} lines, -{removed} lines",
        )
