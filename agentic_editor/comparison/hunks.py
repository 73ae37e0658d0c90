"""
Hunk grouper — turns a line diff into display hunks and classified change
groups for document comparison.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from .diff_engine import ADDED, REMOVED, UNCHANGED, DiffLine, diff_lines

CONTEXT_LINES = 3
SUMMARY_WIDTH = 50

_CODE_PATTERN = re.compile(
    r"^(import|export|function|const|let|var|class|interface|type|def|async|await)"
)
_STRUCTURE_PATTERN = re.compile(r"^(#{1,6}\s|[-*]\s|\d+\.\s)")


@dataclass
class Hunk:
    """Contiguous changed lines plus surrounding unchanged context.

    Line ranges are inclusive and 1-indexed; an empty range on one side
    (pure insertion or deletion) has ``end == start - 1``.
    """
    start_left: int
    start_right: int
    end_left: int = 0
    end_right: int = 0
    lines: list[DiffLine] = field(default_factory=list)


@dataclass
class ChangeGroup:
    id: str
    type: str                 # addition | deletion
    category: str             # code | structure | formatting | content
    severity: str
    start_line: int
    end_line: int
    summary: str
    before_text: Optional[str] = None
    after_text: Optional[str] = None


@dataclass
class DiffStats:
    additions: int = 0
    deletions: int = 0
    modifications: int = 0    # always 0 at line granularity
    unchanged: int = 0


@dataclass
class ComparisonResult:
    hunks: list[Hunk] = field(default_factory=list)
    changes: list[ChangeGroup] = field(default_factory=list)
    stats: DiffStats = field(default_factory=DiffStats)
    similarity: float = 1.0


def detect_category(content: str) -> str:
    """Coarse category of a changed line from its leading tokens."""
    trimmed = content.strip()
    if _CODE_PATTERN.match(trimmed):
        return "code"
    if _STRUCTURE_PATTERN.match(trimmed):
        return "structure"
    if not trimmed:
        return "formatting"
    return "content"


def _summarize(prefix: str, content: str) -> str:
    suffix = "..." if len(content) > SUMMARY_WIDTH else ""
    return f"{prefix}: {content[:SUMMARY_WIDTH]}{suffix}"


def group_changes(diff: list[DiffLine]) -> ComparisonResult:
    """Group a diff into hunks and per-line change groups.

    Parameters
    ----------
    diff:
        Output of :func:`diff_lines`.

    Returns
    -------
    ComparisonResult
        Hunks, change groups, tallies and a 0-1 similarity score.
    """
    result = ComparisonResult()
    stats = result.stats

    current: Hunk | None = None
    trailing = 0
    # Unchanged lines not yet claimed by any hunk
    context: deque[DiffLine] = deque(maxlen=CONTEXT_LINES)
    left_seen = right_seen = 0

    def close(hunk: Hunk) -> None:
        hunk.end_left = left_seen
        hunk.end_right = right_seen
        result.hunks.append(hunk)

    for line in diff:
        if line.type == UNCHANGED:
            left_seen += 1
            right_seen += 1
            stats.unchanged += 1
            if current is None:
                context.append(line)
                continue
            current.lines.append(line)
            trailing += 1
            if trailing >= CONTEXT_LINES:
                close(current)
                current = None
            continue

        if current is None:
            current = Hunk(
                start_left=left_seen - len(context) + 1,
                start_right=right_seen - len(context) + 1,
                lines=list(context),
            )
            context.clear()
        trailing = 0

        change_id = f"change-{len(result.changes)}"
        if line.type == REMOVED:
            left_seen += 1
            stats.deletions += 1
            result.changes.append(ChangeGroup(
                id=change_id,
                type="deletion",
                category=detect_category(line.content),
                severity="moderate",
                start_line=left_seen,
                end_line=left_seen,
                summary=_summarize("Removed", line.content),
                before_text=line.content,
            ))
        elif line.type == ADDED:
            right_seen += 1
            stats.additions += 1
            result.changes.append(ChangeGroup(
                id=change_id,
                type="addition",
                category=detect_category(line.content),
                severity="moderate",
                start_line=right_seen,
                end_line=right_seen,
                summary=_summarize("Added", line.content),
                after_text=line.content,
            ))
        current.lines.append(line)

    if current is not None:
        close(current)

    total_lines = max(left_seen, right_seen)
    result.similarity = stats.unchanged / total_lines if total_lines else 1.0
    return result


def compare_documents(doc_a: str, doc_b: str) -> ComparisonResult:
    """Diff two documents and group the result."""
    return group_changes(diff_lines(doc_a, doc_b))
