"""
Three-way merge — reconciles two edited copies of a common base text.

Alignment is positional: line *i* of each side is compared with line *i*
of the base. Insertions or deletions that shift line numbers on one side
can therefore surface as conflicts further down.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .diff_engine import split_lines

logger = logging.getLogger(__name__)

MARKER_LEFT = "<<<<<<< LEFT"
MARKER_SEP = "======="
MARKER_RIGHT = ">>>>>>> RIGHT"


@dataclass
class MergeConflict:
    id: str
    start_line: int           # merged-output line of MARKER_LEFT
    end_line: int             # merged-output line of MARKER_RIGHT
    base_content: Optional[str]  # None where that side has no line
    left_content: Optional[str]
    right_content: Optional[str]


@dataclass
class MergeResult:
    success: bool
    merged_content: str
    conflicts: list[MergeConflict] = field(default_factory=list)


def _at(lines: list[str], idx: int) -> Optional[str]:
    return lines[idx] if idx < len(lines) else None


def three_way_merge(base: str, left: str, right: str) -> MergeResult:
    """Merge *left* and *right*, both derived from *base*.

    Parameters
    ----------
    base:
        Common ancestor text.
    left, right:
        Independently modified copies of *base*.

    Returns
    -------
    MergeResult
        ``success`` is True when no conflicts were recorded. Conflicting
        positions are written inline between conflict markers.
    """
    base_lines = split_lines(base)
    left_lines = split_lines(left)
    right_lines = split_lines(right)

    merged: list[str] = []
    conflicts: list[MergeConflict] = []

    # Guard against a cursor that stops advancing
    max_steps = len(base_lines) + len(left_lines) + len(right_lines)
    steps = 0
    idx = 0
    end = max(len(base_lines), len(left_lines), len(right_lines))

    while idx < end:
        steps += 1
        if steps > max_steps:
            logger.warning(
                "[Merge] Iteration cap %d reached at line %d, stopping",
                max_steps, idx + 1,
            )
            break

        # None means the side has no line here (exhausted)
        b = _at(base_lines, idx)
        l = _at(left_lines, idx)
        r = _at(right_lines, idx)

        if l == b and r == b:
            chosen = b
        elif r == b:
            chosen = l
        elif l == b:
            chosen = r
        elif l == r:
            chosen = l
        else:
            start = len(merged) + 1
            # An exhausted side contributes no line between the markers
            merged.append(MARKER_LEFT)
            if l is not None:
                merged.append(l)
            merged.append(MARKER_SEP)
            if r is not None:
                merged.append(r)
            merged.append(MARKER_RIGHT)
            conflicts.append(MergeConflict(
                id=f"conflict-{len(conflicts)}",
                start_line=start,
                end_line=len(merged),
                base_content=b,
                left_content=l,
                right_content=r,
            ))
            idx += 1
            continue

        if chosen is not None:
            merged.append(chosen)
        idx += 1

    if conflicts:
        logger.info("[Merge] %d conflict(s) need resolution", len(conflicts))

    return MergeResult(
        success=not conflicts,
        merged_content="\n".join(merged),
        conflicts=conflicts,
    )
