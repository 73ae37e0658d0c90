"""
Diff engine — line-level edit script between two texts, computed from a
longest-common-subsequence table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

UNCHANGED = "unchanged"
ADDED = "added"
REMOVED = "removed"


@dataclass(frozen=True)
class DiffLine:
    """One line of an edit script with its 1-indexed position on each side."""
    type: str                     # unchanged | added | removed
    content: str
    left_line: Optional[int] = None
    right_line: Optional[int] = None


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only; a trailing newline yields a final empty line."""
    return text.split("\n")


def compute_lcs_table(a: list[str], b: list[str]) -> list[list[int]]:
    """Return the ``(len(a)+1) x (len(b)+1)`` LCS length table."""
    m, n = len(a), len(b)
    dp = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        row, prev = dp[i], dp[i - 1]
        ai = a[i - 1]
        for j in range(1, n + 1):
            if ai == b[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    return dp


def _backtrack(
    a: list[str], b: list[str], dp: list[list[int]],
) -> list[tuple[str, str]]:
    """Walk the table from the bottom-right corner back to the origin.

    On a tie between moving left and moving up, the added line wins.
    """
    ops: list[tuple[str, str]] = []
    i, j = len(a), len(b)

    while i > 0 or j > 0:
        if i > 0 and j > 0 and a[i - 1] == b[j - 1]:
            ops.append((UNCHANGED, a[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i][j - 1] >= dp[i - 1][j]):
            ops.append((ADDED, b[j - 1]))
            j -= 1
        else:
            ops.append((REMOVED, a[i - 1]))
            i -= 1

    ops.reverse()
    return ops


def diff_lines(a: str, b: str) -> list[DiffLine]:
    """Compute the line diff turning *a* into *b*.

    Parameters
    ----------
    a:
        The original (left) text.
    b:
        The new (right) text.

    Returns
    -------
    list[DiffLine]
        Edit script in document order. Identical inputs give identical
        output; the tie-break policy is part of the contract.
    """
    lines_a = split_lines(a)
    lines_b = split_lines(b)
    dp = compute_lcs_table(lines_a, lines_b)

    result: list[DiffLine] = []
    left = right = 1
    for kind, content in _backtrack(lines_a, lines_b, dp):
        if kind == UNCHANGED:
            result.append(DiffLine(kind, content, left_line=left, right_line=right))
            left += 1
            right += 1
        elif kind == REMOVED:
            result.append(DiffLine(kind, content, left_line=left))
            left += 1
        else:
            result.append(DiffLine(kind, content, right_line=right))
            right += 1

    return result


def reconstruct_left(diff: list[DiffLine]) -> str:
    """Rebuild the original text from unchanged + removed lines."""
    return "\n".join(d.content for d in diff if d.type != ADDED)


def reconstruct_right(diff: list[DiffLine]) -> str:
    """Rebuild the new text from unchanged + added lines."""
    return "\n".join(d.content for d in diff if d.type != REMOVED)
