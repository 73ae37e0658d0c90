"""
CLI display — logger setup and ANSI rendering of comparison hunks and merge
results for the terminal.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

from .comparison import ComparisonResult, MergeResult
from .comparison.diff_engine import ADDED, REMOVED

_BOLD = "\033[1m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


def setup_logger(log_dir: str = ".agentic_editor/logs") -> logging.Logger:
    """Attach a file handler to the package logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"editor_{timestamp}.log")

    logger = logging.getLogger("agentic_editor")
    logger.setLevel(logging.DEBUG)

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def _paint(text: str, code: str, color: bool) -> str:
    return f"{code}{text}{_RESET}" if color else text


def format_comparison(
    result: ComparisonResult,
    left_name: str = "a",
    right_name: str = "b",
    color: bool = True,
) -> str:
    """Render hunks in unified-diff style.

    Green for additions (+), red for deletions (-), cyan for @@ headers.
    """
    out: list[str] = [
        _paint(f"--- {left_name}", _BOLD, color),
        _paint(f"+++ {right_name}", _BOLD, color),
    ]
    for hunk in result.hunks:
        left_len = hunk.end_left - hunk.start_left + 1
        right_len = hunk.end_right - hunk.start_right + 1
        header = (
            f"@@ -{hunk.start_left},{left_len} "
            f"+{hunk.start_right},{right_len} @@"
        )
        out.append(_paint(header, _CYAN, color))
        for line in hunk.lines:
            if line.type == ADDED:
                out.append(_paint(f"+{line.content}", _GREEN, color))
            elif line.type == REMOVED:
                out.append(_paint(f"-{line.content}", _RED, color))
            else:
                out.append(f" {line.content}")

    stats = result.stats
    out.append("")
    out.append(
        f"{stats.additions} addition(s), {stats.deletions} deletion(s), "
        f"{stats.unchanged} unchanged, similarity {result.similarity * 100:.1f}%"
    )
    return "\n".join(out)


def format_merge_summary(result: MergeResult, color: bool = True) -> str:
    """One line per conflict, or a clean-merge notice."""
    if result.success:
        return _paint("Merged cleanly", _GREEN, color)

    lines = [_paint(f"{len(result.conflicts)} conflict(s)", _YELLOW, color)]
    for conflict in result.conflicts:
        lines.append(
            f"  {conflict.id}: lines {conflict.start_line}-{conflict.end_line} "
            f"(base: {conflict.base_content!r})"
        )
    return "\n".join(lines)
