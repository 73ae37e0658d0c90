"""Document comparison — LCS line diff, hunk grouping and three-way merge."""

from .diff_engine import DiffLine, diff_lines, reconstruct_left, reconstruct_right
from .hunks import (
    ChangeGroup, ComparisonResult, DiffStats, Hunk,
    compare_documents, detect_category, group_changes,
)
from .merge import MergeConflict, MergeResult, three_way_merge

__all__ = [
    "DiffLine", "diff_lines", "reconstruct_left", "reconstruct_right",
    "Hunk", "ChangeGroup", "DiffStats", "ComparisonResult",
    "group_changes", "compare_documents", "detect_category",
    "MergeConflict", "MergeResult", "three_way_merge",
]
