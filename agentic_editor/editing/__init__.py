"""Agent edit pipeline — tool-call parsing, edit application and verification."""

from .tool_parser import (
    TOOL_NAMES, ToolCall, ToolParser, ParseOutcome, ParseSuccess, ParseFailure,
)
from .edit_verifier import EditVerifier, VerifyResult, check_bracket_balance
from .search_replace import (
    SearchReplaceBlock, ReplaceResult, apply_blocks, apply_search_replace,
    format_block, parse_blocks,
)
from .tool_executor import ToolExecutor, ToolResult
from .session import EditSession, StepOutcome
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "TOOL_NAMES", "ToolCall", "ToolParser",
    "ParseOutcome", "ParseSuccess", "ParseFailure",
    "EditVerifier", "VerifyResult", "check_bracket_balance",
    "SearchReplaceBlock", "ReplaceResult", "apply_blocks",
    "apply_search_replace", "format_block", "parse_blocks",
    "ToolExecutor", "ToolResult",
    "EditSession", "StepOutcome",
    "log_edit_metric", "read_edit_stats",
]
