"""
agentic_editor — resilient tool-call parsing, edit verification, checkpoints
and document diff/merge for agent-driven document editing.

Public API for library usage::

    from agentic_editor import ToolParser, EditVerifier, CheckpointManager

    outcome = ToolParser().parse(model_output)
    if outcome.success:
        call = outcome.tool_call
"""

from .checkpoint import Checkpoint, CheckpointManager, RollbackResult
from .comparison import compare_documents, diff_lines, three_way_merge
from .editing import (
    EditSession, EditVerifier, ParseFailure, ParseSuccess, ToolCall,
    ToolExecutor, ToolParser, VerifyResult,
)

__all__ = [
    "Checkpoint", "CheckpointManager", "RollbackResult",
    "compare_documents", "diff_lines", "three_way_merge",
    "EditSession", "EditVerifier", "ParseFailure", "ParseSuccess",
    "ToolCall", "ToolExecutor", "ToolParser", "VerifyResult",
]
