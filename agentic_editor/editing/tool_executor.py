"""
Tool executor — runs a parsed tool call against an in-memory document.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .search_replace import apply_search_replace
from .tool_parser import ToolCall

logger = logging.getLogger(__name__)

MUTATING_TOOLS = frozenset({"write_to_file", "replace_in_file"})


def _line_count(text: str) -> int:
    return len(text.split("\n"))


@dataclass
class ToolResult:
    """Outcome of one tool execution.

    ``content`` is the document after the tool ran; read-only tools return
    it unchanged.
    """
    success: bool
    message: str = ""
    content: str = ""
    matches: list[tuple[int, str]] = field(default_factory=list)
    error: Optional[str] = None


class ToolExecutor:
    """Execute document tools without touching the file system."""

    def execute(self, call: ToolCall, document: str) -> ToolResult:
        handler = getattr(self, f"_tool_{call.tool}", None)
        if handler is None:
            return ToolResult(
                success=False,
                content=document,
                error=f"Unsupported tool: {call.tool}",
            )
        logger.debug("[ToolExecutor] Running %s", call.tool)
        return handler(call.params, document)

    @staticmethod
    def _tool_read_file(params: dict[str, str], document: str) -> ToolResult:
        return ToolResult(
            success=True,
            message=f"Read {_line_count(document)} lines",
            content=document,
        )

    @staticmethod
    def _tool_write_to_file(params: dict[str, str], document: str) -> ToolResult:
        new_content = params.get("content", "")
        return ToolResult(
            success=True,
            message=f"File written with {_line_count(new_content)} lines",
            content=new_content,
        )

    @staticmethod
    def _tool_replace_in_file(params: dict[str, str], document: str) -> ToolResult:
        replaced = apply_search_replace(document, params.get("content", ""))
        return ToolResult(
            success=replaced.success,
            message=replaced.message,
            content=replaced.content,
            error=None if replaced.success else replaced.message,
        )

    @staticmethod
    def _tool_search_files(params: dict[str, str], document: str) -> ToolResult:
        try:
            pattern = re.compile(params.get("pattern", ""), re.IGNORECASE)
        except re.error as exc:
            logger.warning("[ToolExecutor] Invalid search pattern: %s", exc)
            return ToolResult(
                success=False,
                content=document,
                error=f"Invalid regex pattern: {exc}. Try using a simpler search term.",
            )

        matches = [
            (idx, line)
            for idx, line in enumerate(document.split("\n"), start=1)
            if pattern.search(line)
        ]
        return ToolResult(
            success=True,
            message=f"Found {len(matches)} matches",
            content=document,
            matches=matches,
        )
