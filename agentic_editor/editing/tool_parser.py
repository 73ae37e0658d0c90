"""
Tool-call parser — extracts a structured tool invocation from raw model
output using a cascade of increasingly permissive passes.

Pass order (first success wins):

1. Exact match of the first ``<tag>...</tag>`` pair.
2. Exact match after textual repairs (confidence x 0.9).
3. Fuzzy match tolerating a missing close tag (confidence 0.7).
4. Bare SEARCH/REPLACE block extraction (confidence 0.6).
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from typing import Union

from .search_replace import FORMAT_HINT, format_block

logger = logging.getLogger(__name__)

TOOL_NAMES = ("read_file", "write_to_file", "replace_in_file", "search_files")

CORRECTED_PENALTY = 0.9
FUZZY_CONFIDENCE = 0.7
PATTERN_CONFIDENCE = 0.6

# Known misspellings of tool tags
TYPO_FIXES = {
    "replace_file": "replace_in_file",
    "replaceinfile": "replace_in_file",
    "file_replace": "replace_in_file",
    "readfile": "read_file",
    "writefile": "write_to_file",
    "write_file": "write_to_file",
    "searchfiles": "search_files",
    "search_file": "search_files",
    "find_files": "search_files",
}

_TAG_PAIR = re.compile(r"<(\w+)>(.*?)</\1>", re.DOTALL)
_TAG_TOKEN = re.compile(r"<(/?)(\w+)>")
_OPEN_TAG_SPACES = re.compile(r"<\s+(\w+)\s*>|<(\w+)\s+>")
_CLOSE_TAG_SPACES = re.compile(r"<\s*/\s*(\w+)\s*>")
_SEARCH_REPLACE = re.compile(
    r"<<<+\s*SEARCH\s*\n(.*?)\n\s*=+\s*REPLACE\s*\n(.*?)\n\s*>>>+",
    re.DOTALL | re.IGNORECASE,
)
_FUZZY_PATTERNS = {
    tool: re.compile(rf"<{tool}>(.*?)(?:</{tool}>|\Z)", re.DOTALL | re.IGNORECASE)
    for tool in TOOL_NAMES
}

NO_TOOL_CALL = "No valid tool call found in response"


@dataclass(frozen=True)
class ToolCall:
    """A validated tool invocation."""
    tool: str
    params: dict[str, str]
    raw_span: str
    confidence: float = 1.0
    corrections: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParseSuccess:
    tool_call: ToolCall
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    suggestions: list[str] = field(default_factory=list)
    success: bool = field(default=False, init=False)


ParseOutcome = Union[ParseSuccess, ParseFailure]


def extract_params(content: str) -> dict[str, str]:
    """Collect nested ``<key>value</key>`` pairs from a tool body.

    A body with no nested tags but some text becomes ``{"content": text}``.
    """
    params: dict[str, str] = {}
    for match in _TAG_PAIR.finditer(content):
        params[match.group(1)] = match.group(2).strip()

    if not params and content.strip():
        params["content"] = content.strip()
    return params


def validate_params(tool: str, params: dict[str, str]) -> tuple[str, list[str]] | None:
    """Check the required-field contract of *tool*.

    Returns ``(error, suggestions)`` when invalid, otherwise None.
    """
    if tool == "read_file":
        if not params.get("path", "").strip():
            return (
                "read_file requires a <path> parameter",
                ["Add <path>filename</path> inside the tool tag"],
            )
    elif tool == "write_to_file":
        # Empty content is a legitimate "clear the document" write
        if not params.get("path", "").strip() or "content" not in params:
            return (
                "write_to_file requires <path> and <content> parameters",
                ["Ensure both <path> and <content> are provided"],
            )
    elif tool == "replace_in_file":
        content = params.get("content", "")
        if not content:
            return (
                "replace_in_file requires a <content> parameter with SEARCH/REPLACE blocks",
                ["Include <<<<<<< SEARCH ... ======= REPLACE ... >>>>>>> REPLACE pattern"],
            )
        if "SEARCH" not in content or "REPLACE" not in content:
            return (
                "replace_in_file content must include SEARCH and REPLACE markers",
                [FORMAT_HINT],
            )
    elif tool == "search_files":
        if not params.get("pattern", "").strip():
            return (
                "search_files requires a <pattern> parameter",
                ["Add <pattern>search term</pattern> inside the tool tag"],
            )
    return None


class ToolParser:
    """Parse tool calls out of unreliable model output."""

    def parse(self, response: str) -> ParseOutcome:
        """Run the pass cascade over *response*.

        Parameters
        ----------
        response:
            Raw model output.

        Returns
        -------
        ParseOutcome
            :class:`ParseSuccess` from the first pass that produced a valid
            call, otherwise a :class:`ParseFailure` with suggestions.
        """
        # Pass 1
        first = self._try_exact_match(response)
        if isinstance(first, ParseSuccess):
            logger.debug("[ToolParser] Exact match: %s", first.tool_call.tool)
            return first

        # Pass 2
        corrections: list[str] = []
        corrected = self._fix_common_mistakes(response, corrections)
        if corrected != response:
            outcome = self._try_exact_match(corrected)
            if isinstance(outcome, ParseSuccess):
                call = dataclasses.replace(
                    outcome.tool_call,
                    confidence=outcome.tool_call.confidence * CORRECTED_PENALTY,
                    corrections=list(corrections),
                )
                logger.info(
                    "[ToolParser] Parsed %s after corrections: %s",
                    call.tool, "; ".join(corrections),
                )
                return ParseSuccess(call)

        # Pass 3
        fuzzy = self._try_fuzzy_match(response)
        if fuzzy is not None:
            logger.info("[ToolParser] Fuzzy matched %s", fuzzy.tool_call.tool)
            return fuzzy

        # Pass 4
        extracted = self._try_pattern_extraction(response)
        if extracted is not None:
            logger.info("[ToolParser] Extracted bare SEARCH/REPLACE block")
            return extracted

        reason = NO_TOOL_CALL
        suggestions: list[str] = []
        if first is not None:
            reason = first.reason
            suggestions.extend(first.suggestions)
        for hint in self._generate_suggestions(response):
            if hint not in suggestions:
                suggestions.append(hint)

        logger.warning("[ToolParser] Parse failed: %s", reason)
        return ParseFailure(reason=reason, suggestions=suggestions)

    # ------------------------------------------------------------------
    # Pass 1: exact match
    # ------------------------------------------------------------------

    def _try_exact_match(self, response: str) -> ParseOutcome | None:
        """Parse the first tag pair. None when there is no tag pair at all."""
        match = _TAG_PAIR.search(response)
        if match is None:
            return None

        tool, body = match.group(1), match.group(2)
        if tool not in TOOL_NAMES:
            return ParseFailure(
                reason=f"Unknown tool: {tool}",
                suggestions=[f"Did you mean one of: {', '.join(TOOL_NAMES)}?"],
            )

        params = extract_params(body)
        invalid = validate_params(tool, params)
        if invalid is not None:
            error, suggestions = invalid
            return ParseFailure(reason=error, suggestions=suggestions)

        return ParseSuccess(ToolCall(
            tool=tool,
            params=params,
            raw_span=match.group(0),
            confidence=1.0,
            corrections=[],
        ))

    # ------------------------------------------------------------------
    # Pass 2: repairs
    # ------------------------------------------------------------------

    def _fix_common_mistakes(self, response: str, corrections: list[str]) -> str:
        """Apply the repair battery, recording each repair that changed the text."""
        fixed = _OPEN_TAG_SPACES.sub(lambda m: f"<{m.group(1) or m.group(2)}>", response)
        fixed = _CLOSE_TAG_SPACES.sub(r"</\1>", fixed)
        if fixed != response:
            corrections.append("Removed stray whitespace inside tags")

        for typo, correct in TYPO_FIXES.items():
            open_pattern = re.compile(rf"<{typo}>", re.IGNORECASE)
            if open_pattern.search(fixed):
                fixed = open_pattern.sub(f"<{correct}>", fixed)
                fixed = re.sub(rf"</{typo}>", f"</{correct}>", fixed, flags=re.IGNORECASE)
                corrections.append(f"Fixed typo: {typo} -> {correct}")

        for tool in TOOL_NAMES:
            open_tag, close_tag = f"<{tool}>", f"</{tool}>"
            if open_tag not in fixed or close_tag in fixed:
                continue
            start = fixed.index(open_tag) + len(open_tag)
            insert_at = self._closing_tag_position(fixed, start)
            fixed = fixed[:insert_at] + close_tag + fixed[insert_at:]
            if insert_at >= len(fixed) - len(close_tag):
                corrections.append(f"Appended missing closing tag: {close_tag}")
            else:
                corrections.append(f"Added missing closing tag: {close_tag}")

        return fixed

    @staticmethod
    def _closing_tag_position(text: str, start: int) -> int:
        """Where a missing tool close tag belongs.

        Scans forward from *start* for the next tag token, stepping over
        complete ``<key>...</key>`` parameter elements. Falls back to the
        end of the text.
        """
        pos = start
        while True:
            token = _TAG_TOKEN.search(text, pos)
            if token is None:
                return len(text)
            is_close, name = token.group(1), token.group(2)
            if is_close or name in TOOL_NAMES:
                return token.start()
            close = f"</{name}>"
            close_idx = text.find(close, token.end())
            if close_idx == -1:
                return token.start()
            pos = close_idx + len(close)

    # ------------------------------------------------------------------
    # Pass 3: fuzzy
    # ------------------------------------------------------------------

    def _try_fuzzy_match(self, response: str) -> ParseSuccess | None:
        """Accept the first known tool tag, closed or not.

        Tag structure is not checked, but the required fields still are.
        """
        for tool, pattern in _FUZZY_PATTERNS.items():
            match = pattern.search(response)
            if match is None:
                continue
            params = extract_params(match.group(1))
            if validate_params(tool, params) is not None:
                logger.debug("[ToolParser] Fuzzy candidate %s lacks required params", tool)
                continue
            return ParseSuccess(ToolCall(
                tool=tool,
                params=params,
                raw_span=match.group(0),
                confidence=FUZZY_CONFIDENCE,
                corrections=["Fuzzy matched with possible missing close tag"],
            ))
        return None

    # ------------------------------------------------------------------
    # Pass 4: bare SEARCH/REPLACE
    # ------------------------------------------------------------------

    def _try_pattern_extraction(self, response: str) -> ParseSuccess | None:
        match = _SEARCH_REPLACE.search(response)
        if match is None:
            return None
        return ParseSuccess(ToolCall(
            tool="replace_in_file",
            params={"content": format_block(match.group(1), match.group(2))},
            raw_span=match.group(0),
            confidence=PATTERN_CONFIDENCE,
            corrections=["Extracted SEARCH/REPLACE pattern without XML wrapper"],
        ))

    # ------------------------------------------------------------------
    # Failure hints
    # ------------------------------------------------------------------

    @staticmethod
    def _generate_suggestions(response: str) -> list[str]:
        suggestions: list[str] = []

        if "<" not in response:
            suggestions.append(
                "Response is not in tag format - use <tool_name>...</tool_name>"
            )

        if "```" in response:
            suggestions.append(
                "Don't wrap tool calls in markdown code fences"
            )

        lowered = response.lower()
        if any(t in lowered or t.replace("_", " ") in lowered for t in TOOL_NAMES):
            suggestions.append(
                "Tool was mentioned in text but not invoked with tags"
            )

        return suggestions
