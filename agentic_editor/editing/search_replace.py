"""
SEARCH/REPLACE blocks — parses the ``replace_in_file`` payload and applies
its blocks to an in-memory document.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# <<<<<<< SEARCH / ======= REPLACE / >>>>>>> REPLACE, tolerant of marker
# length and surrounding whitespace
_BLOCK_PATTERN = re.compile(
    r"<<<+\s*SEARCH\s*\n(.*?)\n\s*=+\s*REPLACE\s*\n(.*?)\n\s*>+\s*REPLACE",
    re.DOTALL,
)

FORMAT_HINT = (
    "Use format: <<<<<<< SEARCH\n[old text]\n======= REPLACE\n"
    "[new text]\n>>>>>>> REPLACE"
)
_PREVIEW_WIDTH = 50


@dataclass
class SearchReplaceBlock:
    """One search text and the text that should replace it."""
    search: str
    replace: str


@dataclass
class ReplaceResult:
    """Outcome of applying a set of blocks to a document."""
    success: bool = False
    content: str = ""
    applied: int = 0
    failed: list[str] = field(default_factory=list)
    message: str = ""


def format_block(search: str, replace: str) -> str:
    """Render a block in the canonical marker layout."""
    return f"<<<<<<< SEARCH\n{search}\n======= REPLACE\n{replace}\n>>>>>>> REPLACE"


def parse_blocks(content: str) -> list[SearchReplaceBlock]:
    """Extract every SEARCH/REPLACE block from *content*, in order."""
    return [
        SearchReplaceBlock(search=m.group(1), replace=m.group(2))
        for m in _BLOCK_PATTERN.finditer(content)
    ]


def apply_blocks(document: str, blocks: list[SearchReplaceBlock]) -> ReplaceResult:
    """Apply *blocks* to *document* one after another.

    Each block replaces the first literal occurrence of its trimmed search
    text. Blocks whose search text is not found are skipped and reported.

    Parameters
    ----------
    document:
        Current document text.
    blocks:
        Blocks from :func:`parse_blocks`.

    Returns
    -------
    ReplaceResult
        ``success`` is True when at least one block was applied; ``content``
        always holds the resulting text.
    """
    result = ReplaceResult(content=document)

    if not blocks:
        result.message = f"No valid SEARCH/REPLACE blocks found. {FORMAT_HINT}"
        return result

    working = document
    for block in blocks:
        search = block.search.strip()
        replace = block.replace.strip()

        idx = working.find(search) if search else -1
        if idx == -1:
            result.failed.append(search[:_PREVIEW_WIDTH])
            logger.warning(
                "[SearchReplace] Search text not found: %r",
                search[:_PREVIEW_WIDTH],
            )
            continue

        working = working[:idx] + replace + working[idx + len(search):]
        result.applied += 1

    result.content = working
    result.success = result.applied > 0
    if result.failed:
        result.message = (
            f"Applied {result.applied}/{len(blocks)} replacement(s). "
            f"Failed: {len(result.failed)}"
        )
    else:
        result.message = f"Applied {result.applied} replacement(s)"
    return result


def apply_search_replace(document: str, content: str) -> ReplaceResult:
    """Parse *content* and apply its blocks to *document*."""
    return apply_blocks(document, parse_blocks(content))
