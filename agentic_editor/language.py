"""
Language hints — maps free-form language tags and file extensions to the
bracket families used by the edit verifier's balance check.
"""

import os

# ── Extension → Language mapping ──

EXTENSION_MAP = {
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "javascript",
    ".tsx": "typescript",
    ".json": "json",
    ".mjs": "javascript",
    ".cjs": "javascript",
}


# ── Tag aliases → canonical language ──

LANGUAGE_ALIASES = {
    "python": "python",
    "py": "python",
    "javascript": "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "typescript": "typescript",
    "ts": "typescript",
    "tsx": "typescript",
    "json": "json",
}


# ── Bracket families per language ──

_CURLY = ("{", "}")
_SQUARE = ("[", "]")
_ROUND = ("(", ")")

BRACKET_FAMILIES = {
    "javascript": (_CURLY, _SQUARE, _ROUND),
    "typescript": (_CURLY, _SQUARE, _ROUND),
    "json": (_CURLY, _SQUARE, _ROUND),
    "python": (_ROUND, _SQUARE, _CURLY),
}


def normalize_language(tag: str | None) -> str | None:
    """Return the canonical language for a tag, or None if unknown.

    Matching is case-insensitive and ignores surrounding whitespace.
    """
    if not tag:
        return None
    return LANGUAGE_ALIASES.get(tag.strip().lower())


def language_from_path(path: str) -> str | None:
    """Guess the language of a document from its file extension."""
    ext = os.path.splitext(path)[1].lower()
    return EXTENSION_MAP.get(ext)


def bracket_pairs_for(tag: str | None) -> tuple[tuple[str, str], ...] | None:
    """Bracket pairs to balance-check for *tag*, or None to skip the check."""
    language = normalize_language(tag)
    if language is None:
        return None
    return BRACKET_FAMILIES.get(language)
