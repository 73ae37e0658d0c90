"""
Edit metrics — records parse/verify outcomes of each edit iteration in a
JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".agentic_editor"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(project_root: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, _METRICS_DIR, _METRICS_FILE)


def log_edit_metric(data: dict, project_root: str | None = None) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (tool, parse_success, confidence, accepted, ...).
    project_root:
        Optional root directory. Defaults to CWD.
    """
    path = _metrics_path(project_root)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Metrics] Failed to write metrics: %s", exc)


def _read_entries(path: str) -> list[dict]:
    entries: list[dict] = []
    if not os.path.isfile(path):
        return entries
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    except OSError as exc:
        logger.warning("[Metrics] Failed to read metrics: %s", exc)
    return entries


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_edits``, ``avg_confidence``, ``accept_rate`` and
        ``parse_failure_rate`` (percentages) and ``tools`` (percent share
        per tool name).
    """
    entries = _read_entries(_metrics_path(project_root))[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "avg_confidence": 0.0,
            "accept_rate": 0.0,
            "parse_failure_rate": 0.0,
            "tools": {},
        }

    total = len(entries)
    confidences = [e["confidence"] for e in entries if "confidence" in e]
    accepted = sum(1 for e in entries if e.get("accepted", False))
    parse_failures = sum(1 for e in entries if not e.get("parse_success", True))
    tools = Counter(e.get("tool") or "none" for e in entries)

    return {
        "total_edits": total,
        "avg_confidence": (
            sum(confidences) / len(confidences) if confidences else 0.0
        ),
        "accept_rate": accepted / total * 100,
        "parse_failure_rate": parse_failures / total * 100,
        "tools": {
            tool: count / total * 100
            for tool, count in tools.most_common()
        },
    }
