"""Tests for edit metrics logging and stats."""

import json
import os

import pytest

from agentic_editor.editing.metrics import log_edit_metric, read_edit_stats


@pytest.fixture
def tmp_project(tmp_path):
    """Create a temp project root."""
    return str(tmp_path)


def _metrics_file(root: str) -> str:
    return os.path.join(root, ".agentic_editor", "edit_metrics.jsonl")


class TestLogEditMetric:
    def test_creates_file_and_writes_entry(self, tmp_project):
        log_edit_metric(
            {"tool": "replace_in_file", "confidence": 0.95, "accepted": True},
            project_root=tmp_project,
        )

        path = _metrics_file(tmp_project)
        assert os.path.isfile(path)

        with open(path) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["tool"] == "replace_in_file"
        assert entry["confidence"] == 0.95
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, tmp_project):
        log_edit_metric({"tool": "read_file"}, project_root=tmp_project)
        log_edit_metric({"tool": "write_to_file"}, project_root=tmp_project)
        log_edit_metric({"tool": "search_files"}, project_root=tmp_project)

        with open(_metrics_file(tmp_project)) as f:
            lines = f.readlines()
        assert len(lines) == 3

    def test_unwritable_root_does_not_raise(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        log_edit_metric({"tool": "read_file"}, project_root=str(blocker))


class TestReadEditStats:
    def test_empty_stats(self, tmp_project):
        stats = read_edit_stats(project_root=tmp_project)

        assert stats["total_edits"] == 0
        assert stats["avg_confidence"] == 0.0
        assert stats["accept_rate"] == 0.0
        assert stats["parse_failure_rate"] == 0.0
        assert stats["tools"] == {}

    def test_stats_from_entries(self, tmp_project):
        entries = [
            {"tool": "replace_in_file", "parse_success": True,
             "confidence": 0.9, "accepted": True},
            {"tool": "replace_in_file", "parse_success": True,
             "confidence": 0.5, "accepted": False},
            {"parse_success": False, "accepted": False},
            {"tool": "write_to_file", "parse_success": True,
             "confidence": 1.0, "accepted": True},
        ]
        for e in entries:
            log_edit_metric(e, project_root=tmp_project)

        stats = read_edit_stats(project_root=tmp_project)

        assert stats["total_edits"] == 4
        assert stats["avg_confidence"] == pytest.approx(0.8)
        assert stats["accept_rate"] == pytest.approx(50.0)
        assert stats["parse_failure_rate"] == pytest.approx(25.0)
        assert stats["tools"]["replace_in_file"] == pytest.approx(50.0)
        assert stats["tools"]["none"] == pytest.approx(25.0)

    def test_last_n_window(self, tmp_project):
        for i in range(10):
            log_edit_metric({"confidence": float(i)}, project_root=tmp_project)

        stats = read_edit_stats(last_n=2, project_root=tmp_project)

        assert stats["total_edits"] == 2
        assert stats["avg_confidence"] == pytest.approx(8.5)

    def test_skips_corrupt_lines(self, tmp_project):
        log_edit_metric({"confidence": 1.0}, project_root=tmp_project)
        with open(_metrics_file(tmp_project), "a") as f:
            f.write("{not json\n")

        stats = read_edit_stats(project_root=tmp_project)

        assert stats["total_edits"] == 1
