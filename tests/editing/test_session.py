"""Tests for the EditSession iteration driver."""

import json
import os

from agentic_editor.checkpoint import CheckpointManager
from agentic_editor.editing.session import EditSession


DOC = "def add(a, b):\n    return a + b\n\ndef sub(a, b):\n    return a - b"


def _replace(old: str, new: str) -> str:
    return (
        "<replace_in_file><path>math.py</path><content>\n"
        f"<<<<<<< SEARCH\n{old}\n======= REPLACE\n{new}\n>>>>>>> REPLACE\n"
        "</content></replace_in_file>"
    )


class TestStep:
    def test_initial_checkpoint(self):
        session = EditSession(DOC)

        cps = session.checkpoints.list()
        assert len(cps) == 1
        assert cps[0].iteration == 0
        assert cps[0].content == DOC

    def test_applied_edit_is_checkpointed(self):
        session = EditSession(DOC, language="python")
        outcome = session.step(_replace("return a + b", "return b + a"))

        assert outcome.applied is True
        assert outcome.iteration == 1
        assert outcome.verify.valid is True
        assert outcome.verify.syntax_valid is True
        assert "return b + a" in session.document
        assert outcome.checkpoint.iteration == 1
        assert outcome.checkpoint.description == "After replace_in_file"
        assert len(session.checkpoints) == 2

    def test_unmatched_search_leaves_document(self):
        session = EditSession(DOC)
        outcome = session.step(_replace("return a * b", "return 0"))

        assert outcome.applied is False
        assert outcome.tool_result.success is False
        assert outcome.checkpoint is None
        assert session.document == DOC
        assert len(session.checkpoints) == 1

    def test_no_op_write_is_rejected(self):
        session = EditSession(DOC)
        outcome = session.step(
            f"<write_to_file><path>math.py</path><content>{DOC}</content></write_to_file>"
        )

        assert outcome.applied is False
        assert outcome.verify.valid is False
        assert len(session.checkpoints) == 1

    def test_read_only_tool_creates_no_checkpoint(self):
        session = EditSession(DOC)
        outcome = session.step("<search_files><pattern>def </pattern></search_files>")

        assert outcome.applied is False
        assert [m[0] for m in outcome.tool_result.matches] == [1, 4]
        assert len(session.checkpoints) == 1

    def test_parse_failure(self):
        session = EditSession(DOC)
        outcome = session.step("I think the code looks fine.")

        assert outcome.parse.success is False
        assert outcome.tool_result is None
        assert session.iteration == 1


class TestRollback:
    def test_rollback_one_step(self):
        session = EditSession(DOC)
        session.step(_replace("return a + b", "return b + a"))
        first = session.document
        session.step(_replace("return a - b", "return -(b - a)"))

        result = session.rollback(1)

        assert result.success is True
        assert session.document == first
        assert len(session.checkpoints) == 2

    def test_rollback_to_initial(self):
        session = EditSession(DOC)
        session.step(_replace("return a + b", "return b + a"))

        result = session.rollback(1)

        assert result.success is True
        assert session.document == DOC

    def test_rollback_too_far(self):
        session = EditSession(DOC, checkpoints=CheckpointManager(capacity=3))
        session.step(_replace("return a + b", "return b + a"))

        result = session.rollback(2)

        assert result.success is False
        assert result.error
        assert len(session.checkpoints) == 2


class TestCheckpointManager:
    def test_uses_given_manager(self):
        manager = CheckpointManager(capacity=2)
        session = EditSession(DOC, checkpoints=manager)

        assert session.checkpoints is manager
        assert len(manager) == 1

    def test_given_capacity_is_enforced(self):
        manager = CheckpointManager(capacity=2)
        session = EditSession("v0", checkpoints=manager)
        for i in range(1, 4):
            outcome = session.step(
                f"<write_to_file><path>f.txt</path><content>v{i}</content></write_to_file>",
                intent="rewrite",
            )
            assert outcome.applied is True

        assert manager.capacity == 2
        assert [c.content for c in manager.list()] == ["v2", "v3"]
        assert session.rollback(1).content == "v2"
        assert session.rollback(1).success is False


class TestMetrics:
    def test_steps_are_logged(self, tmp_path):
        session = EditSession(DOC, metrics_root=str(tmp_path))
        session.step(_replace("return a + b", "return b + a"))
        session.step("no tool here")

        path = os.path.join(str(tmp_path), ".agentic_editor", "edit_metrics.jsonl")
        with open(path) as f:
            entries = [json.loads(line) for line in f]

        assert len(entries) == 2
        assert entries[0]["tool"] == "replace_in_file"
        assert entries[0]["accepted"] is True
        assert entries[1]["parse_success"] is False
