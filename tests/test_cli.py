"""Tests for the agentic-editor command line."""

import json

import pytest

from agentic_editor.cli import EXIT_IO_ERROR, EXIT_OK, EXIT_REJECTED, main


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("AGENTIC_EDITOR_METRICS_ENABLED", raising=False)


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


class TestParseCommand:
    def test_success(self, tmp_path, capsys):
        path = _write(tmp_path, "out.txt", "<read_file><path>a.md</path></read_file>")

        code = main(["parse", path])

        payload = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert payload["success"] is True
        assert payload["tool_call"]["tool"] == "read_file"
        assert payload["tool_call"]["confidence"] == 1.0

    def test_failure(self, tmp_path, capsys):
        path = _write(tmp_path, "out.txt", "no tools here")

        code = main(["parse", path])

        payload = json.loads(capsys.readouterr().out)
        assert code == EXIT_REJECTED
        assert payload["success"] is False
        assert payload["suggestions"]

    def test_metrics_logged_when_enabled(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("AGENTIC_EDITOR_METRICS_ENABLED", "true")
        path = _write(tmp_path, "out.txt", "<read_file><path>a.md</path></read_file>")

        main(["parse", path])

        assert (tmp_path / ".agentic_editor" / "edit_metrics.jsonl").is_file()


class TestVerifyCommand:
    def test_valid_edit(self, tmp_path, capsys):
        before = _write(tmp_path, "before.txt", "a\nb")
        after = _write(tmp_path, "after.txt", "a\nb\nc")

        code = main(["verify", before, after, "--intent", "add line"])

        payload = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert payload["changes_count"] == 1

    def test_no_op_rejected(self, tmp_path, capsys):
        before = _write(tmp_path, "before.txt", "same")

        code = main(["verify", before, before])

        assert code == EXIT_REJECTED
        assert json.loads(capsys.readouterr().out)["valid"] is False

    def test_language_from_after_extension(self, tmp_path, capsys):
        before = _write(tmp_path, "before.py", "a = 1\nb = 2\nc = 3\nd = 4")
        after = _write(tmp_path, "after.py", "a = (1\nb = 2\nc = 3\nd = 4")

        main(["verify", before, after])

        payload = json.loads(capsys.readouterr().out)
        assert payload["syntax_valid"] is False

    def test_unknown_extension_skips_bracket_check(self, tmp_path, capsys):
        before = _write(tmp_path, "before.txt", "a = 1\nb = 2\nc = 3\nd = 4")
        after = _write(tmp_path, "after.txt", "a = (1\nb = 2\nc = 3\nd = 4")

        main(["verify", before, after])

        assert json.loads(capsys.readouterr().out)["syntax_valid"] is True

    def test_missing_file(self, tmp_path, capsys):
        code = main(["verify", str(tmp_path / "nope"), str(tmp_path / "nope2")])

        assert code == EXIT_IO_ERROR
        assert "Error" in capsys.readouterr().err


class TestApplyCommand:
    @staticmethod
    def _write_call(tmp_path, name, content):
        return _write(
            tmp_path, name,
            f"<write_to_file><path>doc.txt</path><content>{content}</content></write_to_file>",
        )

    def test_checkpoint_capacity_from_config(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("AGENTIC_EDITOR_CHECKPOINT_CAPACITY", "2")
        doc = _write(tmp_path, "doc.txt", "v0")
        responses = [
            self._write_call(tmp_path, f"r{i}.txt", f"v{i}") for i in range(1, 4)
        ]
        out_path = tmp_path / "out.txt"

        code = main(["apply", doc, *responses, "--intent", "rewrite", "-o", str(out_path)])

        payload = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert [s["applied"] for s in payload["steps"]] == [True, True, True]
        assert [c["iteration"] for c in payload["checkpoints"]] == [2, 3]
        assert out_path.read_text() == "v3"

    def test_parse_failure_rejected(self, tmp_path, capsys):
        doc = _write(tmp_path, "doc.txt", "v0")
        response = _write(tmp_path, "r.txt", "nothing to do here")
        out_path = tmp_path / "out.txt"

        code = main(["apply", doc, response, "-o", str(out_path)])

        payload = json.loads(capsys.readouterr().out)
        assert code == EXIT_REJECTED
        assert payload["steps"][0]["parse_success"] is False
        assert payload["steps"][0]["reason"]
        assert out_path.read_text() == "v0"

    def test_language_from_document_extension(self, tmp_path, capsys):
        doc = _write(tmp_path, "doc.py", "a = 1\nb = 2\nc = 3\nd = 4")
        response = _write(
            tmp_path, "r.txt",
            "<replace_in_file><path>doc.py</path><content>\n"
            "<<<<<<< SEARCH\na = 1\n======= REPLACE\na = (1\n>>>>>>> REPLACE\n"
            "</content></replace_in_file>",
        )

        main(["apply", doc, response])

        step = json.loads(capsys.readouterr().out)["steps"][0]
        assert step["applied"] is True
        assert any("Syntax" in w for w in step["warnings"])


class TestDiffCommand:
    def test_plain_output(self, tmp_path, capsys):
        left = _write(tmp_path, "l.txt", "keep\nold")
        right = _write(tmp_path, "r.txt", "keep\nnew")

        code = main(["diff", left, right, "--no-color"])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "-old" in out
        assert "+new" in out
        assert "\033[" not in out
        assert "similarity 50.0%" in out


class TestMergeCommand:
    def test_clean_merge_to_file(self, tmp_path, capsys):
        base = _write(tmp_path, "base.txt", "a\nb\nc")
        left = _write(tmp_path, "left.txt", "A\nb\nc")
        right = _write(tmp_path, "right.txt", "a\nb\nC")
        out_path = tmp_path / "merged.txt"

        code = main(["merge", base, left, right, "-o", str(out_path), "--no-color"])

        assert code == EXIT_OK
        assert out_path.read_text() == "A\nb\nC"
        assert "Merged cleanly" in capsys.readouterr().err

    def test_conflict(self, tmp_path, capsys):
        base = _write(tmp_path, "base.txt", "a\nb")
        left = _write(tmp_path, "left.txt", "a\nL")
        right = _write(tmp_path, "right.txt", "a\nR")

        code = main(["merge", base, left, right, "--no-color"])

        captured = capsys.readouterr()
        assert code == EXIT_REJECTED
        assert "<<<<<<< LEFT" in captured.out
        assert "conflict-0" in captured.err


class TestStatsCommand:
    def test_empty_stats(self, capsys):
        code = main(["stats"])

        assert code == EXIT_OK
        assert "total_edits" in capsys.readouterr().out
