"""
CLI entry point — `agentic-editor` subcommands for parsing tool calls,
verifying and applying edits, diffing and merging documents.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys

from .cli_display import format_comparison, format_merge_summary, setup_logger
from .comparison import compare_documents, three_way_merge
from .checkpoint import CheckpointManager
from .config import Config
from .editing import (
    EditSession, EditVerifier, ToolParser, log_edit_metric, read_edit_stats,
)
from .language import language_from_path

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_REJECTED = 2


def _read_text(path: str) -> str:
    """Read *path*, or stdin when *path* is ``-``."""
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_parse(args: argparse.Namespace, cfg: Config) -> int:
    outcome = ToolParser().parse(_read_text(args.file))
    _print_json(dataclasses.asdict(outcome))

    if cfg.METRICS_ENABLED:
        data: dict = {"parse_success": outcome.success}
        if outcome.success:
            data["tool"] = outcome.tool_call.tool
            data["parse_confidence"] = outcome.tool_call.confidence
        log_edit_metric(data, project_root=cfg.METRICS_ROOT)

    return EXIT_OK if outcome.success else EXIT_REJECTED


def _cmd_verify(args: argparse.Namespace, cfg: Config) -> int:
    before = _read_text(args.before)
    after = _read_text(args.after)
    language = args.language or language_from_path(args.after)
    verifier = EditVerifier(change_ratio_threshold=cfg.CHANGE_RATIO_THRESHOLD)
    result = verifier.verify(before, after, args.intent, language)
    _print_json(dataclasses.asdict(result))

    if cfg.METRICS_ENABLED:
        log_edit_metric(
            {
                "confidence": result.confidence,
                "changes_count": result.changes_count,
                "accepted": result.valid,
            },
            project_root=cfg.METRICS_ROOT,
        )

    return EXIT_OK if result.valid else EXIT_REJECTED


def _step_summary(outcome) -> dict:
    summary: dict = {
        "iteration": outcome.iteration,
        "parse_success": outcome.parse.success,
        "applied": outcome.applied,
    }
    if outcome.parse.success:
        summary["tool"] = outcome.parse.tool_call.tool
        summary["parse_confidence"] = outcome.parse.tool_call.confidence
    else:
        summary["reason"] = outcome.parse.reason
    if outcome.tool_result is not None:
        summary["message"] = outcome.tool_result.error or outcome.tool_result.message
    if outcome.verify is not None:
        summary["confidence"] = outcome.verify.confidence
        summary["diff_summary"] = outcome.verify.diff_summary
        summary["warnings"] = outcome.verify.warnings
    return summary


def _step_rejected(outcome) -> bool:
    if not outcome.parse.success:
        return True
    if outcome.tool_result is not None and not outcome.tool_result.success:
        return True
    return outcome.verify is not None and not outcome.verify.valid


def _cmd_apply(args: argparse.Namespace, cfg: Config) -> int:
    session = EditSession(
        _read_text(args.document),
        checkpoints=CheckpointManager(capacity=cfg.CHECKPOINT_CAPACITY),
        verifier=EditVerifier(change_ratio_threshold=cfg.CHANGE_RATIO_THRESHOLD),
        language=args.language or language_from_path(args.document),
        metrics_root=cfg.METRICS_ROOT if cfg.METRICS_ENABLED else None,
    )
    outcomes = [
        session.step(_read_text(path), args.intent) for path in args.responses
    ]

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(session.document)

    _print_json({
        "steps": [_step_summary(o) for o in outcomes],
        "checkpoints": [
            {"id": cp.id, "iteration": cp.iteration, "description": cp.description}
            for cp in session.checkpoints.list()
        ],
    })
    rejected = any(_step_rejected(o) for o in outcomes)
    return EXIT_REJECTED if rejected else EXIT_OK


def _cmd_diff(args: argparse.Namespace, cfg: Config) -> int:
    result = compare_documents(_read_text(args.left), _read_text(args.right))
    color = cfg.COLOR and not args.no_color
    print(format_comparison(result, args.left, args.right, color=color))
    return EXIT_OK


def _cmd_merge(args: argparse.Namespace, cfg: Config) -> int:
    result = three_way_merge(
        _read_text(args.base), _read_text(args.left), _read_text(args.right),
    )
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result.merged_content)
    else:
        print(result.merged_content)

    color = cfg.COLOR and not args.no_color
    print(format_merge_summary(result, color=color), file=sys.stderr)
    return EXIT_OK if result.success else EXIT_REJECTED


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> int:
    stats = read_edit_stats(last_n=args.last, project_root=cfg.METRICS_ROOT)
    print("\nEdit Metrics")
    print("=" * 40)
    for k, v in stats.items():
        print(f"  {k:<20} {v}")
    print()
    return EXIT_OK


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentic-editor",
        description="Parse agent tool calls, verify edits, diff and merge documents",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .agentic_editor.yaml config file")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug output to stderr")
    parser.add_argument("--log-file", action="store_true",
                        help="Also write a debug log under the configured log_dir")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # --- parse ---
    parse_p = subparsers.add_parser("parse", help="Extract a tool call from model output")
    parse_p.add_argument("file", nargs="?", default="-",
                         help="File with raw model output (default: stdin)")
    parse_p.set_defaults(func=_cmd_parse)

    # --- verify ---
    verify_p = subparsers.add_parser("verify", help="Verify an edit between two files")
    verify_p.add_argument("before", help="Document before the edit")
    verify_p.add_argument("after", help="Document after the edit")
    verify_p.add_argument("--intent", default="",
                          help="Description of the requested edit")
    verify_p.add_argument("--language", default=None,
                          help="Language hint for the bracket check "
                               "(default: from the AFTER file extension)")
    verify_p.set_defaults(func=_cmd_verify)

    # --- apply ---
    apply_p = subparsers.add_parser(
        "apply", help="Run model responses as edit iterations over a document",
    )
    apply_p.add_argument("document", help="Document to edit")
    apply_p.add_argument("responses", nargs="+",
                         help="Files with raw model output, one per iteration")
    apply_p.add_argument("--intent", default="",
                         help="Description of the requested edit")
    apply_p.add_argument("--language", default=None,
                         help="Language hint (default: from the document extension)")
    apply_p.add_argument("-o", "--output", default=None,
                         help="Write the edited document here")
    apply_p.set_defaults(func=_cmd_apply)

    # --- diff ---
    diff_p = subparsers.add_parser("diff", help="Show hunks between two files")
    diff_p.add_argument("left")
    diff_p.add_argument("right")
    diff_p.add_argument("--no-color", action="store_true")
    diff_p.set_defaults(func=_cmd_diff)

    # --- merge ---
    merge_p = subparsers.add_parser("merge", help="Three-way merge of two edited copies")
    merge_p.add_argument("base")
    merge_p.add_argument("left")
    merge_p.add_argument("right")
    merge_p.add_argument("-o", "--output", default=None,
                         help="Write merged text here instead of stdout")
    merge_p.add_argument("--no-color", action="store_true")
    merge_p.set_defaults(func=_cmd_merge)

    # --- stats ---
    stats_p = subparsers.add_parser("stats", help="Summarize the edit metrics log")
    stats_p.add_argument("--last", type=int, default=50,
                         help="Number of most recent entries to include")
    stats_p.set_defaults(func=_cmd_stats)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the `agentic-editor` console script."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Configure logging if not already configured
    if not logging.root.handlers:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s  %(name)s  %(message)s",
        )

    cfg = Config.load(args.config)
    if args.log_file:
        setup_logger(cfg.LOG_DIR)

    try:
        return args.func(args, cfg)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
