"""
Edit session — drives one parse → apply → verify → checkpoint iteration at a
time over a single document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..checkpoint import Checkpoint, CheckpointManager, RollbackResult
from .edit_verifier import EditVerifier, VerifyResult
from .metrics import log_edit_metric
from .tool_executor import MUTATING_TOOLS, ToolExecutor, ToolResult
from .tool_parser import ParseOutcome, ParseSuccess, ToolParser

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    """What happened during one iteration."""
    iteration: int
    parse: ParseOutcome
    tool_result: Optional[ToolResult] = None
    verify: Optional[VerifyResult] = None
    checkpoint: Optional[Checkpoint] = None
    applied: bool = False


class EditSession:
    """Single-writer edit loop state for one document.

    The session never calls a model; the caller feeds it raw responses and
    decides from each :class:`StepOutcome` whether to continue, retry or
    roll back.
    """

    def __init__(
        self,
        document: str,
        checkpoints: CheckpointManager | None = None,
        parser: ToolParser | None = None,
        executor: ToolExecutor | None = None,
        verifier: EditVerifier | None = None,
        language: str | None = None,
        metrics_root: str | None = None,
    ) -> None:
        self.document = document
        self.iteration = 0
        self.language = language
        self.checkpoints = (
            checkpoints if checkpoints is not None else CheckpointManager()
        )
        self._parser = parser or ToolParser()
        self._executor = executor or ToolExecutor()
        self._verifier = verifier or EditVerifier()
        self._metrics_root = metrics_root

        self.checkpoints.create(document, 0, "Initial state")

    def step(self, response: str, intent: str = "") -> StepOutcome:
        """Process one raw model response.

        Parameters
        ----------
        response:
            Raw model output expected to contain one tool call.
        intent:
            Description of the requested edit; defaults to the tool name.

        Returns
        -------
        StepOutcome
            ``applied`` is True only when a mutating tool changed the
            document and the change passed verification.
        """
        self.iteration += 1
        parsed = self._parser.parse(response)
        outcome = StepOutcome(iteration=self.iteration, parse=parsed)

        if not isinstance(parsed, ParseSuccess):
            logger.info(
                "[Session] Iteration %d: no tool call (%s)",
                self.iteration, parsed.reason,
            )
            self._record(outcome)
            return outcome

        call = parsed.tool_call
        result = self._executor.execute(call, self.document)
        outcome.tool_result = result

        if call.tool not in MUTATING_TOOLS:
            self._record(outcome)
            return outcome

        if not result.success:
            logger.warning(
                "[Session] Iteration %d: %s failed: %s",
                self.iteration, call.tool, result.error or result.message,
            )
            self._record(outcome)
            return outcome

        verify = self._verifier.verify(
            self.document, result.content, intent or call.tool, self.language,
        )
        outcome.verify = verify

        if not verify.valid:
            logger.warning(
                "[Session] Iteration %d: edit rejected (%s)",
                self.iteration, verify.diff_summary,
            )
            self._record(outcome)
            return outcome

        self.document = result.content
        outcome.checkpoint = self.checkpoints.create(
            self.document, self.iteration, f"After {call.tool}",
        )
        outcome.applied = True
        logger.info(
            "[Session] Iteration %d: applied %s (%s, confidence %.2f)",
            self.iteration, call.tool, verify.diff_summary, verify.confidence,
        )
        self._record(outcome)
        return outcome

    def rollback(self, iterations_ago: int = 1) -> RollbackResult:
        """Return the document to the checkpoint *iterations_ago* entries back."""
        target = self.checkpoints.get_from_iterations_ago(iterations_ago)
        if target is None:
            return RollbackResult(
                success=False,
                error=f"No checkpoint {iterations_ago} iteration(s) ago",
            )
        result = self.checkpoints.rollback_to(target.id)
        if result.success and result.content is not None:
            self.document = result.content
        return result

    def _record(self, outcome: StepOutcome) -> None:
        if self._metrics_root is None:
            return

        parse = outcome.parse
        data: dict = {
            "iteration": outcome.iteration,
            "parse_success": parse.success,
            "accepted": outcome.applied,
        }
        if isinstance(parse, ParseSuccess):
            data["tool"] = parse.tool_call.tool
            data["parse_confidence"] = parse.tool_call.confidence
            data["corrections"] = len(parse.tool_call.corrections)
        if outcome.verify is not None:
            data["confidence"] = outcome.verify.confidence
            data["changes_count"] = outcome.verify.changes_count
            data["warnings"] = len(outcome.verify.warnings)
        log_edit_metric(data, project_root=self._metrics_root)
