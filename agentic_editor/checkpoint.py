"""
Checkpoint & rollback — a bounded, append-only ledger of full document
snapshots so an edit loop can return to an earlier iteration.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


@dataclass(frozen=True)
class Checkpoint:
    """Full-content snapshot of a document at one edit iteration."""
    id: str
    content: str
    iteration: int
    created_at: datetime
    description: str


@dataclass
class RollbackResult:
    success: bool
    content: Optional[str] = None
    error: Optional[str] = None


class CheckpointManager:
    """Bounded FIFO store of checkpoints with point-in-time rollback.

    Single-writer: callers serialize access per document/session.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._checkpoints: OrderedDict[str, Checkpoint] = OrderedDict()
        self._sequence = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._checkpoints)

    def create(self, content: str, iteration: int, description: str) -> Checkpoint:
        """Record a snapshot, evicting the oldest entries beyond capacity."""
        self._sequence += 1
        checkpoint = Checkpoint(
            id=f"cp_{int(time.time() * 1000)}_{iteration}_{self._sequence}",
            content=content,
            iteration=iteration,
            created_at=datetime.now(timezone.utc),
            description=description,
        )
        self._checkpoints[checkpoint.id] = checkpoint

        while len(self._checkpoints) > self._capacity:
            evicted_id, _ = self._checkpoints.popitem(last=False)
            logger.debug("[Checkpoint] Evicted %s", evicted_id)

        logger.info("[Checkpoint] Created: %s (%s)", checkpoint.id, description)
        return checkpoint

    def get(self, checkpoint_id: str) -> Checkpoint | None:
        return self._checkpoints.get(checkpoint_id)

    def get_latest(self) -> Checkpoint | None:
        if not self._checkpoints:
            return None
        return next(reversed(self._checkpoints.values()))

    def get_from_iterations_ago(self, n: int) -> Checkpoint | None:
        """Return the checkpoint *n* entries before the latest (0 = latest)."""
        if n < 0 or n >= len(self._checkpoints):
            return None
        return self.list()[len(self._checkpoints) - 1 - n]

    def rollback_to(self, checkpoint_id: str) -> RollbackResult:
        """Drop every checkpoint after *checkpoint_id* and return its content.

        Unknown ids produce a failed result rather than an exception.
        """
        checkpoint = self._checkpoints.get(checkpoint_id)
        if checkpoint is None:
            return RollbackResult(
                success=False, error=f"Checkpoint {checkpoint_id} not found",
            )

        removed = 0
        while next(reversed(self._checkpoints)) != checkpoint_id:
            self._checkpoints.popitem(last=True)
            removed += 1

        logger.info(
            "[Checkpoint] Rolled back to: %s, removed %d later checkpoints",
            checkpoint_id, removed,
        )
        return RollbackResult(success=True, content=checkpoint.content)

    def list(self) -> list[Checkpoint]:
        """All live checkpoints in creation order."""
        return list(self._checkpoints.values())

    def clear(self) -> None:
        self._checkpoints.clear()
