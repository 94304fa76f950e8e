"""
Matching stage evaluator.

The learner picks one item from column A and one from column B. Items are
identified by the position of their pair in the payload, never by text, so
two pairs sharing a left or right string can never resolve each other.

Columns are shown in two independently shuffled orders, built once when the
stage is entered.

A mismatched pick stays highlighted for a short delay and is then cleared by
a deferred task. The task carries a snapshot of the exact picks it was
scheduled for and does nothing if those picks are no longer pending.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

from loguru import logger

from ..payload import MatchPair
from ..scheduler import DeferredScheduler, ScheduledTask
from . import StageKind, register
from .base import StageProgress


class Column(str, Enum):
    """Which side of the board an item sits in."""
    LEFT = "left"
    RIGHT = "right"


class MatchOutcome(str, Enum):
    """What a single selection did."""
    IGNORED = "ignored"
    PENDING = "pending"
    MATCHED = "matched"
    MISMATCHED = "mismatched"


@dataclass(frozen=True)
class MismatchSnapshot:
    """The picks a deferred clear was scheduled for."""
    left: int
    right: int
    sequence: int


@dataclass
class MatchingState:
    """Runtime state for one matching stage."""

    left_order: tuple[int, ...] = ()
    right_order: tuple[int, ...] = ()
    shuffled: bool = False

    left: int | None = None
    right: int | None = None
    resolved: set[int] = field(default_factory=set)

    mismatch: MismatchSnapshot | None = None
    mismatch_sequence: int = 0
    pending_clear: ScheduledTask | None = field(default=None, repr=False)

    def pending(self, column: Column) -> int | None:
        return self.left if column == Column.LEFT else self.right

    def order(self, column: Column) -> tuple[int, ...]:
        return self.left_order if column == Column.LEFT else self.right_order


@register(StageKind.MATCHING)
class MatchingEvaluator:
    """Evaluator for matching-pair sets."""

    def new_state(self, pairs: Sequence[MatchPair]) -> MatchingState:
        return MatchingState()

    def shuffle(self, state: MatchingState, pairs: Sequence[MatchPair], rng: random.Random) -> bool:
        """
        Build both column projections. Runs once per state; later calls are no-ops.

        Returns:
            True if the projections were built by this call
        """
        if state.shuffled:
            return False
        left = list(range(len(pairs)))
        right = list(range(len(pairs)))
        rng.shuffle(left)
        rng.shuffle(right)
        state.left_order = tuple(left)
        state.right_order = tuple(right)
        state.shuffled = True
        return True

    def pair_at(self, state: MatchingState, column: Column, position: int) -> int | None:
        """Pair index shown at a 0-based display position of a column."""
        order = state.order(column)
        if 0 <= position < len(order):
            return order[position]
        return None

    def select(
        self,
        state: MatchingState,
        pairs: Sequence[MatchPair],
        column: Column,
        pair_index: int,
        scheduler: DeferredScheduler,
        delay: float = 0.5,
        on_clear: Callable[[], None] | None = None,
    ) -> MatchOutcome:
        """
        Select an item in one column.

        Args:
            state: Stage state to mutate
            pairs: The stage's pair set
            column: Column the item was picked from
            pair_index: Payload position of the picked item's pair
            scheduler: Where the mismatch clear is queued
            delay: Seconds a mismatch stays highlighted
            on_clear: Called after a deferred clear actually changed state

        Returns:
            MatchOutcome describing the effect
        """
        if not 0 <= pair_index < len(pairs) or pair_index in state.resolved:
            return MatchOutcome.IGNORED

        if state.mismatch is not None:
            self._supersede(state)

        if column == Column.LEFT:
            state.left = pair_index
        else:
            state.right = pair_index

        if state.left is None or state.right is None:
            return MatchOutcome.PENDING

        if state.left == state.right:
            state.resolved.add(state.left)
            logger.debug("Pair {} resolved ({}/{})", state.left, len(state.resolved), len(pairs))
            state.left = None
            state.right = None
            return MatchOutcome.MATCHED

        state.mismatch_sequence += 1
        snapshot = MismatchSnapshot(state.left, state.right, state.mismatch_sequence)
        state.mismatch = snapshot

        def clear() -> None:
            if self.clear_if_stale(state, snapshot) and on_clear is not None:
                on_clear()

        state.pending_clear = scheduler.call_later(delay, clear, label="matching-mismatch-clear")
        return MatchOutcome.MISMATCHED

    def clear_if_stale(self, state: MatchingState, snapshot: MismatchSnapshot) -> bool:
        """
        Deferred clear body: drop the mismatched picks if they are still the
        ones captured in snapshot.

        Returns:
            True if the picks were cleared
        """
        if (
            state.mismatch != snapshot
            or state.left != snapshot.left
            or state.right != snapshot.right
        ):
            logger.debug("Stale mismatch clear #{} skipped", snapshot.sequence)
            return False
        state.left = None
        state.right = None
        state.mismatch = None
        state.pending_clear = None
        return True

    def cancel_pending(self, state: MatchingState) -> None:
        """Cancel a queued clear, e.g. when leaving the stage."""
        if state.pending_clear is not None:
            state.pending_clear.cancel()
            state.pending_clear = None

    def _supersede(self, state: MatchingState) -> None:
        self.cancel_pending(state)
        state.left = None
        state.right = None
        state.mismatch = None

    def is_complete(self, state: MatchingState, pairs: Sequence[MatchPair]) -> bool:
        return len(state.resolved) == len(pairs)

    def progress(self, state: MatchingState, pairs: Sequence[MatchPair]) -> StageProgress:
        return StageProgress(done=len(state.resolved), total=len(pairs))
