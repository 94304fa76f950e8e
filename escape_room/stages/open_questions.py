"""
Open-question stage tracker.

Free responses are never graded. The learner reveals the model answer, then
acknowledges it ("Got it"); the stage completes once every question has
been acknowledged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..payload import OpenQuestionItem
from . import StageKind, register
from .base import StageProgress


@dataclass
class OpenQuestionState:
    revealed: set[int] = field(default_factory=set)
    reviewed: set[int] = field(default_factory=set)


@register(StageKind.OPEN_QUESTIONS)
class OpenQuestionEvaluator:
    """Tracks reveal/review flags for open questions."""

    def new_state(self, items: Sequence[OpenQuestionItem]) -> OpenQuestionState:
        return OpenQuestionState()

    def reveal(self, state: OpenQuestionState, items: Sequence[OpenQuestionItem], index: int) -> bool:
        if not 0 <= index < len(items) or index in state.revealed:
            return False
        state.revealed.add(index)
        return True

    def can_mark_reviewed(self, state: OpenQuestionState, index: int) -> bool:
        return index in state.revealed and index not in state.reviewed

    def mark_reviewed(self, state: OpenQuestionState, items: Sequence[OpenQuestionItem], index: int) -> bool:
        """Acknowledge a revealed model answer. Refused before reveal."""
        if not 0 <= index < len(items) or not self.can_mark_reviewed(state, index):
            return False
        state.reviewed.add(index)
        return True

    def is_complete(self, state: OpenQuestionState, items: Sequence[OpenQuestionItem]) -> bool:
        return all(i in state.reviewed for i in range(len(items)))

    def progress(self, state: OpenQuestionState, items: Sequence[OpenQuestionItem]) -> StageProgress:
        return StageProgress(done=len(state.reviewed), total=len(items))
