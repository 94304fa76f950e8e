"""
MCQ (Multiple Choice Question) stage evaluator.

- One recorded choice per question; re-selecting overwrites.
- A question is correct when its recorded choice equals the correct index.
- Unanswered questions are neither correct nor incorrect, and block completion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from loguru import logger

from ..payload import MCQItem
from . import StageKind, register
from .base import Mark, StageProgress


@dataclass
class McqState:
    """Recorded choices, keyed by question index."""
    choices: dict[int, int] = field(default_factory=dict)


@register(StageKind.MCQ)
class McqEvaluator:
    """Evaluator for multiple-choice sets."""

    def new_state(self, items: Sequence[MCQItem]) -> McqState:
        return McqState()

    def select(
        self,
        state: McqState,
        items: Sequence[MCQItem],
        question: int,
        option: int,
    ) -> bool:
        """
        Record a choice for a question (last write wins).

        Returns:
            True if the state changed; out-of-range indices are ignored.
        """
        if not 0 <= question < len(items):
            logger.debug("MCQ select ignored: no question {}", question)
            return False
        if not 0 <= option < len(items[question].options):
            logger.debug("MCQ select ignored: question {} has no option {}", question, option)
            return False
        if state.choices.get(question) == option:
            return False
        state.choices[question] = option
        return True

    def mark(self, state: McqState, items: Sequence[MCQItem], question: int) -> Mark:
        """Correctness of a single question."""
        choice = state.choices.get(question)
        if choice is None:
            return Mark.NONE
        return Mark.CORRECT if items[question].is_correct(choice) else Mark.INCORRECT

    def unanswered(self, state: McqState, items: Sequence[MCQItem]) -> list[int]:
        return [i for i in range(len(items)) if i not in state.choices]

    def correct_count(self, state: McqState, items: Sequence[MCQItem]) -> int:
        return sum(1 for i, item in enumerate(items) if item.is_correct(state.choices.get(i)))

    def check(self, state: McqState, items: Sequence[MCQItem]) -> str:
        """Feedback for the 'check answers' action."""
        missing = self.unanswered(state, items)
        if missing:
            numbers = ", ".join(str(i + 1) for i in missing)
            return f"Please answer all questions before proceeding! Unanswered: {numbers}"
        correct = self.correct_count(state, items)
        if correct == len(items):
            return "All answers correct - the next door is open."
        return f"{correct}/{len(items)} correct. Fix the red ones and try again."

    def is_complete(self, state: McqState, items: Sequence[MCQItem]) -> bool:
        return all(item.is_correct(state.choices.get(i)) for i, item in enumerate(items))

    def progress(self, state: McqState, items: Sequence[MCQItem]) -> StageProgress:
        return StageProgress(done=self.correct_count(state, items), total=len(items))
