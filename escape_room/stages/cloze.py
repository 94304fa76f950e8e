"""
Cloze (fill-the-gap) stage evaluator.

Words are dragged from a bank into numbered gaps. The bank is the multiset
of answers plus distractors, and a word's availability is always recomputed
as (copies in the bank) - (copies currently placed). Nothing is "returned"
to the bank explicitly; overwriting or removing a placement frees the word
through that recount.

Gaps are defined by the answer list. Checking compares each placed word with
its positional answer, ignoring case and surrounding/repeated whitespace.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from loguru import logger

from ..payload import ClozeSpec
from . import StageKind, register
from .base import Mark, StageProgress


def normalize_word(word: str) -> str:
    """Case- and whitespace-insensitive form used for comparisons."""
    return " ".join(word.split()).casefold()


def words_match(placed: str | None, answer: str | None) -> bool:
    if placed is None or answer is None:
        return False
    return normalize_word(placed) == normalize_word(answer)


@dataclass
class ClozeState:
    """Placements keyed by gap index, plus the 'checked' display flag."""
    placements: dict[int, str] = field(default_factory=dict)
    checked: bool = False


@register(StageKind.CLOZE)
class ClozeEvaluator:
    """Evaluator for the fill-gap text."""

    def new_state(self, spec: ClozeSpec) -> ClozeState:
        return ClozeState()

    def gap_count(self, spec: ClozeSpec) -> int:
        return len(spec.answers)

    # -------------------------------------------------------------------------
    # Word bank
    # -------------------------------------------------------------------------

    def availability(self, state: ClozeState, spec: ClozeSpec) -> dict[str, int]:
        """Remaining copies of every distinct bank word (zero included), sorted."""
        total = Counter(spec.word_bank)
        placed = Counter(state.placements.values())
        return {word: max(0, total[word] - placed[word]) for word in sorted(total)}

    def available(self, state: ClozeState, spec: ClozeSpec, word: str) -> int:
        placed = sum(1 for w in state.placements.values() if w == word)
        return max(0, spec.word_bank.count(word) - placed)

    def resolve_word(self, state: ClozeState, spec: ClozeSpec, typed: str) -> str | None:
        """
        Map learner input onto a bank word.

        Exact matches win; otherwise the first available word that matches
        case/whitespace-insensitively.
        """
        if typed in spec.word_bank:
            return typed
        wanted = normalize_word(typed)
        candidates = [w for w in sorted(set(spec.word_bank)) if normalize_word(w) == wanted]
        for word in candidates:
            if self.available(state, spec, word) > 0:
                return word
        return candidates[0] if candidates else None

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def place(self, state: ClozeState, spec: ClozeSpec, gap: int, word: str) -> bool:
        """
        Put a bank word into a gap, displacing any previous occupant.

        Returns:
            True if the state changed
        """
        if not 0 <= gap < self.gap_count(spec):
            logger.debug("Cloze place ignored: no gap {}", gap)
            return False
        if state.placements.get(gap) == word:
            return False
        if self.available(state, spec, word) <= 0:
            logger.debug("Cloze place ignored: '{}' not available", word)
            return False
        state.placements[gap] = word
        state.checked = False
        return True

    def remove(self, state: ClozeState, spec: ClozeSpec, gap: int) -> bool:
        """Empty a gap. Returns True if it held a word."""
        if gap not in state.placements:
            return False
        del state.placements[gap]
        state.checked = False
        return True

    def check(self, state: ClozeState) -> None:
        state.checked = True

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def gap_mark(self, state: ClozeState, spec: ClozeSpec, gap: int) -> Mark:
        """Mark shown on a gap: only filled gaps, and only after a check."""
        placed = state.placements.get(gap)
        if not state.checked or placed is None:
            return Mark.NONE
        answer = spec.answers[gap] if gap < len(spec.answers) else None
        return Mark.CORRECT if words_match(placed, answer) else Mark.INCORRECT

    def correct_count(self, state: ClozeState, spec: ClozeSpec) -> int:
        return sum(
            1 for i, answer in enumerate(spec.answers)
            if words_match(state.placements.get(i), answer)
        )

    def is_complete(self, state: ClozeState, spec: ClozeSpec) -> bool:
        return self.correct_count(state, spec) == len(spec.answers)

    def progress(self, state: ClozeState, spec: ClozeSpec) -> StageProgress:
        return StageProgress(done=len(state.placements), total=self.gap_count(spec))
