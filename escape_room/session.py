"""
Escape Room Session: progression controller and session-scoped state.

Architecture:
- Content      -> escape_room.payload (immutable)
- Logic        -> escape_room.stages (stateless evaluators)
- Deferred     -> escape_room.scheduler
- Rendering    -> escape_room.renderer (pure), escape_room.visuals (rich)

The session owns one SessionState value and is the only thing that mutates
it. Every action notifies subscribers afterwards so they can re-render from
scratch. Nothing is persisted; restart() throws the state away.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from loguru import logger

from .config import get_settings
from .payload import ContentPayload
from .scheduler import DeferredScheduler
from .stages import StageKind, get_evaluator
from .stages.base import StageProgress
from .stages.matching import Column, MatchOutcome


class Stage(str, Enum):
    """Session stages, in the only order they can be visited."""
    INTRO = "intro"
    MCQ_SET_1 = "mcq_set_1"
    MCQ_SET_2 = "mcq_set_2"
    MATCH_SET_1 = "match_set_1"
    MATCH_SET_2 = "match_set_2"
    CLOZE = "cloze"
    OPEN_QUESTIONS = "open_questions"
    COMPLETE = "complete"


STAGE_ORDER: tuple[Stage, ...] = tuple(Stage)

# Stage -> (challenge type, payload attribute holding its content)
STAGE_CONTENT: dict[Stage, tuple[StageKind, str]] = {
    Stage.MCQ_SET_1: (StageKind.MCQ, "mcq_set_1"),
    Stage.MCQ_SET_2: (StageKind.MCQ, "mcq_set_2"),
    Stage.MATCH_SET_1: (StageKind.MATCHING, "matching_set_1"),
    Stage.MATCH_SET_2: (StageKind.MATCHING, "matching_set_2"),
    Stage.CLOZE: (StageKind.CLOZE, "fill_gap"),
    Stage.OPEN_QUESTIONS: (StageKind.OPEN_QUESTIONS, "open_questions"),
}


def stage_kind(stage: Stage) -> StageKind | None:
    binding = STAGE_CONTENT.get(stage)
    return binding[0] if binding else None


def stage_content(payload: ContentPayload, stage: Stage) -> Any:
    """Payload slice a stage works on (None for intro/complete)."""
    binding = STAGE_CONTENT.get(stage)
    return getattr(payload, binding[1]) if binding else None


def next_stage(stage: Stage) -> Stage:
    index = STAGE_ORDER.index(stage)
    return STAGE_ORDER[min(index + 1, len(STAGE_ORDER) - 1)]


@dataclass
class SessionState:
    """Everything that changes during a session."""

    stage: Stage = Stage.INTRO
    stages: dict[Stage, Any] = field(default_factory=dict)
    notice: str | None = None

    def of(self, stage: Stage) -> Any:
        """Evaluator state for a stage."""
        return self.stages[stage]


def create_session_state(payload: ContentPayload) -> SessionState:
    """Fresh state: intro stage, nothing answered."""
    stages = {}
    for stage, (kind, _) in STAGE_CONTENT.items():
        stages[stage] = get_evaluator(kind).new_state(stage_content(payload, stage))
    return SessionState(stage=Stage.INTRO, stages=stages)


def stage_complete(state: SessionState, payload: ContentPayload, stage: Stage | None = None) -> bool:
    """Completion predicate for a stage (intro and complete always hold)."""
    stage = stage or state.stage
    kind = stage_kind(stage)
    if kind is None:
        return True
    return get_evaluator(kind).is_complete(state.of(stage), stage_content(payload, stage))


def stage_progress(state: SessionState, payload: ContentPayload, stage: Stage | None = None) -> StageProgress | None:
    stage = stage or state.stage
    kind = stage_kind(stage)
    if kind is None:
        return None
    return get_evaluator(kind).progress(state.of(stage), stage_content(payload, stage))


def can_advance(state: SessionState, payload: ContentPayload, preview: bool) -> bool:
    """Advance gate: preview skips anything except the terminal stage."""
    if state.stage == Stage.COMPLETE:
        return False
    return preview or stage_complete(state, payload)


class EscapeRoomSession:
    """
    Drives a learner through the escape room.

    Usage:
        session = EscapeRoomSession(payload, preview=False)
        session.subscribe(lambda s: console.print(present(s.render())))
        session.advance()
        session.select_option(0, 2)
    """

    def __init__(
        self,
        payload: ContentPayload,
        preview: bool = False,
        scheduler: DeferredScheduler | None = None,
        rng: random.Random | None = None,
        mismatch_delay: float | None = None,
    ):
        settings = get_settings()
        self.payload = payload
        self.preview = preview
        self.scheduler = scheduler or DeferredScheduler()
        self.rng = rng or random.Random(settings.shuffle_seed)
        self.mismatch_delay = (
            settings.mismatch_delay_seconds if mismatch_delay is None else mismatch_delay
        )
        self.state = create_session_state(payload)
        self._listeners: list[Callable[[EscapeRoomSession], None]] = []

    # =========================================================================
    # Subscribers / rendering
    # =========================================================================

    def subscribe(self, listener: Callable[["EscapeRoomSession"], None]) -> Callable[[], None]:
        """Register a callback run after every mutation. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def render(self):
        """Project the current state into a Screen."""
        from .renderer import render

        return render(self.state, self.payload, self.preview)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _begin(self) -> None:
        # Notices live until the next learner action
        self.state.notice = None

    def tick(self) -> int:
        """Fire deferred actions that are due. Called by the event loop."""
        return self.scheduler.run_due()

    # =========================================================================
    # Progression
    # =========================================================================

    @property
    def stage(self) -> Stage:
        return self.state.stage

    def can_advance(self) -> bool:
        return can_advance(self.state, self.payload, self.preview)

    def advance(self) -> bool:
        """Move to the next stage if the gate allows it."""
        self._begin()
        current = self.state.stage
        if not self.can_advance():
            if current != Stage.COMPLETE:
                self.state.notice = "The door is still locked - finish this challenge first."
            logger.debug("Advance refused at {}", current.value)
            self._notify()
            return False

        if stage_kind(current) == StageKind.MATCHING:
            get_evaluator(StageKind.MATCHING).cancel_pending(self.state.of(current))

        entered = next_stage(current)
        self.state.stage = entered
        if stage_kind(entered) == StageKind.MATCHING:
            get_evaluator(StageKind.MATCHING).shuffle(
                self.state.of(entered), stage_content(self.payload, entered), self.rng
            )
        logger.debug(
            "Advanced {} -> {}{}",
            current.value,
            entered.value,
            " (preview)" if self.preview and not stage_complete(self.state, self.payload, current) else "",
        )
        self._notify()
        return True

    def restart(self) -> None:
        """Discard all runtime state and return to the intro."""
        matching = get_evaluator(StageKind.MATCHING)
        for stage, (kind, _) in STAGE_CONTENT.items():
            if kind == StageKind.MATCHING:
                matching.cancel_pending(self.state.of(stage))
        self.state = create_session_state(self.payload)
        logger.debug("Session restarted")
        self._notify()

    # =========================================================================
    # Stage actions (no-ops outside their stage)
    # =========================================================================

    def _in(self, kind: StageKind) -> bool:
        return stage_kind(self.state.stage) == kind

    def _content(self) -> Any:
        return stage_content(self.payload, self.state.stage)

    def select_option(self, question: int, option: int) -> bool:
        """Record an MCQ choice (0-based indices)."""
        self._begin()
        changed = False
        if self._in(StageKind.MCQ):
            changed = get_evaluator(StageKind.MCQ).select(
                self.state.of(self.state.stage), self._content(), question, option
            )
        self._notify()
        return changed

    def check_answers(self) -> None:
        """'Check Answers' for the MCQ and cloze stages."""
        self._begin()
        stage_state = self.state.stages.get(self.state.stage)
        if self._in(StageKind.MCQ):
            self.state.notice = get_evaluator(StageKind.MCQ).check(stage_state, self._content())
        elif self._in(StageKind.CLOZE):
            get_evaluator(StageKind.CLOZE).check(stage_state)
        self._notify()

    def select_match(self, column: Column, position: int) -> MatchOutcome:
        """Pick the item at a 0-based display position of a column."""
        self._begin()
        outcome = MatchOutcome.IGNORED
        if self._in(StageKind.MATCHING):
            evaluator = get_evaluator(StageKind.MATCHING)
            stage_state = self.state.of(self.state.stage)
            pair_index = evaluator.pair_at(stage_state, column, position)
            if pair_index is not None:
                outcome = evaluator.select(
                    stage_state,
                    self._content(),
                    column,
                    pair_index,
                    self.scheduler,
                    delay=self.mismatch_delay,
                    on_clear=self._notify,
                )
        self._notify()
        return outcome

    def place_word(self, gap: int, word: str) -> bool:
        """Put a bank word into a 0-based gap."""
        self._begin()
        changed = False
        if self._in(StageKind.CLOZE):
            evaluator = get_evaluator(StageKind.CLOZE)
            stage_state = self.state.of(Stage.CLOZE)
            resolved = evaluator.resolve_word(stage_state, self.payload.fill_gap, word)
            if resolved is None:
                self.state.notice = f"'{word}' is not in the word bank."
            else:
                changed = evaluator.place(stage_state, self.payload.fill_gap, gap, resolved)
                if (
                    not changed
                    and 0 <= gap < evaluator.gap_count(self.payload.fill_gap)
                    and stage_state.placements.get(gap) != resolved
                ):
                    self.state.notice = f"'{resolved}' is already used."
        self._notify()
        return changed

    def remove_word(self, gap: int) -> bool:
        self._begin()
        changed = False
        if self._in(StageKind.CLOZE):
            changed = get_evaluator(StageKind.CLOZE).remove(
                self.state.of(Stage.CLOZE), self.payload.fill_gap, gap
            )
        self._notify()
        return changed

    def reveal_answer(self, index: int) -> bool:
        self._begin()
        changed = False
        if self._in(StageKind.OPEN_QUESTIONS):
            changed = get_evaluator(StageKind.OPEN_QUESTIONS).reveal(
                self.state.of(Stage.OPEN_QUESTIONS), self.payload.open_questions, index
            )
        self._notify()
        return changed

    def mark_reviewed(self, index: int) -> bool:
        self._begin()
        changed = False
        if self._in(StageKind.OPEN_QUESTIONS):
            changed = get_evaluator(StageKind.OPEN_QUESTIONS).mark_reviewed(
                self.state.of(Stage.OPEN_QUESTIONS), self.payload.open_questions, index
            )
        self._notify()
        return changed

    def post_notice(self, message: str) -> None:
        """Show a transient message (e.g. unknown command) until the next action."""
        self.state.notice = message
        self._notify()
