"""
Renderer: (state, payload, preview) -> Screen.

A pure projection. It never mutates the state it reads and returns equal
Screens for equal inputs, so callers simply re-render everything after each
mutation. Turning a Screen into terminal output is escape_room.visuals' job.

The Screen lists the commands that make sense right now. Actions that are
not available (e.g. "Got it" before the model answer is shown, or "next"
while the stage is locked outside preview mode) are left out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .config import get_settings
from .payload import ContentPayload
from .session import (
    SessionState,
    Stage,
    stage_complete,
    stage_content,
    stage_progress,
)
from .stages import StageKind, get_evaluator
from .stages.base import Mark, StageProgress
from .stages.matching import Column, MatchingState


# =============================================================================
# View types
# =============================================================================


@dataclass(frozen=True)
class Command:
    """A learner command shown in the footer."""
    key: str
    label: str


@dataclass(frozen=True)
class IntroView:
    text: str


@dataclass(frozen=True)
class OptionView:
    letter: str
    text: str
    selected: bool


@dataclass(frozen=True)
class QuestionView:
    number: int
    text: str
    options: tuple[OptionView, ...]
    mark: Mark


@dataclass(frozen=True)
class McqView:
    questions: tuple[QuestionView, ...]


class ItemState(str, Enum):
    IDLE = "idle"
    SELECTED = "selected"
    MISMATCHED = "mismatched"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class MatchItemView:
    key: str
    text: str
    state: ItemState


@dataclass(frozen=True)
class MatchingView:
    left: tuple[MatchItemView, ...]
    right: tuple[MatchItemView, ...]


@dataclass(frozen=True)
class GapView:
    number: int
    word: str | None
    mark: Mark
    inert: bool = False  # placeholder with no answer behind it


@dataclass(frozen=True)
class ClozeView:
    fragments: tuple[str, ...]
    gaps: tuple[GapView, ...]
    bank: tuple[tuple[str, int], ...]
    bank_visible: bool


@dataclass(frozen=True)
class OpenQuestionView:
    number: int
    text: str
    revealed: bool
    reviewed: bool
    model_answer: str | None


@dataclass(frozen=True)
class OpenQuestionsView:
    questions: tuple[OpenQuestionView, ...]


@dataclass(frozen=True)
class CompleteView:
    message: str


Body = Union[IntroView, McqView, MatchingView, ClozeView, OpenQuestionsView, CompleteView]


@dataclass(frozen=True)
class Screen:
    """Everything visible for one state."""
    stage: Stage
    title: str
    heading: str
    instructions: str
    body: Body
    commands: tuple[Command, ...]
    progress: StageProgress | None
    preview: bool
    notice: str | None


# =============================================================================
# Copy
# =============================================================================

HEADINGS = {
    Stage.MCQ_SET_1: "Challenge 1: The First Test",
    Stage.MCQ_SET_2: "Challenge 2: The Second Obstacle",
    Stage.MATCH_SET_1: "Challenge 3: Connect Concepts",
    Stage.MATCH_SET_2: "Challenge 4: Build Sentences",
    Stage.CLOZE: "Challenge 5: Missing Words",
    Stage.OPEN_QUESTIONS: "Challenge 6: The Final Gate",
    Stage.COMPLETE: "ESCAPE SUCCESSFUL!",
}

INSTRUCTIONS = {
    Stage.INTRO: "",
    Stage.MCQ_SET_1: "Pick one option per question, e.g. '3b' answers question 3 with option B.",
    Stage.MCQ_SET_2: "Pick one option per question, e.g. '3b' answers question 3 with option B.",
    Stage.MATCH_SET_1: "Select an item on the left, then find its match on the right.",
    Stage.MATCH_SET_2: "Select an item on the left, then find its match on the right.",
    Stage.CLOZE: "Move words from the bank below into the numbered gaps.",
    Stage.OPEN_QUESTIONS: "Think about your answer, then compare it with the model answer.",
    Stage.COMPLETE: "",
}

ADVANCE_LABELS = {
    Stage.INTRO: "Start Adventure",
    Stage.MCQ_SET_1: "Next Challenge ->",
    Stage.MCQ_SET_2: "Next Challenge ->",
    Stage.MATCH_SET_1: "Proceed ->",
    Stage.MATCH_SET_2: "Proceed ->",
    Stage.CLOZE: "Next Challenge ->",
    Stage.OPEN_QUESTIONS: "Finish Escape Room ->",
}

SKIP_LABEL = "Skip (Preview) ->"
PREVIEW_BANNER = "TEACHER PREVIEW MODE - Navigation is unlocked"
SUCCESS_MESSAGE = (
    "Congratulations! You have completed all challenges and unlocked the final door."
)


def option_letter(index: int) -> str:
    return chr(65 + index)


# =============================================================================
# Stage bodies
# =============================================================================


def _render_mcq(state, items) -> tuple[McqView, list[Command]]:
    evaluator = get_evaluator(StageKind.MCQ)
    questions = []
    for i, item in enumerate(items):
        choice = state.choices.get(i)
        options = tuple(
            OptionView(letter=option_letter(j), text=text, selected=choice == j)
            for j, text in enumerate(item.options)
        )
        questions.append(
            QuestionView(number=i + 1, text=item.question, options=options, mark=evaluator.mark(state, items, i))
        )
    commands = [Command("<n><letter>", "answer a question")]
    if not evaluator.is_complete(state, items):
        commands.append(Command("check", "Check Answers"))
    return McqView(questions=tuple(questions)), commands


def _item_state(state: MatchingState, column: Column, pair_index: int) -> ItemState:
    if pair_index in state.resolved:
        return ItemState.RESOLVED
    if state.pending(column) == pair_index:
        return ItemState.MISMATCHED if state.mismatch is not None else ItemState.SELECTED
    return ItemState.IDLE


def _render_matching(state: MatchingState, pairs) -> tuple[MatchingView, list[Command]]:
    identity = tuple(range(len(pairs)))
    left_order = state.left_order if state.shuffled else identity
    right_order = state.right_order if state.shuffled else identity

    left = tuple(
        MatchItemView(key=f"a{pos + 1}", text=pairs[idx].left, state=_item_state(state, Column.LEFT, idx))
        for pos, idx in enumerate(left_order)
    )
    right = tuple(
        MatchItemView(key=f"b{pos + 1}", text=pairs[idx].right, state=_item_state(state, Column.RIGHT, idx))
        for pos, idx in enumerate(right_order)
    )
    commands = [Command("a<n>", "pick from column A"), Command("b<n>", "pick from column B")]
    return MatchingView(left=left, right=right), commands


def _render_cloze(state, spec) -> tuple[ClozeView, list[Command]]:
    evaluator = get_evaluator(StageKind.CLOZE)
    marker = get_settings().gap_marker
    fragments = tuple(spec.fragments(marker))
    answer_count = len(spec.answers)
    slot_count = max(len(fragments) - 1, answer_count)

    gaps = tuple(
        GapView(
            number=i + 1,
            word=state.placements.get(i),
            mark=evaluator.gap_mark(state, spec, i),
            inert=i >= answer_count,
        )
        for i in range(slot_count)
    )
    complete = evaluator.is_complete(state, spec)
    bank = tuple(evaluator.availability(state, spec).items())

    commands = [Command("put <gap> <word>", "fill a gap"), Command("take <gap>", "empty a gap")]
    if not complete:
        commands.append(Command("check", "Check Answers"))
    return ClozeView(fragments=fragments, gaps=gaps, bank=bank, bank_visible=not complete), commands


def _render_open_questions(state, items) -> tuple[OpenQuestionsView, list[Command]]:
    evaluator = get_evaluator(StageKind.OPEN_QUESTIONS)
    questions = []
    commands = []
    for i, item in enumerate(items):
        revealed = i in state.revealed
        reviewed = i in state.reviewed
        questions.append(
            OpenQuestionView(
                number=i + 1,
                text=item.question,
                revealed=revealed,
                reviewed=reviewed,
                model_answer=item.model_answer if revealed else None,
            )
        )
        if not revealed:
            commands.append(Command(f"show {i + 1}", f"Show Answer {i + 1}"))
        elif evaluator.can_mark_reviewed(state, i):
            commands.append(Command(f"got {i + 1}", f"Got It {i + 1}"))
    return OpenQuestionsView(questions=tuple(questions)), commands


# =============================================================================
# Entry point
# =============================================================================


def render(state: SessionState, payload: ContentPayload, preview: bool = False) -> Screen:
    """Build the Screen for the current state."""
    stage = state.stage
    commands: list[Command] = []

    if stage == Stage.INTRO:
        body: Body = IntroView(text=payload.intro_text)
        heading = payload.title
    elif stage == Stage.COMPLETE:
        body = CompleteView(message=SUCCESS_MESSAGE)
        heading = HEADINGS[stage]
    else:
        heading = HEADINGS[stage]
        content = stage_content(payload, stage)
        stage_state = state.of(stage)
        if stage in (Stage.MCQ_SET_1, Stage.MCQ_SET_2):
            body, commands = _render_mcq(stage_state, content)
        elif stage in (Stage.MATCH_SET_1, Stage.MATCH_SET_2):
            body, commands = _render_matching(stage_state, content)
        elif stage == Stage.CLOZE:
            body, commands = _render_cloze(stage_state, content)
        else:
            body, commands = _render_open_questions(stage_state, content)

    if stage == Stage.COMPLETE:
        commands.append(Command("restart", "Play Again"))
    else:
        complete = stage_complete(state, payload)
        if complete:
            commands.append(Command("next", ADVANCE_LABELS[stage]))
        elif preview:
            commands.append(Command("next", SKIP_LABEL))

    return Screen(
        stage=stage,
        title=payload.title,
        heading=heading,
        instructions=INSTRUCTIONS[stage],
        body=body,
        commands=tuple(commands),
        progress=stage_progress(state, payload),
        preview=preview,
        notice=state.notice,
    )
