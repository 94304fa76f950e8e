"""
Terminal runner: reads learner commands, dispatches them to the session and
redraws the screen after every mutation.

Command grammar (case-insensitive):
    next | n            advance (or skip, in preview mode)
    restart             play again (only once escaped)
    quit | q            leave
    help | ?            list commands
    3b                  MCQ: question 3, option B
    a3 | b5             matching: item 3 of column A / item 5 of column B
    put 2 evaporation   cloze: place a bank word in gap 2
    take 2              cloze: empty gap 2
    check               MCQ / cloze: check answers
    show 1 | got 1      open questions: reveal model answer / mark reviewed
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Callable

from loguru import logger
from rich.console import Console

from .payload import ContentPayload
from .session import EscapeRoomSession, Stage, stage_kind
from .stages import StageKind
from .stages.matching import Column
from .visuals import present

QUIT = "quit"

_MCQ_PATTERN = re.compile(r"^(\d+)\s*([a-z])$")
_MATCH_PATTERN = re.compile(r"^([ab])\s*(\d+)$")
_PUT_PATTERN = re.compile(r"^put\s+(\d+)\s+(.+)$", re.IGNORECASE)
_INDEXED_PATTERN = re.compile(r"^(take|show|got)\s+(\d+)$")

HELP_TEXT = (
    "Commands: next (n), quit (q), help (?), restart (after escaping). "
    "MCQ: '3b', check. Matching: 'a3', 'b5'. "
    "Cloze: 'put 2 word', 'take 2', check. Open questions: 'show 1', 'got 1'."
)


@dataclass(frozen=True)
class Action:
    """One discrete learner action. Indices in args are 0-based."""
    name: str
    args: tuple = ()


def parse_command(stage: Stage, text: str) -> Action | None:
    """
    Turn a line of learner input into an Action.

    Stage-specific commands only parse in their own stage.

    Returns:
        The Action, or None if the input is not a command here
    """
    raw = text.strip()
    command = raw.lower()
    if not command:
        return None

    if command in ("next", "n"):
        return Action("advance")
    if command == "restart" and stage == Stage.COMPLETE:
        return Action("restart")
    if command in ("quit", "q", "exit"):
        return Action(QUIT)
    if command in ("help", "?"):
        return Action("help")

    kind = stage_kind(stage)

    if command == "check" and kind in (StageKind.MCQ, StageKind.CLOZE):
        return Action("check")

    if kind == StageKind.MCQ:
        match = _MCQ_PATTERN.match(command)
        if match:
            return Action("select_option", (int(match.group(1)) - 1, ord(match.group(2)) - ord("a")))

    elif kind == StageKind.MATCHING:
        match = _MATCH_PATTERN.match(command)
        if match:
            column = Column.LEFT if match.group(1) == "a" else Column.RIGHT
            return Action("select_match", (column, int(match.group(2)) - 1))

    elif kind == StageKind.CLOZE:
        # Keep the word's original casing
        match = _PUT_PATTERN.match(raw)
        if match:
            return Action("place_word", (int(match.group(1)) - 1, match.group(2).strip()))
        match = _INDEXED_PATTERN.match(command)
        if match and match.group(1) == "take":
            return Action("remove_word", (int(match.group(2)) - 1,))

    elif kind == StageKind.OPEN_QUESTIONS:
        match = _INDEXED_PATTERN.match(command)
        if match and match.group(1) == "show":
            return Action("reveal_answer", (int(match.group(2)) - 1,))
        if match and match.group(1) == "got":
            return Action("mark_reviewed", (int(match.group(2)) - 1,))

    return None


def dispatch(session: EscapeRoomSession, action: Action) -> None:
    """Apply an Action to the session."""
    if action.name == "advance":
        session.advance()
    elif action.name == "restart":
        session.restart()
    elif action.name == "help":
        session.post_notice(HELP_TEXT)
    elif action.name == "check":
        session.check_answers()
    elif action.name == "select_option":
        session.select_option(*action.args)
    elif action.name == "select_match":
        session.select_match(*action.args)
    elif action.name == "place_word":
        session.place_word(*action.args)
    elif action.name == "remove_word":
        session.remove_word(*action.args)
    elif action.name == "reveal_answer":
        session.reveal_answer(*action.args)
    elif action.name == "mark_reviewed":
        session.mark_reviewed(*action.args)
    else:
        raise ValueError(f"Unknown action: {action.name}")


def run_commands(session: EscapeRoomSession, lines) -> bool:
    """
    Feed input lines to a session until they run out or the learner quits.

    Deferred actions that fell due while waiting for a line fire before that
    line is handled; nothing here waits on them. A pick typed while a
    mismatch is still highlighted therefore supersedes it.

    Returns:
        True if the learner quit
    """
    for line in lines:
        session.tick()
        action = parse_command(session.stage, line)
        if action is None:
            session.post_notice(f"Unknown command: '{line.strip()}'. Type 'help' for the list.")
            continue
        if action.name == QUIT:
            return True
        logger.debug("Action {}{}", action.name, action.args)
        dispatch(session, action)
    return False


def _input_lines(console: Console, input_fn: Callable[[str], str] | None):
    prompt = "> "
    while True:
        try:
            if input_fn is not None:
                yield input_fn(prompt)
            else:
                yield console.input(prompt)
        except EOFError:
            return


def play(
    payload: ContentPayload,
    preview: bool = False,
    console: Console | None = None,
    seed: int | None = None,
    input_fn: Callable[[str], str] | None = None,
) -> EscapeRoomSession:
    """
    Run an interactive session in the terminal.

    Args:
        payload: Content to play
        preview: Unlock navigation (teacher preview)
        console: Rich console to draw on
        seed: Seed for the matching shuffles (overrides settings)
        input_fn: Line reader; defaults to console.input

    Returns:
        The session, in whatever state the learner left it
    """
    console = console or Console()
    rng = random.Random(seed) if seed is not None else None
    session = EscapeRoomSession(payload, preview=preview, rng=rng)

    def redraw(s: EscapeRoomSession) -> None:
        console.clear()
        console.print(present(s.render()))

    session.subscribe(redraw)
    redraw(session)
    logger.debug("Session started: '{}' (preview={})", payload.title, preview)

    try:
        run_commands(session, _input_lines(console, input_fn))
    except KeyboardInterrupt:
        pass
    finally:
        session.scheduler.cancel_all()
    console.print("Goodbye!")
    return session
