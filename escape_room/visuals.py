"""
Escape Room Visual Components.

Pastel "study room" palette. Turns a renderer Screen into rich renderables;
nothing in here reads or changes session state.
"""

from __future__ import annotations

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.columns import Columns
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .renderer import (
    PREVIEW_BANNER,
    ClozeView,
    CompleteView,
    IntroView,
    ItemState,
    MatchingView,
    McqView,
    OpenQuestionsView,
    Screen,
)
from .stages.base import Mark, StageProgress

# =============================================================================
# COLOR THEME
# =============================================================================

ROOM_THEME = {
    "primary": "#7FB3D5",  # Soft blue - headings, borders
    "secondary": "#C39BD3",  # Lavender - selections
    "accent": "#F5B7B1",  # Rose - preview banner
    "success": "#82E0AA",  # Mint - correct answers
    "warning": "#F7DC6F",  # Butter - notices
    "error": "#F1948A",  # Coral - incorrect
    "dim": "#85929E",  # Slate - secondary text
    "white": "#FDFEFE",  # Paper - primary text
}

STYLES = {
    "room_primary": Style(color=ROOM_THEME["primary"], bold=True),
    "room_secondary": Style(color=ROOM_THEME["secondary"], bold=True),
    "room_accent": Style(color=ROOM_THEME["accent"], bold=True),
    "room_success": Style(color=ROOM_THEME["success"], bold=True),
    "room_warning": Style(color=ROOM_THEME["warning"], bold=True),
    "room_error": Style(color=ROOM_THEME["error"], bold=True),
    "room_dim": Style(color=ROOM_THEME["dim"]),
    "room_text": Style(color=ROOM_THEME["white"]),
}

MARK_STYLES = {
    Mark.NONE: STYLES["room_text"],
    Mark.CORRECT: STYLES["room_success"],
    Mark.INCORRECT: STYLES["room_error"],
}

MARK_ICONS = {
    Mark.NONE: " ",
    Mark.CORRECT: "✓",
    Mark.INCORRECT: "✗",
}

ITEM_STYLES = {
    ItemState.IDLE: STYLES["room_text"],
    ItemState.SELECTED: STYLES["room_secondary"],
    ItemState.MISMATCHED: STYLES["room_error"],
    ItemState.RESOLVED: Style(color=ROOM_THEME["success"], strike=True),
}


# =============================================================================
# Stage bodies
# =============================================================================


def render_intro(view: IntroView) -> RenderableType:
    return Align.left(Text(view.text, style=STYLES["room_text"]))


def render_mcq(view: McqView) -> RenderableType:
    """One block per question; the chosen option is bracketed."""
    blocks = []
    for question in view.questions:
        text = Text()
        text.append(f"{MARK_ICONS[question.mark]} ", style=MARK_STYLES[question.mark])
        text.append(f"{question.number}. {question.text}\n", style=MARK_STYLES[question.mark])
        for option in question.options:
            if option.selected:
                text.append(f"   [{option.letter}] {option.text}\n", style=STYLES["room_secondary"])
            else:
                text.append(f"    {option.letter}) {option.text}\n", style=STYLES["room_dim"])
        blocks.append(text)
    return Group(*blocks)


def render_matching(view: MatchingView) -> RenderableType:
    table = Table(box=box.SIMPLE, show_header=True, header_style=STYLES["room_primary"], expand=True)
    table.add_column("Column A")
    table.add_column("Column B")
    for left, right in zip(view.left, view.right):
        table.add_row(
            Text(f"{left.key}  {left.text}", style=ITEM_STYLES[left.state]),
            Text(f"{right.key}  {right.text}", style=ITEM_STYLES[right.state]),
        )
    return table


def render_cloze(view: ClozeView) -> RenderableType:
    """Interleave text fragments with numbered gaps; surplus gaps trail the text."""
    placeholders = len(view.fragments) - 1
    text = Text(view.fragments[0], style=STYLES["room_text"])
    for i, gap in enumerate(view.gaps):
        if i >= placeholders:
            text.append(" ")
        label = gap.word if gap.word is not None else "_____"
        if gap.inert:
            style = STYLES["room_dim"]
        elif gap.word is None:
            style = STYLES["room_secondary"]
        else:
            style = MARK_STYLES[gap.mark]
        text.append(f"[{gap.number}: {label}]", style=style)
        if i < placeholders:
            text.append(view.fragments[i + 1], style=STYLES["room_text"])

    if not view.bank_visible:
        return text

    bank = [
        Text(f"{word} x{count}", style=STYLES["room_secondary"] if count else STYLES["room_dim"])
        for word, count in view.bank
    ]
    return Group(
        text,
        Text(""),
        Panel(Columns(bank, padding=(0, 2)), title="Word Bank", title_align="left",
              border_style=Style(color=ROOM_THEME["dim"]), box=box.ROUNDED),
    )


def render_open_questions(view: OpenQuestionsView) -> RenderableType:
    blocks = []
    for question in view.questions:
        text = Text()
        icon = "✓" if question.reviewed else "?"
        text.append(f"{icon} {question.number}. {question.text}\n",
                    style=STYLES["room_success"] if question.reviewed else STYLES["room_text"])
        if question.model_answer is not None:
            text.append("   Model answer: ", style=STYLES["room_dim"])
            text.append(f"{question.model_answer}\n", style=STYLES["room_secondary"])
        blocks.append(text)
    return Group(*blocks)


def render_complete(view: CompleteView) -> RenderableType:
    return Align.center(Text(view.message, style=STYLES["room_success"]))


BODY_RENDERERS = {
    IntroView: render_intro,
    McqView: render_mcq,
    MatchingView: render_matching,
    ClozeView: render_cloze,
    OpenQuestionsView: render_open_questions,
    CompleteView: render_complete,
}


# =============================================================================
# Screen
# =============================================================================


def render_progress(progress: StageProgress | None) -> Text:
    if progress is None or progress.total == 0:
        return Text("")
    width = 20
    filled = int(width * progress.done / progress.total)
    bar = Text()
    bar.append("█" * filled, style=STYLES["room_success"])
    bar.append("░" * (width - filled), style=STYLES["room_dim"])
    bar.append(f" {progress.done}/{progress.total}", style=STYLES["room_dim"])
    return bar


def render_commands(screen: Screen) -> Text:
    text = Text()
    for i, command in enumerate(screen.commands):
        if i:
            text.append("   ")
        text.append(command.key, style=STYLES["room_primary"])
        text.append(f" {command.label}", style=STYLES["room_dim"])
    return text


def present(screen: Screen) -> RenderableType:
    """Build the full-screen renderable for a Screen."""
    parts: list[RenderableType] = []
    if screen.preview:
        parts.append(Panel(Align.center(Text(PREVIEW_BANNER, style=STYLES["room_accent"])),
                           border_style=Style(color=ROOM_THEME["accent"]), box=box.HEAVY))

    inner: list[RenderableType] = []
    if screen.instructions:
        inner.append(Text(screen.instructions, style=STYLES["room_dim"]))
        inner.append(Text(""))
    inner.append(BODY_RENDERERS[type(screen.body)](screen.body))
    progress = render_progress(screen.progress)
    if progress.plain:
        inner.append(Text(""))
        inner.append(progress)

    parts.append(
        Panel(
            Group(*inner),
            title=Text(screen.heading, style=STYLES["room_primary"]),
            title_align="left",
            subtitle=Text(screen.title, style=STYLES["room_dim"]) if screen.heading != screen.title else None,
            border_style=Style(color=ROOM_THEME["primary"]),
            box=box.HEAVY,
            padding=(1, 2),
        )
    )
    if screen.notice:
        parts.append(Text(screen.notice, style=STYLES["room_warning"]))
    parts.append(render_commands(screen))
    return Group(*parts)
