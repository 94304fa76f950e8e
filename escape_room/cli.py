"""
Escape Room CLI.

Commands:
- escape-room play PAYLOAD      - Play a payload in the terminal
- escape-room preview PAYLOAD   - Play with navigation unlocked
- escape-room bundle PAYLOAD    - Write a standalone .pyz artifact
- escape-room inspect PAYLOAD   - Show stage sizes and content warnings
- escape-room sample            - Write the demo payload
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .bundler import bundle as write_bundle
from .config import get_settings
from .exceptions import BundleError, PayloadLoadError
from .payload import ContentPayload, dump_payload, load_payload, load_sample_payload
from .runner import play as run_session


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="escape-room",
    help="Escape Room: gated assessment sessions in the terminal",
    no_args_is_help=True,
)
console = Console()

LOG_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)


def _load(path: Path) -> ContentPayload:
    try:
        return load_payload(path)
    except PayloadLoadError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
) -> None:
    """Escape Room: gated assessment sessions in the terminal."""
    if verbose:
        configure_logging("DEBUG")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def play(
    payload_path: Path = typer.Argument(..., help="Payload JSON file"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for the matching shuffles"),
) -> None:
    """Play an escape room in the terminal."""
    run_session(_load(payload_path), preview=False, console=console, seed=seed)


@app.command()
def preview(
    payload_path: Path = typer.Argument(..., help="Payload JSON file"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for the matching shuffles"),
) -> None:
    """Play with every stage unlocked (teacher preview)."""
    run_session(_load(payload_path), preview=True, console=console, seed=seed)


@app.command()
def bundle(
    payload_path: Path = typer.Argument(..., help="Payload JSON file"),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Target .pyz file or directory (default: settings output_dir)",
    ),
    preview_mode: bool = typer.Option(False, "--preview", help="Unlock navigation in the artifact"),
) -> None:
    """Write a standalone artifact that plays the payload offline."""
    payload = _load(payload_path)
    try:
        target = write_bundle(payload, output=output, preview=preview_mode)
    except BundleError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    mode = " [yellow](preview)[/yellow]" if preview_mode else ""
    console.print(f"[green]Wrote {escape(str(target))}[/green]{mode}")
    console.print(f"Run it with: [cyan]python {escape(str(target))}[/cyan]")


@app.command()
def inspect(
    payload_path: Path = typer.Argument(..., help="Payload JSON file"),
) -> None:
    """Show stage sizes and content problems that would degrade play."""
    payload = _load(payload_path)
    marker = get_settings().gap_marker

    console.print(f"\n[bold cyan]{escape(payload.title)}[/bold cyan]\n")

    table = Table()
    table.add_column("Stage")
    table.add_column("Items", justify="right")
    table.add_row("MCQ set 1", str(len(payload.mcq_set_1)))
    table.add_row("MCQ set 2", str(len(payload.mcq_set_2)))
    table.add_row("Matching set 1", str(len(payload.matching_set_1)))
    table.add_row("Matching set 2", str(len(payload.matching_set_2)))
    table.add_row("Fill the gap", str(len(payload.fill_gap.answers)))
    table.add_row("Open questions", str(len(payload.open_questions)))
    console.print(table)

    warnings = content_warnings(payload, marker)
    if warnings:
        console.print()
        for warning in warnings:
            console.print(f"[yellow]! {escape(warning)}[/yellow]")
    else:
        console.print("\n[green]No content problems found[/green]")


def content_warnings(payload: ContentPayload, marker: str = "[GAP]") -> list[str]:
    """Conventions the runtime tolerates but degrades on."""
    warnings = []
    placeholders = payload.fill_gap.placeholder_count(marker)
    answers = len(payload.fill_gap.answers)
    if placeholders != answers:
        warnings.append(
            f"Fill-the-gap text has {placeholders} '{marker}' placeholder(s) "
            f"but {answers} answer(s)"
        )
    for label, items in (("MCQ set 1", payload.mcq_set_1), ("MCQ set 2", payload.mcq_set_2)):
        for i, item in enumerate(items):
            if not 0 <= item.correct_index < len(item.options):
                warnings.append(f"{label} question {i + 1}: correct index {item.correct_index} has no option")
    return warnings


@app.command()
def sample(
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write to this file instead of stdout",
    ),
) -> None:
    """Write the demo payload (a starting point for authoring)."""
    text = json.dumps(dump_payload(load_sample_payload()), indent=2, ensure_ascii=False)
    if output is None:
        print(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    console.print(f"[green]Wrote {escape(str(output))}[/green]")


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings().log_level)
    app()


if __name__ == "__main__":
    main()
