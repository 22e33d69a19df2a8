"""
Terminal study view.

Renders a StudySession with Rich and feeds typed commands back into it as
study intents. The view subscribes to the session and redraws after every
transition.
"""

import logging
from typing import Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from flashdeck.study_session import StudyIntent, StudySession, StudyState

logger = logging.getLogger(__name__)
console = Console()

QUIT_COMMANDS = {"q", "quit", "exit"}

COMMANDS: Dict[str, StudyIntent] = {
    "": StudyIntent.FLIP,
    "space": StudyIntent.FLIP,
    "f": StudyIntent.FLIP,
    "n": StudyIntent.NEXT,
    "right": StudyIntent.NEXT,
    "p": StudyIntent.PREVIOUS,
    "left": StudyIntent.PREVIOUS,
    "c": StudyIntent.MARK_CORRECT,
    "x": StudyIntent.MARK_INCORRECT,
    "s": StudyIntent.SHUFFLE,
    "r": StudyIntent.RESTART,
}

FRONT_HELP = "[dim]Enter/f: flip  n: next  p: previous  s: shuffle  r: restart  q: quit[/dim]"  # noqa: E501
BACK_HELP = "[dim]c: correct  x: incorrect  n: skip  p: previous  s: shuffle  r: restart  q: quit[/dim]"  # noqa: E501


def parse_command(raw: str) -> Optional[StudyIntent]:
    """
    Map a typed command to a study intent.

    A lone space counts as a flip; everything else is matched
    case-insensitively after trimming. Returns None for unknown input.
    """
    if raw == " ":
        return StudyIntent.FLIP
    return COMMANDS.get(raw.strip().lower())


def _progress_bar(fraction: float, width: int = 30) -> str:
    filled = int(round(fraction * width))
    return "█" * filled + "░" * (width - filled)


def _render_summary(state: StudyState) -> None:
    summary = Table(show_header=False, box=None)
    summary.add_column("Result")
    summary.add_column("Count", justify="right")
    summary.add_row("[green]Correct[/green]", str(state.correct_count))
    summary.add_row("[red]Incorrect[/red]", str(state.incorrect_count))
    console.print(
        Panel(
            summary,
            title="You've reached the end of this deck!",
            border_style="cyan",
        )
    )
    console.print("[dim]r: study again  q: back to deck[/dim]")


def render_state(state: StudyState) -> None:
    """Draw the current card, progress and running counts."""
    console.rule(
        f"[bold]Progress {state.cursor + 1} / {state.total}[/bold]"
    )
    console.print(
        f"{_progress_bar(state.progress)}  "
        f"[green]✓ {state.correct_count} Correct[/green]  "
        f"[red]✗ {state.incorrect_count} Incorrect[/red]"
    )
    border = "blue" if state.flipped else "green"
    console.print(
        Panel(
            state.face_text or "",
            title=state.face_label,
            border_style=border,
        )
    )
    if state.is_complete:
        _render_summary(state)
    else:
        console.print(BACK_HELP if state.flipped else FRONT_HELP)


def start_study_flow(session: StudySession) -> None:
    """
    Run an interactive study session until the user quits.

    Parameters:
        session (StudySession): A freshly opened session. Empty sessions
            only print a notice and return.
    """
    deck = session.deck
    header = f"[bold cyan]{deck.name}[/bold cyan]"
    if deck.description:
        header += f"\n{deck.description}"
    console.print(Panel(header, border_style="cyan"))

    if session.is_empty:
        console.print(
            "[bold yellow]This deck has no cards to study. "
            "Add some cards to get started![/bold yellow]"
        )
        return

    unsubscribe = session.subscribe(render_state)
    try:
        render_state(session.state)
        while True:
            raw = console.input("[bold]> [/bold]")
            if raw.strip().lower() in QUIT_COMMANDS:
                break
            intent = parse_command(raw)
            if intent is None:
                console.print(
                    f"[bold red]Unknown command: {raw.strip()}[/bold red]"
                )
                continue
            if (
                intent in (StudyIntent.MARK_CORRECT, StudyIntent.MARK_INCORRECT)
                and not session.flipped
            ):
                console.print(
                    "[yellow]Flip the card before marking an answer.[/yellow]"
                )
                continue
            session.dispatch(intent)
    finally:
        unsubscribe()

    state = session.state
    logger.info(
        f"Study session for deck {deck.id} ended: "
        f"{state.correct_count} correct, {state.incorrect_count} incorrect"
    )
    console.print(
        f"[bold cyan]Study session finished.[/bold cyan] "
        f"Correct: {state.correct_count}, Incorrect: {state.incorrect_count}"
    )
