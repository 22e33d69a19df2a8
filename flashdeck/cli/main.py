"""
CLI entry point for flashdeck.
"""

# Standard library imports
import random
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from rich.console import Console
from rich.table import Table

# Local application imports
from flashdeck import config as flashdeck_config
from flashdeck.cli.study_ui import start_study_flow
from flashdeck.db.database import FlashcardDatabase
from flashdeck.deck_service import DeckService
from flashdeck.exceptions import (
    DatabaseError,
    FlashdeckError,
    NotFoundOrUnauthorizedError,
    UnauthorizedError,
    ValidationFailedError,
)
from flashdeck.models import Credential


console = Console()

app = typer.Typer(
    name="flashdeck",
    help="Flashdeck: build decks of flashcards and study them.",
    add_completion=False,
    rich_markup_mode="markdown",
)
deck_app = typer.Typer(name="deck", help="Create, show, edit and delete decks.")
card_app = typer.Typer(name="card", help="Add, edit and delete cards.")
app.add_typer(deck_app)
app.add_typer(card_app)


# ---------------------------------------------------------------------------
# Helpers for resolving --db and --user (fall back to FLASHDECK_* settings)
# ---------------------------------------------------------------------------


def _resolve_db_path(db: Optional[Path]) -> Path:
    """Resolve db path from the CLI flag or the FLASHDECK_DB_PATH setting."""
    if db is not None:
        return db
    return flashdeck_config.settings.db_path


def _resolve_credential(user: Optional[str]) -> Optional[Credential]:
    """
    Build the caller's credential from --user or the FLASHDECK_USER_ID
    setting. Returns None when neither is set, which the service rejects as
    unauthorized.
    """
    user_id = user or flashdeck_config.settings.user_id
    if not user_id:
        return None
    return Credential(user_id=user_id)


def _report_error(error: FlashdeckError) -> None:
    """Print a user-facing message for a rejected operation."""
    if isinstance(error, UnauthorizedError):
        console.print(
            "[bold red]Please sign in: pass --user "
            "or set FLASHDECK_USER_ID.[/bold red]"
        )
    elif isinstance(error, NotFoundOrUnauthorizedError):
        console.print(f"[bold red]Error: {error}[/bold red]")
    elif isinstance(error, ValidationFailedError):
        console.print("[bold red]Invalid input:[/bold red]")
        for field_name, messages in error.field_errors.items():
            for message in messages:
                console.print(f"- [yellow]{field_name}[/yellow]: {message}")
    elif isinstance(error, DatabaseError):
        console.print(f"[bold red]A database error occurred: {error}[/bold red]")
    else:
        console.print(f"[bold red]Error: {error}[/bold red]")


def _open_database(db: Optional[Path]) -> FlashcardDatabase:
    return FlashcardDatabase(db_path=_resolve_db_path(db))


# Common typer options reused across commands
_db_option = typer.Option(  # noqa: B008
    None,
    "--db",
    help="Path to the DuckDB database file. "
    "Falls back to the FLASHDECK_DB_PATH setting.",
)

_user_option = typer.Option(  # noqa: B008
    None,
    "--user",
    help="Signed-in user id. Falls back to the FLASHDECK_USER_ID setting.",
)


def _print_cards_table(title: str, cards) -> None:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Front", style="cyan")
    table.add_column("Back", style="magenta")
    for card in cards:
        table.add_row(str(card.id), card.front, card.back)
    console.print(table)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@app.command()
def decks(
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """List your decks (the dashboard)."""
    credential = _resolve_credential(user)
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            service = DeckService(db_inst)
            user_decks = service.list_decks(credential)
            if not user_decks:
                console.print(
                    "[yellow]You don't have any decks yet. "
                    "Create your first deck to get started![/yellow]"
                )
                return
            card_counts = service.card_counts(credential)
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e

    noun = "deck" if len(user_decks) == 1 else "decks"
    console.print(f"You have {len(user_decks)} {noun}.")
    table = Table(title="Decks")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Cards", style="magenta")
    table.add_column("Last updated", style="yellow")
    for deck in user_decks:
        table.add_row(
            str(deck.id),
            deck.name,
            deck.description or "No description",
            str(card_counts.get(deck.id, 0)),
            deck.updated_at.strftime("%b %d, %Y"),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Deck commands
# ---------------------------------------------------------------------------


@deck_app.command("create")
def deck_create(
    name: str = typer.Argument(..., help="Name of the new deck."),  # noqa: B008
    description: Optional[str] = typer.Option(  # noqa: B008
        None, "--description", "-d", help="Optional description."
    ),
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Create a new deck."""
    credential = _resolve_credential(user)
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            deck = DeckService(db_inst).create_deck(
                credential, name, description
            )
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e
    console.print(
        f"[bold green]Created deck[/bold green] "
        f"[cyan]{deck.name}[/cyan] (id {deck.id})."
    )


@deck_app.command("show")
def deck_show(
    deck_id: int = typer.Argument(..., help="ID of the deck."),  # noqa: B008
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Show a deck and its cards."""
    credential = _resolve_credential(user)
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            service = DeckService(db_inst)
            deck = service.get_deck(credential, deck_id)
            cards = service.list_cards(credential, deck_id)
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e

    console.print(f"[bold cyan]{deck.name}[/bold cyan]")
    if deck.description:
        console.print(deck.description)
    if not cards:
        console.print(
            "[yellow]This deck has no cards yet. "
            "Add one with `flashdeck card add`.[/yellow]"
        )
        return
    _print_cards_table(f"Cards ({len(cards)})", cards)


@deck_app.command("edit")
def deck_edit(
    deck_id: int = typer.Argument(..., help="ID of the deck."),  # noqa: B008
    name: str = typer.Option(..., "--name", help="New name."),  # noqa: B008
    description: Optional[str] = typer.Option(  # noqa: B008
        None,
        "--description",
        "-d",
        help="New description; omit to keep the current one, pass \"\" to clear it.",  # noqa: E501
    ),
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Rename a deck and optionally change its description."""
    credential = _resolve_credential(user)
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            deck = DeckService(db_inst).update_deck(
                credential, deck_id, name, description
            )
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e
    console.print(
        f"[bold green]Updated deck[/bold green] [cyan]{deck.name}[/cyan]."
    )


@deck_app.command("delete")
def deck_delete(
    deck_id: int = typer.Argument(..., help="ID of the deck."),  # noqa: B008
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Delete a deck and all of its cards."""
    credential = _resolve_credential(user)
    if not yes:
        confirmed = typer.confirm(
            "Are you sure you want to delete this deck and all of its cards?"
        )
        if not confirmed:
            console.print("Delete cancelled.")
            raise typer.Exit()
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            deck = DeckService(db_inst).delete_deck(credential, deck_id)
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e
    console.print(
        f"[bold green]Deleted deck[/bold green] [cyan]{deck.name}[/cyan]."
    )


# ---------------------------------------------------------------------------
# Card commands
# ---------------------------------------------------------------------------


@card_app.command("add")
def card_add(
    deck_id: int = typer.Argument(..., help="ID of the deck."),  # noqa: B008
    front: str = typer.Option(..., "--front", help="Front text."),  # noqa: B008
    back: str = typer.Option(..., "--back", help="Back text."),  # noqa: B008
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Add a card to a deck."""
    credential = _resolve_credential(user)
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            card = DeckService(db_inst).create_card(
                credential, deck_id, front, back
            )
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]Added card[/bold green] (id {card.id}).")


@card_app.command("edit")
def card_edit(
    deck_id: int = typer.Argument(..., help="ID of the deck."),  # noqa: B008
    card_id: int = typer.Argument(..., help="ID of the card."),  # noqa: B008
    front: str = typer.Option(..., "--front", help="Front text."),  # noqa: B008
    back: str = typer.Option(..., "--back", help="Back text."),  # noqa: B008
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Replace the text of a card."""
    credential = _resolve_credential(user)
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            card = DeckService(db_inst).update_card(
                credential, deck_id, card_id, front, back
            )
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]Updated card[/bold green] (id {card.id}).")


@card_app.command("delete")
def card_delete(
    deck_id: int = typer.Argument(..., help="ID of the deck."),  # noqa: B008
    card_id: int = typer.Argument(..., help="ID of the card."),  # noqa: B008
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Delete a card from a deck."""
    credential = _resolve_credential(user)
    if not yes:
        confirmed = typer.confirm("Are you sure you want to delete this card?")
        if not confirmed:
            console.print("Delete cancelled.")
            raise typer.Exit()
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            card = DeckService(db_inst).delete_card(
                credential, deck_id, card_id
            )
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]Deleted card[/bold green] (id {card.id}).")


# ---------------------------------------------------------------------------
# Study command
# ---------------------------------------------------------------------------


@app.command()
def study(
    deck_id: int = typer.Argument(  # noqa: B008
        ..., help="ID of the deck to study."
    ),
    shuffle: bool = typer.Option(
        False, "--shuffle", help="Shuffle the cards before starting."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for the shuffle (reproducible order)."
    ),
    db: Optional[Path] = _db_option,
    user: Optional[str] = _user_option,
):
    """Study a deck interactively."""
    credential = _resolve_credential(user)
    rng = random.Random(seed) if seed is not None else None
    try:
        with _open_database(db) as db_inst:
            db_inst.initialize_schema()
            session = DeckService(db_inst).open_study_session(
                credential, deck_id, rng=rng
            )
    except FlashdeckError as e:
        _report_error(e)
        raise typer.Exit(code=1) from e

    if shuffle:
        session.shuffle()
    start_study_flow(session)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application, turning unexpected exceptions into exit
    status 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
