"""
CLI entry point for revocab.
"""

# Standard library imports
import os
from datetime import date
from pathlib import Path
from typing import List, Optional

# Third-party imports
import typer
from rich.console import Console
from rich.table import Table

# Local application imports
from revocab.classifier import is_tough
from revocab.config import settings
from revocab.constants import TOUGH_MODE_TITLE
from revocab.db.database import VocabDatabase
from revocab.db.db_utils import (
    backup_database,
    find_latest_backup,
    restore_database,
)
from revocab.exceptions import (
    DatabaseError,
    ExtractionFileError,
    InvalidEntryStateError,
)
from revocab.models import GameMode, QuizDirection, VocabSet
from revocab.statistics import LibraryStatistics, compute_statistics
from revocab.streak import StreakInfo, evaluate_streak
from revocab.cli._ingest_logic import ingest_logic
from revocab.cli._play_logic import play_logic


console = Console()

app = typer.Typer(
    name="revocab",
    help="revocab: vocabulary trainer with flashcards, matching and multiple choice.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Helpers for resolving the --db path and the owner
# ---------------------------------------------------------------------------


def _resolve_db_path(db: Optional[Path]) -> Path:
    """Resolve db path from CLI flag, REVOCAB_DB envvar or the settings default."""
    if db is not None:
        return db
    env_val = os.environ.get("REVOCAB_DB")
    if env_val:
        return Path(env_val)
    return settings.db_path


def _resolve_owner(owner: Optional[str]) -> str:
    return owner or settings.owner_id


# Common typer options reused across commands
_db_option = typer.Option(  # noqa: B008
    None,
    "--db",
    help="Path to the DuckDB database file. "
    "Falls back to REVOCAB_DB, then REVOCAB_DB_PATH.",
    envvar="REVOCAB_DB",
)

_owner_option = typer.Option(  # noqa: B008
    None,
    "--owner",
    help="Owner whose library is used. Falls back to REVOCAB_OWNER_ID.",
)

_mode_option = typer.Option(  # noqa: B008
    GameMode.FLASHCARD,
    "--mode",
    "-m",
    help="Game type to play.",
    case_sensitive=False,
)

_reverse_option = typer.Option(  # noqa: B008
    False,
    "--reverse",
    "-r",
    help="Show the translation and ask for the original.",
)


def _load_sets(db_path: Path, owner_id: str) -> List[VocabSet]:
    with VocabDatabase(db_path=db_path) as db_inst:
        db_inst.initialize_schema()
        return db_inst.load_sets(owner_id)


def _find_set(sets: List[VocabSet], set_ref: str) -> Optional[VocabSet]:
    """
    Find a set by its 1-based position in `revocab sets`, its id or a
    unique id prefix.
    """
    if set_ref.isdigit():
        position = int(set_ref)
        if 1 <= position <= len(sets):
            return sets[position - 1]
    for vocab_set in sets:
        if vocab_set.id == set_ref:
            return vocab_set
    matches = [s for s in sets if s.id.startswith(set_ref)]
    if len(matches) == 1:
        return matches[0]
    return None


def _resolve_set(db_path: Path, owner_id: str, set_ref: str) -> VocabSet:
    vocab_set = _find_set(_load_sets(db_path, owner_id), set_ref)
    if vocab_set is None:
        console.print(f"[bold red]Error: No set matches '{set_ref}'.[/bold red]")
        raise typer.Exit(code=1)
    return vocab_set


def _direction(reverse: bool) -> QuizDirection:
    if reverse:
        return QuizDirection.TRANSLATION_TO_ORIGINAL
    return QuizDirection.ORIGINAL_TO_TRANSLATION


def _backup(db_path: Path) -> None:
    backup_path = backup_database(db_path)
    if backup_path.exists() and "backups" in str(backup_path):
        console.print(f"Database backed up to: [dim]{backup_path}[/dim]")


# ---------------------------------------------------------------------------
# Ingest command
# ---------------------------------------------------------------------------


@app.command()
def ingest(
    source: Path = typer.Argument(  # noqa: B008
        ...,
        help="Extraction result file, or a directory of them (one per page).",
    ),
    title: Optional[str] = typer.Option(  # noqa: B008
        None, "--title", "-t", help="Title of the new set."
    ),
    fail_fast: bool = typer.Option(  # noqa: B008
        False, "--fail-fast", help="Stop at the first invalid file."
    ),
    db: Optional[Path] = _db_option,
    owner: Optional[str] = _owner_option,
):
    """
    Create a new vocabulary set from stored extraction results.

    All files found at `source` are merged into one set in name order.
    """
    db_path = _resolve_db_path(db)
    console.print(f"Loading extraction results from [cyan]{source}[/cyan]...")
    try:
        new_set, errors = ingest_logic(
            db_path=db_path,
            owner_id=_resolve_owner(owner),
            source=source,
            title=title,
            fail_fast=fail_fast,
        )
    except ExtractionFileError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    except ValueError as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1) from e
    except DatabaseError as e:
        console.print(f"[bold red]Database Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    if errors:
        console.print("[bold red]Errors encountered while loading files:[/bold red]")
        for error in errors:
            console.print(f"- {error}")

    if new_set is None:
        console.print("[yellow]No extraction results found. Nothing was added.[/yellow]")
        raise typer.Exit(code=1)

    console.print(
        f"[bold green]Created set[/bold green] '{new_set.title}' "
        f"with [green]{len(new_set.items)}[/green] words."
    )


# ---------------------------------------------------------------------------
# Sets command
# ---------------------------------------------------------------------------


@app.command("sets")
def list_sets(
    db: Optional[Path] = _db_option,
    owner: Optional[str] = _owner_option,
):
    """List the vocabulary sets of the owner, newest first."""
    db_path = _resolve_db_path(db)
    try:
        sets = _load_sets(db_path, _resolve_owner(owner))
    except DatabaseError as e:
        console.print(f"[bold]A database error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e

    if not sets:
        console.print("[yellow]No sets yet. Use `revocab ingest` to add one.[/yellow]")
        return

    table = Table(title="Vocabulary Sets")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Words", style="magenta", justify="right")
    table.add_column("Tough", style="red", justify="right")
    table.add_column("Last Score", style="green", justify="right")
    table.add_column("ID", style="dim")
    for position, vocab_set in enumerate(sets, start=1):
        tough_count = sum(1 for item in vocab_set.items if is_tough(item))
        last_score = "-" if vocab_set.last_score is None else f"{vocab_set.last_score}%"
        table.add_row(
            str(position),
            vocab_set.title,
            str(len(vocab_set.items)),
            str(tough_count),
            last_score,
            vocab_set.id[:8],
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Play commands
# ---------------------------------------------------------------------------


def _run_play(
    db_path: Path,
    owner_id: str,
    mode: GameMode,
    reverse: bool,
    set_id: Optional[str],
) -> None:
    try:
        _backup(db_path)
        outcome = play_logic(
            db_path=db_path,
            owner_id=owner_id,
            mode=mode,
            direction=_direction(reverse),
            set_id=set_id,
        )
    except InvalidEntryStateError as e:
        console.print(f"[bold]Error: {e}[/bold]")
        raise typer.Exit(code=1) from e
    except DatabaseError as e:
        console.print(f"[bold]A database error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[bold]An unexpected error occurred:[/bold] {e}")
        raise typer.Exit(code=1) from e

    if outcome is not None:
        console.print(f"Final score: [bold]{outcome.score_percentage}%[/bold]")


@app.command()
def play(
    set_ref: str = typer.Argument(  # noqa: B008
        ..., help="Set number from `revocab sets`, or its id."
    ),
    mode: GameMode = _mode_option,
    reverse: bool = _reverse_option,
    db: Optional[Path] = _db_option,
    owner: Optional[str] = _owner_option,
):
    """Play one vocabulary set."""
    db_path = _resolve_db_path(db)
    owner_id = _resolve_owner(owner)
    try:
        vocab_set = _resolve_set(db_path, owner_id, set_ref)
    except DatabaseError as e:
        console.print(f"[bold]A database error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e

    console.print(
        f"Starting [bold]{mode.value}[/bold] for set: "
        f"[bold cyan]{vocab_set.title}[/bold cyan]"
    )
    _run_play(db_path, owner_id, mode, reverse, vocab_set.id)


@app.command()
def tough(
    mode: GameMode = _mode_option,
    reverse: bool = _reverse_option,
    db: Optional[Path] = _db_option,
    owner: Optional[str] = _owner_option,
):
    """Practise every tough word across all sets."""
    db_path = _resolve_db_path(db)
    console.print(
        f"Starting [bold]{mode.value}[/bold] in "
        f"[bold red]{TOUGH_MODE_TITLE}[/bold red]"
    )
    _run_play(db_path, _resolve_owner(owner), mode, reverse, None)


# ---------------------------------------------------------------------------
# Stats helpers & command
# ---------------------------------------------------------------------------


def _display_overview(
    cons: Console, statistics: LibraryStatistics, streak: StreakInfo
) -> None:
    overview = Table(title="Progress", show_header=False)
    overview.add_column("Metric", style="cyan")
    overview.add_column("Value", style="magenta")
    overview.add_row("Total Words", str(statistics.total_items))
    overview.add_row("Correct Answers", str(statistics.total_correct))
    overview.add_row("Wrong Answers", str(statistics.total_wrong))
    overview.add_row("Success Rate", f"{statistics.success_rate_percentage}%")
    streak_text = f"{streak.current} day(s)"
    if streak.is_broken:
        streak_text += f" (broken, {streak.days_missed} day(s) missed)"
    overview.add_row("Streak", streak_text)
    overview.add_row("Best Streak", f"{streak.best} day(s)")
    cons.print(overview)


def _display_problem_words(cons: Console, statistics: LibraryStatistics) -> None:
    table = Table(title="Problem Words")
    table.add_column("Word", style="bold")
    table.add_column("Translation")
    table.add_column("Wrong", style="red", justify="right")
    table.add_column("Correct", style="green", justify="right")
    table.add_column("Set", style="dim")
    for problem in statistics.problem_words:
        table.add_row(
            problem.item.original,
            problem.item.translation,
            str(problem.item.wrong_count),
            str(problem.item.correct_count),
            problem.set_title,
        )
    cons.print(table)


@app.command()
def stats(
    db: Optional[Path] = _db_option,
    owner: Optional[str] = _owner_option,
):
    """Display learning statistics and the daily streak."""
    db_path = _resolve_db_path(db)
    owner_id = _resolve_owner(owner)
    try:
        with VocabDatabase(db_path=db_path) as db_inst:
            db_inst.initialize_schema()
            sets = db_inst.load_sets(owner_id)
            streak_record = db_inst.load_streak(owner_id)
    except DatabaseError as e:
        console.print(f"[bold]A database error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e

    statistics = compute_statistics(sets)
    _display_overview(console, statistics, evaluate_streak(streak_record, date.today()))
    if not statistics.total_items:
        console.print("[yellow]No words found in the library.[/yellow]")
        return
    if statistics.problem_words:
        _display_problem_words(console, statistics)


# ---------------------------------------------------------------------------
# Delete command
# ---------------------------------------------------------------------------


@app.command()
def delete(
    set_ref: str = typer.Argument(  # noqa: B008
        ..., help="Set number from `revocab sets`, or its id."
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
    db: Optional[Path] = _db_option,
    owner: Optional[str] = _owner_option,
):
    """Delete a vocabulary set and its progress."""
    db_path = _resolve_db_path(db)
    owner_id = _resolve_owner(owner)
    try:
        vocab_set = _resolve_set(db_path, owner_id, set_ref)
        if not yes:
            confirmed = typer.confirm(
                f"Delete '{vocab_set.title}' with {len(vocab_set.items)} words?"
            )
            if not confirmed:
                console.print("Delete operation cancelled.")
                raise typer.Exit()
        with VocabDatabase(db_path=db_path) as db_inst:
            db_inst.delete_set(owner_id, vocab_set.id)
    except DatabaseError as e:
        console.print(f"[bold]A database error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e

    console.print(f"[bold green]Deleted set[/bold green] '{vocab_set.title}'.")


# ---------------------------------------------------------------------------
# Restore command
# ---------------------------------------------------------------------------


@app.command()
def restore(
    db: Optional[Path] = _db_option,
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
):
    """Restores the database from the most recent backup."""
    db_path = _resolve_db_path(db)
    console.print(
        "[bold yellow]Attempting to restore database "
        "from backup...[/bold yellow]"
    )

    latest_backup = find_latest_backup(db_path)

    if not latest_backup:
        console.print("[bold red]Error: No backup files found.[/bold red]")
        raise typer.Exit(code=1)

    console.print(f"Found latest backup: [cyan]{latest_backup.name}[/cyan]")

    if not yes:
        confirmed = typer.confirm(
            "Are you sure you want to overwrite the current "
            "database with this backup?"
        )
        if not confirmed:
            console.print("Restore operation cancelled.")
            raise typer.Exit()

    try:
        restore_database(latest_backup, db_path)
        console.print(
            "[bold green]Database successfully restored "
            f"from {latest_backup.name}[/bold green]"
        )
    except OSError as e:
        console.print(
            "[bold red]An error occurred during restore: "
            f"{e}[/bold red]"
        )
        raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application, turning unexpected exceptions into exit code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
