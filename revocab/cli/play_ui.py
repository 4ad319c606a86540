"""
Command-line interface for playing quiz sessions.

Every prompt accepts `q` to leave. Leaving in the middle of a run
abandons that run and nothing of it is saved. A completed run is saved as
soon as the user picks what to do next.
"""

import logging
import string
from typing import Dict, Optional, TypeVar

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from revocab.engines import (
    FlashcardEngine,
    GameEngine,
    MatchingEngine,
    MatchResult,
    MultipleChoiceEngine,
)
from revocab.models import SessionOutcome
from revocab.scoring import result_message
from revocab.study_manager import StudySessionManager

logger = logging.getLogger(__name__)
console = Console()

T = TypeVar("T")

QUIT_KEY = "q"


class SessionQuit(Exception):
    """Raised when the user types the quit key in the middle of a run."""


def _ask(prompt: str) -> str:
    answer = console.input(prompt).strip()
    if answer.lower() == QUIT_KEY:
        raise SessionQuit()
    return answer


def _ask_choice(prompt: str, choices: Dict[str, T]) -> T:
    """Prompt until the answer is one of the keys of `choices`."""
    while True:
        answer = _ask(prompt).lower()
        if answer in choices:
            return choices[answer]
        console.print(
            f"[bold red]Please enter one of: {', '.join(choices)}.[/bold red]"
        )


def _play_flashcards(engine: FlashcardEngine) -> None:
    while (item := engine.current_item) is not None:
        console.rule(
            f"[bold]Card {engine.cursor + 1} of {len(engine.deck)}[/bold]"
        )
        console.print(
            Panel(engine.question_text(), title="Prompt", border_style="green")
        )
        _ask("[italic]Press Enter to reveal the answer...[/italic]")
        engine.reveal()
        console.print(
            Panel(engine.answer_text(), title="Answer", border_style="blue")
        )
        known = _ask_choice(
            "[bold]Did you know it? (y/n): [/bold]", {"y": True, "n": False}
        )
        engine.grade(known)
        logger.debug(f"Graded '{item.original}' as {'known' if known else 'unknown'}.")


def _matching_grid(engine: MatchingEngine) -> Table:
    table = Table(
        title=f"Page {engine.page_index + 1} of {len(engine.pages)}",
        show_lines=False,
    )
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Prompt", style="green")
    table.add_column("", style="cyan")
    table.add_column("Answer", style="blue")
    for index, (left, right) in enumerate(
        zip(engine.left_column, engine.right_column)
    ):
        left_text = left.prompt_text(engine.direction)
        right_text = right.answer_text(engine.direction)
        if left.id in engine.matched_ids:
            left_text = f"[dim strike]{left_text}[/dim strike]"
        if right.id in engine.matched_ids:
            right_text = f"[dim strike]{right_text}[/dim strike]"
        table.add_row(
            str(index + 1), left_text, string.ascii_lowercase[index], right_text
        )
    return table


def _parse_pair(answer: str, size: int) -> Optional[tuple]:
    """Parse input such as "2c" into (left index, right index)."""
    answer = answer.replace(" ", "").lower()
    if len(answer) < 2 or not answer[:-1].isdigit():
        return None
    left = int(answer[:-1]) - 1
    right = string.ascii_lowercase.find(answer[-1])
    if not 0 <= left < size or not 0 <= right < size:
        return None
    return left, right


def _play_matching(engine: MatchingEngine) -> None:
    while not engine.is_complete:
        console.print(_matching_grid(engine))
        size = len(engine.left_column)
        pair = _parse_pair(
            _ask("[bold]Match a pair (e.g. 1a): [/bold]"), size
        )
        if pair is None:
            console.print("[bold red]Invalid pair. Use a number and a letter.[/bold red]")
            continue

        left_item = engine.left_column[pair[0]]
        right_item = engine.right_column[pair[1]]
        if not engine.select_left(left_item.id):
            console.print("[yellow]That prompt is already matched.[/yellow]")
            continue
        result = engine.select_right(right_item.id)
        if result == MatchResult.MISMATCH:
            console.print("[bold red]Not a pair.[/bold red]")
            engine.clear_wrong()
        elif result == MatchResult.MATCHED:
            console.print("[green]Matched![/green]")
        elif result == MatchResult.PAGE_COMPLETE:
            console.print("[bold green]Page complete![/bold green]")
        else:
            console.print("[yellow]That answer is already matched.[/yellow]")


def _play_multiple_choice(engine: MultipleChoiceEngine) -> None:
    while (item := engine.current_item) is not None:
        console.rule(
            f"[bold]Question {engine.cursor + 1} of {len(engine.deck)}[/bold]"
        )
        console.print(
            Panel(engine.question_text(), title="Question", border_style="green")
        )
        options = list(engine.current_options)
        for number, option in enumerate(options, start=1):
            console.print(f"  [cyan]{number}[/cyan]. {option}")
        choice = _ask_choice(
            f"[bold]Your answer (1-{len(options)}): [/bold]",
            {str(number): option for number, option in enumerate(options, start=1)},
        )
        feedback = engine.answer(choice)
        if feedback is None:
            continue
        if feedback.is_correct:
            console.print("[green]Correct![/green]")
        else:
            console.print(
                f"[bold red]Wrong.[/bold red] The answer is "
                f"[bold]{feedback.correct_answer}[/bold]."
            )
        if not engine.auto_advance:
            engine.advance()
        logger.debug(f"Answered '{item.original}': {feedback.is_correct}.")


def _play_run(engine: GameEngine) -> None:
    if isinstance(engine, FlashcardEngine):
        _play_flashcards(engine)
    elif isinstance(engine, MatchingEngine):
        _play_matching(engine)
    elif isinstance(engine, MultipleChoiceEngine):
        _play_multiple_choice(engine)
    else:
        raise TypeError(f"Unsupported engine: {type(engine).__name__}")


def _display_result(engine: GameEngine) -> None:
    score = engine.outcome.score_percentage if engine.outcome else 0
    console.print(
        Panel(
            f"[bold]{score}%[/bold]  {result_message(score)}",
            title="Session complete",
            border_style="magenta",
        )
    )


def _ask_next_step(engine: GameEngine) -> str:
    choices = {"": "finish", "r": "restart", QUIT_KEY: "finish"}
    hint = "[bold]r[/bold] restart"
    if isinstance(engine, FlashcardEngine) and engine.mistakes:
        choices["m"] = "mistakes"
        hint = f"[bold]m[/bold] repeat {len(engine.mistakes)} mistakes, " + hint
    while True:
        answer = console.input(f"{hint}, Enter to finish: ").strip().lower()
        if answer in choices:
            return choices[answer]
        console.print("[bold red]Unknown choice.[/bold red]")


def start_play_flow(manager: StudySessionManager) -> Optional[SessionOutcome]:
    """
    Drive the active session of `manager` until the user finishes or quits.

    Returns:
        The outcome committed on finish, or None if the session was
        abandoned.
    """
    engine = manager.engine
    if engine is None:
        console.print("[bold yellow]No session to play.[/bold yellow]")
        return None

    while True:
        try:
            _play_run(engine)
        except SessionQuit:
            manager.abandon_session()
            console.print(
                "[bold yellow]Session abandoned. The unfinished run was not saved.[/bold yellow]"
            )
            return None

        _display_result(engine)
        step = _ask_next_step(engine)
        if step == "mistakes":
            manager.repeat_mistakes()
            console.print("[dim]Progress saved. Repeating mistakes...[/dim]")
        elif step == "restart":
            manager.restart_full_set()
            console.print("[dim]Progress saved. Starting over...[/dim]")
        else:
            outcome = manager.finish_session()
            streak = manager.streak_info()
            console.print(
                f"[bold cyan]Progress saved.[/bold cyan] "
                f"Streak: [bold]{streak.current}[/bold] day(s), "
                f"best {streak.best}."
            )
            return outcome
