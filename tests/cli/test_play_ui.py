"""
Unit tests for the revocab.cli.play_ui module.
"""

import random
import string
from unittest.mock import MagicMock, patch

import pytest

from revocab.cli.play_ui import _parse_pair, start_play_flow
from revocab.db.database import VocabDatabase
from revocab.models import GameMode, StreakRecord
from revocab.study_manager import StudySessionManager


@pytest.fixture
def mock_db() -> MagicMock:
    """Provides a mock VocabDatabase with an empty streak."""
    db = MagicMock(spec=VocabDatabase)
    db.load_streak.return_value = StreakRecord()
    return db


@pytest.fixture
def manager(mock_db, sample_set, second_set, owner_id) -> StudySessionManager:
    mock_db.load_sets.return_value = [sample_set, second_set]
    manager = StudySessionManager(mock_db, owner_id, rng=random.Random(7))
    manager.load()
    return manager


def _saved_set(mock_db: MagicMock, set_id: str):
    saved_sets = mock_db.save_sets.call_args.args[1]
    return next(s for s in saved_sets if s.id == set_id)


def test_no_active_session(manager, capsys):
    assert start_play_flow(manager) is None
    assert "No session to play." in capsys.readouterr().out


def test_flashcards_all_known_commits_once(manager, mock_db, capsys):
    manager.start_set_session("set-a", GameMode.FLASHCARD)
    # Reveal and grade each of the five cards, then finish.
    inputs = ["", "y"] * 5 + [""]

    with patch("rich.console.Console.input", side_effect=inputs):
        outcome = start_play_flow(manager)

    assert outcome is not None
    assert outcome.score_percentage == 100
    mock_db.save_sets.assert_called_once()
    mock_db.save_streak.assert_called_once()
    assert _saved_set(mock_db, "set-a").last_score == 100
    assert manager.has_active_session is False

    out = capsys.readouterr().out
    assert "Card 1 of 5" in out
    assert "Perfect!" in out
    assert "Progress saved." in out


def test_quit_mid_session_saves_nothing(manager, mock_db, capsys):
    manager.start_set_session("set-a", GameMode.FLASHCARD)

    with patch("rich.console.Console.input", side_effect=["", "y", "q"]):
        outcome = start_play_flow(manager)

    assert outcome is None
    mock_db.save_sets.assert_not_called()
    mock_db.save_streak.assert_not_called()
    assert manager.has_active_session is False
    assert "The unfinished run was not saved." in capsys.readouterr().out


def test_invalid_grade_is_asked_again(manager, mock_db, capsys):
    manager.start_set_session("set-b", GameMode.FLASHCARD)
    inputs = ["", "maybe", "y", "", "n", ""]

    with patch("rich.console.Console.input", side_effect=inputs):
        outcome = start_play_flow(manager)

    assert outcome.score_percentage == 50
    assert "Please enter one of: y, n." in capsys.readouterr().out


def test_repeat_mistakes_then_finish(manager, mock_db):
    manager.start_set_session("set-b", GameMode.FLASHCARD)
    # First round: one unknown, one known. Replay the mistake, then finish.
    inputs = ["", "n", "", "y", "m", "", "y", ""]

    with patch("rich.console.Console.input", side_effect=inputs):
        outcome = start_play_flow(manager)

    assert outcome.score_percentage == 100
    # Once before the replay, once on finish.
    assert mock_db.save_sets.call_count == 2
    saved = _saved_set(mock_db, "set-b")
    assert sum(item.correct_count for item in saved.items) == 1 + 20 + 2
    assert sum(item.wrong_count for item in saved.items) == 4 + 1


def test_quit_during_mistake_replay_keeps_first_round(manager, mock_db, capsys):
    manager.start_set_session("set-b", GameMode.FLASHCARD)
    inputs = ["", "n", "", "y", "m", "q"]

    with patch("rich.console.Console.input", side_effect=inputs):
        outcome = start_play_flow(manager)

    assert outcome is None
    mock_db.save_sets.assert_called_once()
    mock_db.save_streak.assert_called_once()
    saved = _saved_set(mock_db, "set-b")
    assert saved.last_score == 50
    assert sum(item.correct_count for item in saved.items) == 1 + 20 + 1
    assert sum(item.wrong_count for item in saved.items) == 4 + 1
    out = capsys.readouterr().out
    assert "Repeating mistakes" in out
    assert "The unfinished run was not saved." in out


def test_restart_commits_completed_run(manager, mock_db, capsys):
    manager.start_set_session("set-b", GameMode.FLASHCARD)
    # Complete, restart, then quit the second run.
    inputs = ["", "y", "", "y", "r", "q"]

    with patch("rich.console.Console.input", side_effect=inputs):
        outcome = start_play_flow(manager)

    assert outcome is None
    mock_db.save_sets.assert_called_once()
    assert _saved_set(mock_db, "set-b").last_score == 100
    assert "Starting over" in capsys.readouterr().out


def test_multiple_choice_correct_answers(manager, mock_db, capsys):
    engine = manager.start_set_session("set-a", GameMode.MULTIPLE_CHOICE)

    def answer(prompt):
        if "finish" in prompt:
            return ""
        options = list(engine.current_options)
        return str(options.index(engine.correct_answer()) + 1)

    with patch("rich.console.Console.input", side_effect=answer):
        outcome = start_play_flow(manager)

    assert outcome.score_percentage == 100
    saved = _saved_set(mock_db, "set-a")
    assert saved.get_item("a4").correct_count == 1
    assert "Correct!" in capsys.readouterr().out


def test_multiple_choice_wrong_answer_shows_solution(manager, capsys):
    engine = manager.start_set_session("set-b", GameMode.MULTIPLE_CHOICE)

    def answer(prompt):
        if "finish" in prompt:
            return ""
        options = list(engine.current_options)
        wrong = next(o for o in options if o != engine.correct_answer())
        return str(options.index(wrong) + 1)

    with patch("rich.console.Console.input", side_effect=answer):
        outcome = start_play_flow(manager)

    assert outcome.score_percentage == 0
    out = capsys.readouterr().out
    assert "Wrong." in out
    assert "Keep practising!" in out


def test_matching_flow(manager, mock_db, capsys):
    engine = manager.start_set_session("set-a", GameMode.MATCHING)
    mismatched = []

    def answer(prompt):
        if "finish" in prompt:
            return ""
        left = next(
            i for i, item in enumerate(engine.left_column)
            if item.id not in engine.matched_ids
        )
        left_id = engine.left_column[left].id
        if not mismatched:
            # One deliberate mismatch first.
            right = next(
                i for i, item in enumerate(engine.right_column)
                if item.id != left_id
            )
            mismatched.append(left_id)
        else:
            right = next(
                i for i, item in enumerate(engine.right_column)
                if item.id == left_id
            )
        return f"{left + 1}{string.ascii_lowercase[right]}"

    with patch("rich.console.Console.input", side_effect=answer):
        outcome = start_play_flow(manager)

    # Mismatches add wrong deltas but do not lower the score.
    assert outcome.score_percentage == 100
    saved = _saved_set(mock_db, "set-a")
    assert sum(item.wrong_count for item in saved.items) == 1 + 3 + 0 + 0 + 19 + 1
    assert sum(item.correct_count for item in saved.items) == 9 + 5 + 10 + 0 + 81 + 5
    out = capsys.readouterr().out
    assert "Not a pair." in out
    assert "Page 1 of 1" in out


@pytest.mark.parametrize(
    "answer, size, expected",
    [
        ("1a", 3, (0, 0)),
        ("3 c", 3, (2, 2)),
        ("10b", 12, (9, 1)),
        ("4a", 3, None),
        ("a1", 3, None),
        ("", 3, None),
    ],
)
def test_parse_pair(answer, size, expected):
    assert _parse_pair(answer, size) == expected
