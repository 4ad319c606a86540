"""
Tests for revocab.study_manager.StudySessionManager.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from revocab.db.database import VocabDatabase
from revocab.engines import FlashcardEngine, MatchingEngine, MultipleChoiceEngine
from revocab.exceptions import GameEngineError, InvalidEntryStateError
from revocab.models import (
    GameMode,
    RealSetSource,
    StreakRecord,
    ToughAggregateSource,
    VocabItem,
    VocabSet,
)
from revocab.study_manager import StudySessionManager


@pytest.fixture
def mock_db(sample_set, second_set) -> MagicMock:
    db = MagicMock(spec=VocabDatabase)
    db.load_sets.return_value = [sample_set, second_set]
    db.load_streak.return_value = StreakRecord()
    return db


@pytest.fixture
def manager(mock_db, owner_id, rng) -> StudySessionManager:
    study_manager = StudySessionManager(db_manager=mock_db, owner_id=owner_id, rng=rng)
    study_manager.load()
    return study_manager


def _grade_all(engine: FlashcardEngine, unknown_ids=()) -> None:
    while engine.current_item is not None:
        engine.grade(engine.current_item.id not in unknown_ids)


def test_load_reads_owner_sets(manager, mock_db, owner_id):
    mock_db.load_sets.assert_called_once_with(owner_id)
    assert [s.id for s in manager.sets] == ["set-a", "set-b"]
    assert manager.tough_item_count() == 3


@pytest.mark.parametrize(
    "mode, engine_cls",
    [
        (GameMode.FLASHCARD, FlashcardEngine),
        (GameMode.MATCHING, MatchingEngine),
        (GameMode.MULTIPLE_CHOICE, MultipleChoiceEngine),
    ],
)
def test_start_set_session_creates_engine(manager, mode, engine_cls):
    engine = manager.start_set_session("set-a", mode)

    assert isinstance(engine, engine_cls)
    assert manager.engine is engine
    assert manager.source == RealSetSource(set_id="set-a")
    assert len(engine.items) == 5


def test_start_unknown_set_raises(manager):
    with pytest.raises(InvalidEntryStateError):
        manager.start_set_session("missing", GameMode.FLASHCARD)
    assert manager.engine is None


def test_start_empty_set_raises(mock_db, owner_id):
    mock_db.load_sets.return_value = [VocabSet(id="e", owner_id=owner_id, title="Empty")]
    study_manager = StudySessionManager(mock_db, owner_id)
    study_manager.load()
    with pytest.raises(InvalidEntryStateError):
        study_manager.start_set_session("e", GameMode.MATCHING)


def test_start_tough_session_uses_tough_items(manager):
    engine = manager.start_tough_session(GameMode.FLASHCARD)

    assert sorted(item.id for item in engine.items) == ["a2", "a4", "b1"]
    assert isinstance(manager.source, ToughAggregateSource)


def test_start_tough_session_without_tough_items_raises(mock_db, owner_id):
    mastered = VocabSet(
        id="m",
        owner_id=owner_id,
        title="Mastered",
        items=[VocabItem(original="a", translation="b", correct_count=5)],
    )
    mock_db.load_sets.return_value = [mastered]
    study_manager = StudySessionManager(mock_db, owner_id)
    study_manager.load()

    with pytest.raises(InvalidEntryStateError):
        study_manager.start_tough_session(GameMode.MULTIPLE_CHOICE)


def test_finish_session_commits_once(manager, mock_db, owner_id):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    _grade_all(engine, unknown_ids={"a3"})

    outcome = manager.finish_session(today=date(2024, 5, 2))

    assert outcome.score_percentage == 80
    mock_db.save_sets.assert_called_once()
    saved_owner, saved_sets = mock_db.save_sets.call_args.args
    assert saved_owner == owner_id
    assert saved_sets[0].last_score == 80
    assert saved_sets[0].get_item("a3").wrong_count == 1
    assert saved_sets[1].last_score is None
    assert manager.sets is saved_sets
    mock_db.save_streak.assert_called_once_with(
        owner_id, StreakRecord(current=1, best=1, last_activity_date=date(2024, 5, 2))
    )
    assert manager.engine is None

    assert manager.finish_session() is None
    mock_db.save_sets.assert_called_once()


def test_finish_incomplete_session_raises(manager, mock_db):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    engine.grade(True)

    with pytest.raises(GameEngineError):
        manager.finish_session()
    mock_db.save_sets.assert_not_called()


def test_abandon_discards_progress(manager, mock_db):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    engine.grade(True)
    engine.grade(False)

    manager.abandon_session()

    assert manager.engine is None
    assert manager.source is None
    mock_db.save_sets.assert_not_called()
    mock_db.save_streak.assert_not_called()
    assert manager.sets[0].get_item("a1").correct_count == 9


def test_abandon_during_mistake_replay_keeps_first_round(manager, mock_db):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    _grade_all(engine, unknown_ids={"a1"})
    assert manager.repeat_mistakes() is True

    manager.abandon_session()

    mock_db.save_sets.assert_called_once()
    mock_db.save_streak.assert_called_once()
    saved_sets = mock_db.save_sets.call_args.args[1]
    assert saved_sets[0].last_score == 80
    a1 = saved_sets[0].get_item("a1")
    assert (a1.correct_count, a1.wrong_count) == (9, 2)
    assert manager.sets == saved_sets


def test_repeat_mistakes_commits_each_round_once(manager, mock_db):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    _grade_all(engine, unknown_ids={"a1"})
    manager.repeat_mistakes()
    _grade_all(engine)

    outcome = manager.finish_session()

    assert outcome.score_percentage == 100
    assert mock_db.save_sets.call_count == 2
    saved_sets = mock_db.save_sets.call_args.args[1]
    assert saved_sets[0].last_score == 100
    a1 = saved_sets[0].get_item("a1")
    assert (a1.correct_count, a1.wrong_count) == (10, 2)
    a2 = saved_sets[0].get_item("a2")
    assert (a2.correct_count, a2.wrong_count) == (6, 3)


def test_repeat_mistakes_without_mistakes_commits_nothing(manager, mock_db):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    _grade_all(engine)

    assert manager.repeat_mistakes() is False
    mock_db.save_sets.assert_not_called()
    assert engine.is_complete


def test_repeat_mistakes_requires_flashcards(manager):
    manager.start_set_session("set-a", GameMode.MULTIPLE_CHOICE)
    with pytest.raises(GameEngineError):
        manager.repeat_mistakes()


def test_restart_commits_completed_run_first(manager, mock_db):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    _grade_all(engine)

    committed = manager.restart_full_set()

    assert committed.score_percentage == 100
    mock_db.save_sets.assert_called_once()
    assert manager.engine is engine
    assert not engine.is_complete
    assert len(engine.tally) == 0


def test_restart_mid_run_discards_partial_progress(manager, mock_db):
    engine = manager.start_set_session("set-a", GameMode.FLASHCARD)
    engine.grade(True)

    assert manager.restart_full_set() is None
    mock_db.save_sets.assert_not_called()
    assert len(engine.tally) == 0


def test_tough_session_commit_keeps_last_scores(manager, mock_db):
    engine = manager.start_tough_session(GameMode.FLASHCARD)
    _grade_all(engine)

    manager.finish_session()

    saved_sets = mock_db.save_sets.call_args.args[1]
    assert [s.last_score for s in saved_sets] == [60, None]
    assert saved_sets[0].get_item("a4").correct_count == 1
    assert saved_sets[1].get_item("b1").correct_count == 2


def test_add_set_prepends_and_saves(manager, mock_db, owner_id):
    new_set = VocabSet(
        owner_id=owner_id,
        title="New",
        items=[VocabItem(original="sun", translation="Sonne")],
    )

    manager.add_set(new_set)

    saved_sets = mock_db.save_sets.call_args.args[1]
    assert [s.title for s in saved_sets][0] == "New"
    assert len(saved_sets) == 3


def test_add_set_of_other_owner_rejected(manager):
    with pytest.raises(ValueError):
        manager.add_set(VocabSet(owner_id="someone-else", title="X"))


def test_delete_set(manager, mock_db, owner_id):
    mock_db.delete_set.return_value = True

    assert manager.delete_set("set-b") is True

    mock_db.delete_set.assert_called_once_with(owner_id, "set-b")
    assert [s.id for s in manager.sets] == ["set-a"]


def test_streak_info(manager, mock_db):
    mock_db.load_streak.return_value = StreakRecord(
        current=4, best=6, last_activity_date=date(2024, 5, 1)
    )
    info = manager.streak_info(today=date(2024, 5, 4))
    assert info.is_broken
    assert info.days_missed == 2
